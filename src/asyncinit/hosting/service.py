# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Hosted services — the workload a Host starts after initialization."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from asyncinit.kernel.cancellation import CancellationToken


class HostedService(ABC):
    """A long-running component started and stopped by the host."""

    @abstractmethod
    async def start(self, token: CancellationToken) -> None: ...

    @abstractmethod
    async def stop(self, token: CancellationToken) -> None: ...


class BackgroundService(HostedService):
    """Runs :meth:`execute` as a background task for the lifetime of the host.

    ``start`` returns as soon as the task is scheduled. An exception escaping
    ``execute`` is a workload fault: the host records it and shuts down.
    """

    def __init__(self) -> None:
        self._task: asyncio.Task[None] | None = None
        self._stopping_token = CancellationToken()

    @property
    def execute_task(self) -> asyncio.Task[None] | None:
        return self._task

    @abstractmethod
    async def execute(self, stopping_token: CancellationToken) -> None:
        """The service body. Should return promptly once *stopping_token* fires."""

    async def start(self, token: CancellationToken) -> None:
        token.raise_if_cancelled()
        self._stopping_token = CancellationToken()
        self._task = asyncio.create_task(
            self.execute(self._stopping_token),
            name=f"background-{type(self).__name__}",
        )

    async def stop(self, token: CancellationToken) -> None:
        if self._task is None:
            return
        self._stopping_token.cancel()
        if not self._task.done():
            stop_requested = asyncio.ensure_future(token.wait())
            try:
                await asyncio.wait({self._task, stop_requested}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                stop_requested.cancel()
            if not self._task.done():
                self._task.cancel()
                await asyncio.wait({self._task})
