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
"""RootInitializer — runs registered steps one at a time, stopping at the first failure."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence

import structlog

from asyncinit.initialization.steps import AsyncInitializer
from asyncinit.kernel.cancellation import CancellationToken
from asyncinit.kernel.exceptions import OperationCancelledException

logger = structlog.get_logger("asyncinit.initialization")

_Operation = Callable[[CancellationToken], Awaitable[None]]


class RootInitializer:
    """Sequential runner over the ordered initializer sequence.

    Resolved fresh from a scope for every phase, so the step list is captured
    once per phase and never re-queried mid-phase. Steps already completed are
    not rolled back; that is left to teardown.
    """

    def __init__(self, initializers: list[AsyncInitializer]) -> None:
        self._initializers = list(initializers)

    @property
    def initializers(self) -> list[AsyncInitializer]:
        return list(self._initializers)

    async def initialize(self, token: CancellationToken | None = None) -> None:
        """Run every initializer in registration order."""
        steps = [(index, step, step.initialize) for index, step in enumerate(self._initializers)]
        await self._run("initialization", steps, token or CancellationToken())

    async def teardown(self, token: CancellationToken | None = None) -> None:
        """Run the teardown of every teardown-capable step, last registered first."""
        steps: list[tuple[int, AsyncInitializer, _Operation]] = []
        for index, step in enumerate(self._initializers):
            view = step.as_teardown()
            if view is not None:
                steps.append((index, step, view.teardown))
        steps.reverse()
        await self._run("teardown", steps, token or CancellationToken())

    async def _run(
        self,
        phase: str,
        steps: Sequence[tuple[int, AsyncInitializer, _Operation]],
        token: CancellationToken,
    ) -> None:
        log = logger.bind(phase=phase)
        log.info("async_phase_started", steps=len(steps))

        try:
            for index, step, operation in steps:
                token.raise_if_cancelled()
                initializer_type = type(step).__name__
                log.info("step_started", index=index, initializer=initializer_type)
                try:
                    await operation(token)
                except Exception as exc:
                    log.error(
                        "step_failed",
                        index=index,
                        initializer=initializer_type,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    raise
                log.info("step_completed", index=index, initializer=initializer_type)

            log.info("async_phase_completed")
        except OperationCancelledException:
            log.warning("async_phase_cancelled")
            raise
        except Exception as exc:
            log.error("async_phase_failed", error=str(exc), error_type=type(exc).__name__)
            raise
