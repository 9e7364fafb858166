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
"""Cooperative cancellation tokens for asyncio code.

A token is handed to every lifecycle operation. Operations observe it by
calling :meth:`CancellationToken.raise_if_cancelled`, awaiting
:meth:`CancellationToken.wait` or sleeping with :meth:`CancellationToken.sleep`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import timedelta

from asyncinit.kernel.exceptions import OperationCancelledException


class CancellationToken:
    """One-shot cancellation signal backed by :class:`asyncio.Event`.

    Usage::

        token = CancellationToken()
        token.cancel_after(timedelta(seconds=5))
        await step.teardown(token)
    """

    def __init__(self, cancelled: bool = False) -> None:
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._timer: asyncio.TimerHandle | None = None
        self._detach: list[Callable[[], None]] = []
        if cancelled:
            self._event.set()

    @classmethod
    def linked(cls, *tokens: CancellationToken | None) -> CancellationToken:
        """Create a token that is cancelled as soon as any of *tokens* is."""
        child = cls()
        for parent in tokens:
            if parent is not None:
                child._detach.append(parent.register(child.cancel))
        return child

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent; callbacks fire exactly once."""
        if self._event.is_set():
            return
        self._event.set()
        self._cancel_timer()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def cancel_after(self, delay: timedelta | float) -> None:
        """Schedule :meth:`cancel` on the running loop after *delay*."""
        seconds = delay.total_seconds() if isinstance(delay, timedelta) else float(delay)
        self._cancel_timer()
        if self.is_cancelled:
            return
        self._timer = asyncio.get_running_loop().call_later(seconds, self.cancel)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* on cancellation and return a function that unregisters it.

        If the token is already cancelled the callback runs immediately.
        """
        if self.is_cancelled:
            callback()
            return _noop

        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise OperationCancelledException()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    async def sleep(self, delay: timedelta | float) -> None:
        """Sleep for *delay*, raising OperationCancelledException if cancelled first."""
        seconds = delay.total_seconds() if isinstance(delay, timedelta) else float(delay)
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except TimeoutError:
            return
        raise OperationCancelledException()

    def close(self) -> None:
        """Stop the pending timer and detach from parent tokens."""
        self._cancel_timer()
        detach, self._detach = self._detach, []
        for unregister in detach:
            unregister()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"CancellationToken({state})"


def _noop() -> None:
    return None
