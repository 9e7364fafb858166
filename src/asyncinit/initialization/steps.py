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
"""Initialization step contracts.

An :class:`AsyncInitializer` performs startup work. An :class:`AsyncTeardown`
is an initializer that also performs shutdown work; there is no separate
registration for teardown. Callers ask a step for its teardown view through
:meth:`AsyncInitializer.as_teardown` instead of inspecting its type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence

from asyncinit.kernel.cancellation import CancellationToken

StepCallable = Callable[[], Awaitable[None]]


class AsyncInitializer(ABC):
    """A unit of asynchronous startup work."""

    @abstractmethod
    async def initialize(self, token: CancellationToken) -> None:
        """Perform async initialization."""

    def as_teardown(self) -> AsyncTeardown | None:
        """Return the teardown view of this step, or None if it has none."""
        return None

    @property
    def supports_teardown(self) -> bool:
        return self.as_teardown() is not None


class AsyncTeardown(AsyncInitializer):
    """An initializer that also performs asynchronous teardown."""

    @abstractmethod
    async def teardown(self, token: CancellationToken) -> None:
        """Perform async teardown."""

    def as_teardown(self) -> AsyncTeardown | None:
        return self


class DelegateInitializer(AsyncInitializer):
    """Adapts plain coroutine functions into a step.

    The teardown view exists only when a teardown callable was supplied.
    """

    def __init__(self, initializer: StepCallable, teardown: StepCallable | None = None) -> None:
        self._initializer = initializer
        self._teardown = teardown

    async def initialize(self, token: CancellationToken) -> None:
        await self._initializer()

    def as_teardown(self) -> AsyncTeardown | None:
        if self._teardown is None:
            return None
        return _DelegateTeardown(self, self._teardown)

    def __repr__(self) -> str:
        name = getattr(self._initializer, "__qualname__", repr(self._initializer))
        return f"DelegateInitializer({name})"


class _DelegateTeardown(AsyncTeardown):
    def __init__(self, owner: DelegateInitializer, teardown: StepCallable) -> None:
        self._owner = owner
        self._teardown = teardown

    async def initialize(self, token: CancellationToken) -> None:
        await self._owner.initialize(token)

    async def teardown(self, token: CancellationToken) -> None:
        await self._teardown()


class CompositeInitializer(AsyncInitializer):
    """Several implementations of one registered type, run as a single logical step.

    Children initialize in registration order and tear down in reverse order;
    both stop at the first failure.
    """

    def __init__(self, children: Sequence[AsyncInitializer]) -> None:
        self._children = list(children)

    @property
    def children(self) -> list[AsyncInitializer]:
        return list(self._children)

    async def initialize(self, token: CancellationToken) -> None:
        for child in self._children:
            token.raise_if_cancelled()
            await child.initialize(token)

    def as_teardown(self) -> AsyncTeardown | None:
        teardowns = [t for t in (c.as_teardown() for c in self._children) if t is not None]
        if not teardowns:
            return None
        return _CompositeTeardown(self, teardowns)

    def __repr__(self) -> str:
        names = ", ".join(type(c).__name__ for c in self._children)
        return f"CompositeInitializer([{names}])"


class _CompositeTeardown(AsyncTeardown):
    def __init__(self, owner: CompositeInitializer, teardowns: list[AsyncTeardown]) -> None:
        self._owner = owner
        self._teardowns = teardowns

    async def initialize(self, token: CancellationToken) -> None:
        await self._owner.initialize(token)

    async def teardown(self, token: CancellationToken) -> None:
        for child in reversed(self._teardowns):
            token.raise_if_cancelled()
            await child.teardown(token)
