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
"""LifecycleOrchestrator — initialize, run, and always tear down a Host.

Flow of :meth:`LifecycleOrchestrator.initialize_and_run`::

    NOT_STARTED -> INITIALIZING -> RUNNING -> STOPPING -> TEARING_DOWN -> COMPLETED
                        |                        ^               |
                        +---- failure / cancel --+               +--> FAULTED

Each phase resolves its own initializers from a fresh scope, so the init and
teardown phases never share SCOPED or TRANSIENT instances. Teardown runs
under its own token: cancelling the run token never cancels teardown.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from enum import Enum
from typing import Any

import structlog

from asyncinit.config.properties.lifecycle import LifecycleProperties
from asyncinit.container.container import Container
from asyncinit.hosting.host import Host
from asyncinit.initialization.root import RootInitializer
from asyncinit.kernel.cancellation import CancellationToken
from asyncinit.kernel.exceptions import (
    ConfigurationException,
    LifecycleAggregateException,
    OperationCancelledException,
    TeardownTimeoutException,
)

logger = structlog.get_logger("asyncinit.lifecycle")

NOT_REGISTERED_MESSAGE = (
    "The async initialization service isn't registered, register it by calling "
    "add_async_initialization() on the container or by adding an async initializer."
)

# Sentinel: use LifecycleProperties.teardown_timeout from the host configuration.
CONFIGURED: Any = object()


class LifecycleState(Enum):
    NOT_STARTED = "not_started"
    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPING = "stopping"
    TEARING_DOWN = "tearing_down"
    COMPLETED = "completed"
    FAULTED = "faulted"


class LifecycleOutcome(Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    AGGREGATE = "aggregate"


class LifecycleOrchestrator:
    """Runs the async initialization lifecycle of one :class:`Host`.

    Use one orchestrator per ``initialize_and_run`` call; :attr:`state` and
    :attr:`outcome` describe that call.
    """

    def __init__(self, host: Host, properties: LifecycleProperties | None = None) -> None:
        self._host = host
        self._properties = properties
        self._state = LifecycleState.NOT_STARTED
        self._outcome: LifecycleOutcome | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def outcome(self) -> LifecycleOutcome | None:
        return self._outcome

    @property
    def properties(self) -> LifecycleProperties:
        if self._properties is None:
            self._properties = self._host.config.bind(LifecycleProperties)
        return self._properties

    # ------------------------------------------------------------------
    # Single phases
    # ------------------------------------------------------------------

    async def initialize(self, token: CancellationToken | None = None) -> None:
        """Run the initialization phase only, in an isolated scope."""
        container = self._require_lifecycle_support()
        async with container.create_scope() as scope:
            await scope.resolve(RootInitializer).initialize(token or CancellationToken())

    async def teardown(self, token: CancellationToken | None = None) -> None:
        """Run the teardown phase only, in an isolated scope."""
        container = self._require_lifecycle_support()
        async with container.create_scope() as scope:
            await scope.resolve(RootInitializer).teardown(token or CancellationToken())

    # ------------------------------------------------------------------
    # Full lifecycle
    # ------------------------------------------------------------------

    async def initialize_and_run(
        self,
        teardown_timeout: timedelta | float | None = CONFIGURED,
        token: CancellationToken | None = None,
        teardown_token: CancellationToken | None = None,
    ) -> None:
        """Initialize, run the host until shutdown, tear down, then dispose the host.

        Args:
            teardown_timeout: Bound for the teardown phase; ``None`` disables it.
                Defaults to ``asyncinit.lifecycle.teardown_timeout``.
            token: Cancels initialization and the running workload.
            teardown_token: Optionally aborts teardown itself.

        Raises:
            ConfigurationException: Lifecycle support was never registered.
            OperationCancelledException: *token* was cancelled.
            TeardownTimeoutException: Teardown exceeded *teardown_timeout*.
            LifecycleAggregateException: Both the init/run phase and teardown failed.
        """
        token = token or CancellationToken()
        timeout = self._resolve_timeout(teardown_timeout)
        self._require_lifecycle_support()

        try:
            if token.is_cancelled:
                self._transition(LifecycleState.FAULTED)
                self._outcome = LifecycleOutcome.CANCELLED
                logger.warning("lifecycle_cancelled_before_start")
                token.raise_if_cancelled()

            earlier = await self._run_until_shutdown(token)
            teardown_error = await self._teardown_within(timeout, teardown_token)
            self._finish(earlier, teardown_error)
        finally:
            await self._host.aclose()

    async def _run_until_shutdown(self, token: CancellationToken) -> BaseException | None:
        """INITIALIZING -> RUNNING -> STOPPING. Returns the error that ended the phase."""
        self._transition(LifecycleState.INITIALIZING)
        try:
            await self.initialize(token)
            self._transition(LifecycleState.RUNNING)
            await self._host.start(token)
            await self._host.wait_for_shutdown(token)
            token.raise_if_cancelled()
        except (Exception, asyncio.CancelledError) as exc:
            was_running = self._state is LifecycleState.RUNNING
            self._transition(LifecycleState.STOPPING)
            if was_running:
                await self._host.stop()
            logger.warning("lifecycle_run_ended", error=str(exc), error_type=type(exc).__name__)
            return exc

        self._transition(LifecycleState.STOPPING)
        return None

    async def _teardown_within(
        self,
        timeout: timedelta | None,
        teardown_token: CancellationToken | None,
    ) -> BaseException | None:
        """TEARING_DOWN. Races teardown against its own token; returns its error."""
        self._transition(LifecycleState.TEARING_DOWN)

        timeout_token = CancellationToken()
        if timeout is not None:
            timeout_token.cancel_after(timeout)
        token = CancellationToken.linked(timeout_token, teardown_token)

        teardown = asyncio.ensure_future(self.teardown(token))
        token_fired = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({teardown, token_fired}, return_when=asyncio.FIRST_COMPLETED)
            if not teardown.done():
                # The steps ignored the token; stop waiting for them.
                teardown.cancel()
                await asyncio.wait({teardown})
        finally:
            token_fired.cancel()
            if not teardown.done():
                teardown.cancel()
                await asyncio.wait({teardown})
            token.close()
            timeout_token.close()

        error = None if teardown.cancelled() else teardown.exception()
        interrupted = teardown.cancelled() or isinstance(error, OperationCancelledException)

        if interrupted and timeout_token.is_cancelled and timeout is not None:
            timeout_error = TeardownTimeoutException(timeout)
            timeout_error.__cause__ = error
            logger.error("teardown_timed_out", timeout_s=timeout.total_seconds())
            return timeout_error
        if teardown.cancelled():
            return OperationCancelledException()
        return error

    def _finish(self, earlier: BaseException | None, teardown_error: BaseException | None) -> None:
        """Resolve TEARING_DOWN into COMPLETED or FAULTED, raising the outcome."""
        if earlier is None and teardown_error is None:
            self._transition(LifecycleState.COMPLETED)
            self._outcome = LifecycleOutcome.COMPLETED
            logger.info("lifecycle_completed")
            return

        self._transition(LifecycleState.FAULTED)
        if earlier is not None and teardown_error is not None:
            self._outcome = LifecycleOutcome.AGGREGATE
            logger.error("lifecycle_faulted", outcome=self._outcome.value)
            raise LifecycleAggregateException((earlier, teardown_error))

        cause = earlier if earlier is not None else teardown_error
        assert cause is not None
        self._outcome = _classify(cause)
        logger.error("lifecycle_faulted", outcome=self._outcome.value, error_type=type(cause).__name__)
        raise cause

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_lifecycle_support(self) -> Container:
        container = self._host.services
        if not container.is_registered(RootInitializer):
            raise ConfigurationException(NOT_REGISTERED_MESSAGE)
        return container

    def _resolve_timeout(self, value: timedelta | float | None) -> timedelta | None:
        if value is CONFIGURED:
            return self.properties.teardown_timeout_delta
        if value is None or isinstance(value, timedelta):
            return value
        return timedelta(seconds=float(value))

    def _transition(self, state: LifecycleState) -> None:
        logger.debug("lifecycle_state_changed", previous=self._state.value, state=state.value)
        self._state = state


def _classify(cause: BaseException) -> LifecycleOutcome:
    if isinstance(cause, (OperationCancelledException, asyncio.CancelledError)):
        return LifecycleOutcome.CANCELLED
    if isinstance(cause, TeardownTimeoutException):
        return LifecycleOutcome.TIMED_OUT
    return LifecycleOutcome.FAILED


# ----------------------------------------------------------------------
# Functional entry points
# ----------------------------------------------------------------------


async def initialize(host: Host, token: CancellationToken | None = None) -> None:
    """Run every registered initializer of *host* in registration order."""
    await LifecycleOrchestrator(host).initialize(token)


async def teardown(host: Host, token: CancellationToken | None = None) -> None:
    """Run the teardown of every teardown-capable initializer of *host*, in reverse order."""
    await LifecycleOrchestrator(host).teardown(token)


async def initialize_and_run(
    host: Host,
    teardown_timeout: timedelta | float | None = CONFIGURED,
    token: CancellationToken | None = None,
    teardown_token: CancellationToken | None = None,
) -> None:
    """Initialize *host*, run it until shutdown, tear down, and dispose it."""
    await LifecycleOrchestrator(host).initialize_and_run(teardown_timeout, token, teardown_token)
