"""Unified exception hierarchy for asyncinit.

All library exceptions inherit from AsyncInitException, enabling unified
error handling across modules.

Categories:
- ConfigurationException: lifecycle support was never registered
- Cancellation and timeout: OperationCancelledException, OperationTimeoutException
- LifecycleAggregateException: several independent causes reported together
- ResourceDisposedException: a released host, container or scope was used
- ServiceResolutionException: dependency resolution failures
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta


# =============================================================================
# Base Exception
# =============================================================================


class AsyncInitException(Exception):
    """Base exception for all asyncinit errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "TEARDOWN_TIMEOUT").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationException(AsyncInitException):
    """The application was wired incorrectly. Never retried."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="CONFIGURATION", context=context)


# =============================================================================
# Cancellation and timeouts
# =============================================================================


class OperationCancelledException(AsyncInitException):
    """A cancellation token was cancelled while an operation was in progress."""

    def __init__(self, message: str = "The operation was cancelled.") -> None:
        super().__init__(message, code="CANCELLED")


class OperationTimeoutException(AsyncInitException):
    """Operation exceeded its allowed time limit."""


class TeardownTimeoutException(OperationTimeoutException):
    """Teardown did not finish within the configured bound.

    Raised instead of a cancellation even though the timeout is enforced by
    cancelling the teardown token.
    """

    def __init__(self, timeout: timedelta) -> None:
        self.timeout = timeout
        super().__init__(
            f"Async teardown did not complete within {timeout.total_seconds():g}s",
            code="TEARDOWN_TIMEOUT",
            context={"timeout_s": timeout.total_seconds()},
        )


# =============================================================================
# Aggregates
# =============================================================================


class LifecycleAggregateException(AsyncInitException):
    """Two or more independent lifecycle failures, in the order they occurred.

    ``causes[0]`` is the failure of the initialization/run phase and
    ``causes[1]`` the failure of the teardown phase.
    """

    def __init__(self, causes: Iterable[BaseException]) -> None:
        self.causes: tuple[BaseException, ...] = tuple(causes)
        details = "; ".join(f"{type(c).__name__}: {c}" for c in self.causes)
        super().__init__(
            f"{len(self.causes)} lifecycle failures occurred ({details})",
            code="LIFECYCLE_AGGREGATE",
        )


# =============================================================================
# Disposal
# =============================================================================


class ResourceDisposedException(AsyncInitException):
    """A host, container or scope was used after it had been released."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(
            f"Cannot access a disposed object: {resource}",
            code="DISPOSED",
            context={"resource": resource},
        )


# =============================================================================
# Dependency resolution
# =============================================================================


class ServiceResolutionException(AsyncInitException):
    """Fatal error while resolving a service from the container."""

    def __init__(self, message: str, service: str = "") -> None:
        self.service = service
        super().__init__(message, code="RESOLUTION", context={"service": service})
