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
"""Host — owns the container and the hosted services of one application."""

from __future__ import annotations

import asyncio

import structlog

from asyncinit.container.container import Container
from asyncinit.container.types import Scope
from asyncinit.core.config import Config
from asyncinit.hosting.lifetime import ApplicationLifetime
from asyncinit.hosting.service import BackgroundService, HostedService
from asyncinit.kernel.cancellation import CancellationToken
from asyncinit.kernel.exceptions import ResourceDisposedException

logger = structlog.get_logger("asyncinit.hosting")


def add_hosted_service(container: Container, service_type: type[HostedService]) -> Container:
    """Register a hosted service. Services start in registration order."""
    container.register(HostedService, service_type, scope=Scope.SINGLETON)
    return container


class Host:
    """A started-then-stopped workload around a DI container.

    Lifecycle::

        await host.start(token)
        await host.wait_for_shutdown(token)   # stops the services
        await host.aclose()                   # releases the container, once

    The container, the configuration and the :class:`ApplicationLifetime` are
    registered as singletons so services can depend on them.
    """

    def __init__(self, container: Container, config: Config | None = None) -> None:
        self._container = container
        self._config = config if config is not None else Config({})
        self._lifetime = ApplicationLifetime()
        self._services: list[HostedService] = []
        self._fault: BaseException | None = None
        self._started = False
        self._stopped = False
        self._disposed = False

        container.register_instance(Config, self._config)
        container.register_instance(ApplicationLifetime, self._lifetime)
        container.register_instance(Container, container)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def services(self) -> Container:
        """The application's service container."""
        if self._disposed:
            raise ResourceDisposedException("Host")
        return self._container

    @property
    def config(self) -> Config:
        return self._config

    @property
    def lifetime(self) -> ApplicationLifetime:
        return self._lifetime

    @property
    def fault(self) -> BaseException | None:
        """The first unhandled workload error, if any."""
        return self._fault

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, token: CancellationToken | None = None) -> None:
        """Start every hosted service in registration order.

        Fail-fast: if a service fails to start or *token* is cancelled midway,
        services already started are stopped in reverse order and the error
        propagates.
        """
        token = token or CancellationToken()
        token.raise_if_cancelled()
        if self._disposed:
            raise ResourceDisposedException("Host")

        logger.info("host_starting")
        try:
            for service in self._container.resolve_all(HostedService):
                token.raise_if_cancelled()
                await service.start(token)
                self._services.append(service)
                if isinstance(service, BackgroundService) and service.execute_task is not None:
                    service.execute_task.add_done_callback(self._on_background_done)
        except (Exception, asyncio.CancelledError):
            await self.stop()
            raise

        self._started = True
        self._lifetime.notify_started()
        logger.info("host_started", services=len(self._services))

    async def wait_for_shutdown(self, token: CancellationToken | None = None) -> None:
        """Wait for a stop request, a workload fault or *token*, then stop.

        Re-raises the first workload fault after the services have stopped.
        Cancellation of *token* is treated as a stop request, not an error.
        """
        token = token or CancellationToken()
        unregister = token.register(self._lifetime.stop_application)
        try:
            await self._lifetime.application_stopping.wait()
        finally:
            unregister()

        await self.stop()
        if self._fault is not None:
            raise self._fault

    async def stop(self, token: CancellationToken | None = None) -> None:
        """Stop started services in reverse order. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        token = token or CancellationToken()
        self._lifetime.stop_application()

        logger.info("host_stopping", services=len(self._services))
        for service in reversed(self._services):
            try:
                await service.stop(token)
            except Exception as exc:
                logger.error(
                    "hosted_service_stop_failed",
                    service=type(service).__name__,
                    error=str(exc),
                )
        self._lifetime.notify_stopped()
        logger.info("host_stopped")

    async def run(self, token: CancellationToken | None = None) -> None:
        """Start, wait for shutdown, and release the host."""
        try:
            await self.start(token)
            await self.wait_for_shutdown(token)
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Release the host's resources exactly once."""
        if self._disposed:
            return
        self._disposed = True
        if self._started and not self._stopped:
            await self.stop()
        await self._container.aclose()
        logger.debug("host_disposed")

    async def __aenter__(self) -> Host:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _on_background_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error("background_service_faulted", task=task.get_name(), error=str(exc))
        if self._fault is None:
            self._fault = exc
        self._lifetime.stop_application()
