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
"""Resolution scopes — isolated lifetimes for SCOPED and TRANSIENT services."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, TypeVar

from asyncinit.container.lifecycle import is_releasable, release
from asyncinit.container.registry import Registration
from asyncinit.kernel.exceptions import ConfigurationException, ResourceDisposedException

if TYPE_CHECKING:
    from asyncinit.container.container import Container

T = TypeVar("T")


class ServiceScope:
    """An isolated resolution context created by :meth:`Container.create_scope`.

    SCOPED services are cached per scope. Every SCOPED or TRANSIENT instance the
    container creates inside the scope is released, in reverse creation order,
    when the scope closes. Singletons belong to the container root and are
    never released here.

    Usage::

        async with container.create_scope() as scope:
            root = scope.resolve(RootInitializer)
            await root.initialize(token)
    """

    def __init__(self, container: Container, *, root: bool = False) -> None:
        self._container = container
        self._root = root
        self._instances: dict[Registration, Any] = {}
        self._owned: list[Any] = []
        self._closed = False

    @property
    def container(self) -> Container:
        return self._container

    @property
    def is_root(self) -> bool:
        return self._root

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, service_type: type[T]) -> T:
        """Resolve a single service of *service_type* within this scope."""
        self._check_open()
        return self._container._resolve(service_type, self)

    def resolve_all(self, service_type: type[T]) -> list[T]:
        """Resolve every registration of *service_type*, in registration order."""
        self._check_open()
        return self._container._resolve_all(service_type, self)

    def resolve_by_name(self, name: str) -> Any:
        self._check_open()
        return self._container._resolve_named(name, self)

    # ------------------------------------------------------------------
    # Instance bookkeeping (used by Container)
    # ------------------------------------------------------------------

    def _cached(self, reg: Registration) -> Any:
        return self._instances.get(reg)

    def _cache(self, reg: Registration, instance: Any) -> None:
        self._instances[reg] = instance

    def _track(self, instance: Any) -> None:
        if is_releasable(instance) and not any(owned is instance for owned in self._owned):
            self._owned.append(instance)

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release owned instances in reverse creation order. Idempotent.

        Every instance is released even if an earlier one fails; the first
        failure is raised afterwards.
        """
        if self._closed:
            return
        self._closed = True
        owned, self._owned = self._owned, []
        self._instances.clear()

        errors: list[Exception] = []
        for instance in reversed(owned):
            try:
                await release(instance)
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise errors[0]

    def close(self) -> None:
        """Synchronous release; only ``close()`` hooks returning no awaitable are allowed."""
        if self._closed:
            return
        self._closed = True
        owned, self._owned = self._owned, []
        self._instances.clear()

        for instance in reversed(owned):
            hook = getattr(instance, "close", None)
            if hook is None or inspect.iscoroutinefunction(hook):
                raise ConfigurationException(
                    f"'{type(instance).__name__}' only supports asynchronous release; "
                    "close the scope with 'async with' or 'await scope.aclose()'"
                )
            hook()

    async def __aenter__(self) -> ServiceScope:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __enter__(self) -> ServiceScope:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise ResourceDisposedException("ServiceScope")
        if self._container.disposed:
            raise ResourceDisposedException("Container")
