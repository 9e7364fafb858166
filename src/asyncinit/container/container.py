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
"""Lightweight DI container with type-hint based resolution and scoped lifetimes."""

from __future__ import annotations

import difflib
import inspect
import types
import typing
from collections.abc import Callable
from typing import Any, TypeVar, Union, cast, get_args, get_origin

from asyncinit.container.exceptions import (
    CircularDependencyError,
    NoSuchServiceError,
    NoUniqueServiceError,
    ScopeValidationError,
)
from asyncinit.container.registry import Registration
from asyncinit.container.scope import ServiceScope
from asyncinit.container.types import Scope
from asyncinit.kernel.exceptions import ResourceDisposedException

T = TypeVar("T")


class Container:
    """Dependency injection container.

    Supports constructor injection via type hints, factory and instance
    registrations, SINGLETON / SCOPED / TRANSIENT lifetimes, several
    registrations per service type (kept in insertion order), ``Optional[T]``
    and ``list[T]`` parameter types, and circular dependency detection.

    With ``validate_scopes=True`` the container refuses to hand out SCOPED
    services from the root, which catches singletons that capture a scoped
    dependency.
    """

    def __init__(self, *, validate_scopes: bool = False) -> None:
        self._registrations: dict[type, list[Registration]] = {}
        self._named: dict[str, Registration] = {}
        self._resolving: dict[Registration, None] = {}  # insertion-ordered, O(1) lookup
        self._validate_scopes = validate_scopes
        self._disposed = False
        self._root = ServiceScope(self, root=True)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        service_type: type,
        impl_type: type | None = None,
        *,
        scope: Scope = Scope.SINGLETON,
        factory: Callable[[ServiceScope], Any] | None = None,
        instance: Any = None,
        name: str = "",
    ) -> Registration:
        """Register a service. Repeated registrations of one type are all kept."""
        self._check_not_disposed()
        reg = Registration(
            service_type=service_type,
            impl_type=impl_type if factory is None and instance is None else None,
            scope=Scope.SINGLETON if instance is not None else scope,
            factory=factory,
            instance=instance,
            external=instance is not None,
            name=name,
        )
        self._registrations.setdefault(service_type, []).append(reg)
        if name:
            self._named[name] = reg
        return reg

    def register_instance(self, service_type: type, instance: Any, *, name: str = "") -> Registration:
        """Register a pre-built singleton. The container never releases it."""
        return self.register(service_type, instance=instance, name=name)

    def register_factory(
        self,
        service_type: type,
        factory: Callable[[ServiceScope], Any],
        *,
        scope: Scope = Scope.TRANSIENT,
        name: str = "",
    ) -> Registration:
        """Register a factory called with the resolving scope."""
        return self.register(service_type, scope=scope, factory=factory, name=name)

    def is_registered(self, service_type: type) -> bool:
        return bool(self._registrations.get(service_type))

    def registrations_for(self, service_type: type) -> list[Registration]:
        return list(self._registrations.get(service_type, []))

    def contains(self, name: str) -> bool:
        """Check if a named service exists."""
        return name in self._named

    # ------------------------------------------------------------------
    # Resolution from the root
    # ------------------------------------------------------------------

    def resolve(self, service_type: type[T]) -> T:
        """Resolve an instance of the given type from the root scope."""
        return self._root.resolve(service_type)

    def resolve_all(self, service_type: type[T]) -> list[T]:
        """Resolve all registrations of a type from the root scope."""
        return self._root.resolve_all(service_type)

    def resolve_by_name(self, name: str) -> Any:
        """Resolve a service by its registered name."""
        return self._root.resolve_by_name(name)

    def create_scope(self) -> ServiceScope:
        """Create a fresh resolution scope."""
        self._check_not_disposed()
        return ServiceScope(self)

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def validate_scopes(self) -> bool:
        return self._validate_scopes

    async def aclose(self) -> None:
        """Release singletons and root-resolved services the container created."""
        if self._disposed:
            return
        self._disposed = True
        await self._root.aclose()

    # ------------------------------------------------------------------
    # Resolution engine (driven by ServiceScope)
    # ------------------------------------------------------------------

    def _resolve(self, service_type: type[T], scope: ServiceScope) -> T:
        regs = self._registrations.get(service_type)
        if not regs:
            raise NoSuchServiceError(
                service_type=service_type,
                suggestions=self._get_similar_type_names(getattr(service_type, "__name__", "")),
            )
        if len(regs) > 1:
            raise NoUniqueServiceError(
                service_type=service_type,
                candidates=[r.display_name for r in regs],
            )
        return cast(T, self._resolve_registration(regs[0], scope))

    def _resolve_all(self, service_type: type[T], scope: ServiceScope) -> list[T]:
        regs = list(self._registrations.get(service_type, []))
        return [self._resolve_registration(reg, scope) for reg in regs]

    def _resolve_named(self, name: str, scope: ServiceScope) -> Any:
        if name not in self._named:
            raise NoSuchServiceError(service_name=name, suggestions=list(self._named.keys()))
        return self._resolve_registration(self._named[name], scope)

    def _resolve_registration(self, reg: Registration, scope: ServiceScope) -> Any:
        """Resolve a single registration, honouring its lifetime."""
        if reg.scope == Scope.SINGLETON:
            if reg.instance is not None:
                return reg.instance
            # Singletons and their dependencies always come from the root.
            instance = self._create_instance(reg, self._root)
            reg.instance = instance
            self._root._track(instance)
            return instance

        if reg.scope == Scope.SCOPED:
            if scope.is_root and self._validate_scopes:
                consumer = next(reversed(self._resolving), None)
                raise ScopeValidationError(
                    service=reg.display_name,
                    required_by=consumer.display_name if consumer is not None else None,
                )
            existing = scope._cached(reg)
            if existing is not None:
                return existing
            instance = self._create_instance(reg, scope)
            scope._cache(reg, instance)
            self._track(instance, scope)
            return instance

        instance = self._create_instance(reg, scope)
        self._track(instance, scope)
        return instance

    def _track(self, instance: Any, scope: ServiceScope) -> None:
        # A factory may hand back a singleton or an external instance; those
        # are owned by the root, or by nobody.
        for regs in self._registrations.values():
            if any(r.scope == Scope.SINGLETON and r.instance is instance for r in regs):
                return
        scope._track(instance)

    def _create_instance(self, reg: Registration, scope: ServiceScope) -> Any:
        """Create an instance from a factory or by constructor injection."""
        if reg in self._resolving:
            chain = [r.display_name for r in self._resolving]
            raise CircularDependencyError(chain=chain, current=reg.display_name)
        self._resolving[reg] = None
        try:
            if reg.factory is not None:
                return reg.factory(scope)
            return self._construct(reg.impl_type or reg.service_type, scope)
        finally:
            self._resolving.pop(reg, None)

    def _construct(self, impl_type: type, scope: ServiceScope) -> Any:
        init = impl_type.__init__  # type: ignore[misc]
        if init is object.__init__:
            return impl_type()

        hints = typing.get_type_hints(init)
        hints.pop("return", None)
        sig = inspect.signature(init)

        kwargs: dict[str, Any] = {}
        for param_name, param_type in hints.items():
            param = sig.parameters.get(param_name)
            has_default = param is not None and param.default is not inspect.Parameter.empty
            try:
                kwargs[param_name] = self._resolve_param(param_type, scope)
            except (NoSuchServiceError, NoUniqueServiceError):
                if has_default:
                    continue
                raise NoSuchServiceError(
                    service_type=param_type if isinstance(param_type, type) else None,
                    required_by=f"{impl_type.__qualname__}.__init__()",
                    parameter=f"{param_name}: {getattr(param_type, '__name__', repr(param_type))}",
                    suggestions=self._get_similar_type_names(getattr(param_type, "__name__", "")),
                ) from None

        return impl_type(**kwargs)

    def _resolve_param(self, param_type: Any, scope: ServiceScope) -> Any:
        """Resolve a single constructor parameter, handling Optional and list."""
        # Handle Optional[T] (Union[T, None] or T | None via PEP 604)
        if get_origin(param_type) is Union or isinstance(param_type, types.UnionType):
            args = get_args(param_type)
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == 1:
                try:
                    return self._resolve_param(non_none[0], scope)
                except (NoSuchServiceError, NoUniqueServiceError):
                    return None

        # Handle list[T]
        if get_origin(param_type) is list:
            args = get_args(param_type)
            if args:
                return self._resolve_all(args[0], scope)

        return self._resolve(param_type, scope)

    def _get_similar_type_names(self, name: str) -> list[str]:
        """Return registered type names similar to *name* using fuzzy matching."""
        if not name:
            return []
        registered_names = [getattr(cls, "__name__", repr(cls)) for cls in self._registrations]
        return difflib.get_close_matches(name, registered_names, n=5, cutoff=0.4)

    def _check_not_disposed(self) -> None:
        if self._disposed:
            raise ResourceDisposedException("Container")
