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
"""Registration helpers that add initializers to a Container.

Every helper also registers the lifecycle support itself, so adding a single
initializer is enough to enable :func:`asyncinit.hosting.initialize`.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from asyncinit.container.container import Container
from asyncinit.container.scope import ServiceScope
from asyncinit.container.types import Scope
from asyncinit.initialization.root import RootInitializer
from asyncinit.initialization.steps import (
    AsyncInitializer,
    CompositeInitializer,
    DelegateInitializer,
    StepCallable,
)
from asyncinit.kernel.exceptions import ConfigurationException


def add_async_initialization(container: Container) -> Container:
    """Opt in to lifecycle support without registering any initializer."""
    if not container.is_registered(RootInitializer):
        container.register(RootInitializer, scope=Scope.TRANSIENT)
    return container


def add_async_initializer(
    container: Container,
    initializer: Any = None,
    *,
    factory: Callable[[ServiceScope], AsyncInitializer] | None = None,
    teardown: StepCallable | None = None,
) -> Container:
    """Register an initializer. Registration order is execution order.

    *initializer* may be:

    - a concrete :class:`AsyncInitializer` subclass, resolved afresh per phase;
    - a type already registered in the container: resolved through that
      registration, or, when it has several registrations, combined into one
      :class:`CompositeInitializer`;
    - an :class:`AsyncInitializer` instance, shared by every phase;
    - a coroutine function, optionally paired with a *teardown* coroutine function.

    Alternatively pass *factory*, a callable receiving the resolving scope.
    """
    if (initializer is None) == (factory is None):
        raise TypeError("Pass exactly one of 'initializer' or 'factory'")
    if teardown is not None and not inspect.iscoroutinefunction(initializer):
        raise TypeError("'teardown' is only supported together with a coroutine function initializer")

    add_async_initialization(container)

    if factory is not None:
        container.register_factory(AsyncInitializer, factory)
    elif isinstance(initializer, type):
        _add_initializer_type(container, initializer)
    elif isinstance(initializer, AsyncInitializer):
        container.register_instance(AsyncInitializer, initializer)
    elif inspect.iscoroutinefunction(initializer):
        container.register_instance(AsyncInitializer, DelegateInitializer(initializer, teardown))
    else:
        raise TypeError(
            f"Cannot register {initializer!r} as an async initializer; expected an "
            "AsyncInitializer type or instance, or a coroutine function"
        )
    return container


def _add_initializer_type(container: Container, initializer_type: type) -> None:
    if not issubclass(initializer_type, AsyncInitializer):
        raise ConfigurationException(
            f"{initializer_type.__qualname__} is not an AsyncInitializer.",
            context={"initializer": initializer_type.__qualname__},
        )

    registrations = container.registrations_for(initializer_type)

    if len(registrations) == 1:
        container.register_factory(AsyncInitializer, lambda scope: scope.resolve(initializer_type))
        return

    if len(registrations) > 1:
        container.register_factory(
            AsyncInitializer,
            lambda scope: CompositeInitializer(scope.resolve_all(initializer_type)),
        )
        return

    if inspect.isabstract(initializer_type):
        raise ConfigurationException(
            f"No implementation type found for type interface {initializer_type.__qualname__}.",
            context={"initializer": initializer_type.__qualname__},
        )

    container.register(AsyncInitializer, initializer_type, scope=Scope.TRANSIENT)
