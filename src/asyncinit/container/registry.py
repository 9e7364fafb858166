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
"""Service registration metadata."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from asyncinit.container.types import Scope


@dataclass(eq=False)
class Registration:
    """Metadata for one registration of a service type.

    Exactly one of ``impl_type``, ``factory`` or a pre-built ``instance`` is
    used to produce the service. ``instance`` also caches the created
    singleton; ``external`` marks instances the container does not own.
    """

    service_type: type
    impl_type: type | None = None
    scope: Scope = Scope.SINGLETON
    factory: Callable[[Any], Any] | None = None
    instance: Any = field(default=None, repr=False)
    external: bool = False
    name: str = ""

    @property
    def display_name(self) -> str:
        target = self.impl_type or self.service_type
        return getattr(target, "__qualname__", repr(target))
