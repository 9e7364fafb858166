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
"""Host factory for integration testing."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from asyncinit.container.container import Container
from asyncinit.core.config import Config
from asyncinit.hosting.builder import HostBuilder
from asyncinit.hosting.host import Host


def create_test_host(
    *configure: Callable[[Container], Any],
    config: dict[str, Any] | None = None,
    validate_scopes: bool = False,
) -> Host:
    """Create a Host for tests without touching files or global logging.

    Args:
        configure: Callbacks registering services, applied in order.
        config: Raw configuration data; library defaults are not loaded.
        validate_scopes: Reject scoped services resolved from the root.

    Returns:
        A built, not yet started Host.
    """
    builder = HostBuilder(Config(config or {}), validate_scopes=validate_scopes)
    for callback in configure:
        builder.configure_services(callback)
    return builder.build()
