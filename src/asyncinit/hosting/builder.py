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
"""HostBuilder — assembles configuration, logging and services into a Host."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from asyncinit.container.container import Container
from asyncinit.core.config import Config
from asyncinit.hosting.host import Host
from asyncinit.logging.port import LoggingPort
from asyncinit.logging.structlog_adapter import StructlogAdapter


class HostBuilder:
    """Fluent builder for :class:`Host`.

    Usage::

        host = (
            HostBuilder(config=Config.from_file("asyncinit.yaml"))
            .configure_services(lambda c: add_async_initializer(c, MigrateDatabase))
            .build()
        )
    """

    def __init__(
        self,
        config: Config | dict[str, Any] | str | Path | None = None,
        *,
        validate_scopes: bool | None = None,
    ) -> None:
        if isinstance(config, Config):
            self._config = config
        elif isinstance(config, dict):
            self._config = Config(config)
        elif config is not None:
            self._config = Config.from_file(config)
        else:
            self._config = Config(Config._load_defaults())
        self._validate_scopes = validate_scopes
        self._callbacks: list[Callable[[Container], Any]] = []
        self._logging: LoggingPort | None = None
        self._built = False

    def configure_services(self, callback: Callable[[Container], Any]) -> HostBuilder:
        """Queue a callback that registers services. Callbacks run in order."""
        self._callbacks.append(callback)
        return self

    def configure_logging(self, adapter: LoggingPort | None = None) -> HostBuilder:
        """Configure logging from the ``asyncinit.logging`` section on build (structlog by default)."""
        self._logging = adapter or StructlogAdapter()
        return self

    def build(self) -> Host:
        if self._built:
            raise RuntimeError("build() can only be called once per HostBuilder")
        self._built = True

        if self._logging is not None:
            self._logging.configure(self._config)

        validate = self._validate_scopes
        if validate is None:
            validate = str(self._config.get("asyncinit.host.validate_scopes", False)).lower() in (
                "true",
                "1",
                "yes",
            )

        container = Container(validate_scopes=validate)
        host = Host(container, self._config)
        for callback in self._callbacks:
            callback(container)
        return host
