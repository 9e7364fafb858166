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
"""StructlogAdapter — default LoggingPort implementation using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from asyncinit.core.config import Config
from asyncinit.kernel.exceptions import ConfigurationException

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

_FORMATS = ("console", "json", "logfmt")
_STREAMS = ("stdout", "stderr")


class StructlogAdapter:
    """Routes structlog through stdlib logging, configured from ``asyncinit.logging``.

    Recognised keys:

    - ``format``: ``console`` (default), ``json`` or ``logfmt``
    - ``stream``: ``stdout`` (default) or ``stderr``
    - ``level.root``: level of the root logger, ``INFO`` by default
    - ``level.<logger>``: level of one named logger, e.g. ``asyncinit.lifecycle``
    """

    def __init__(self) -> None:
        self._root_level = "INFO"
        self._format = "console"
        self._stream = "stdout"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        """Apply the ``asyncinit.logging`` section. Unknown values are rejected."""
        levels = {str(name): str(level).upper() for name, level in config.get_section("asyncinit.logging.level").items()}
        self._root_level = levels.pop("root", "INFO")
        self._module_levels = levels
        self._format = _choice(config, "asyncinit.logging.format", _FORMATS)
        self._stream = _choice(config, "asyncinit.logging.stream", _STREAMS)

        root_level = _level_number(self._root_level)
        module_levels = {name: _level_number(level) for name, level in levels.items()}

        structlog.configure(
            processors=[*_SHARED_PROCESSORS, self._renderer()],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            # Module-level loggers must follow reconfiguration.
            cache_logger_on_first_use=False,
        )
        logging.basicConfig(format="%(message)s", stream=self._output(), level=root_level, force=True)
        for name, level in module_levels.items():
            logging.getLogger(name).setLevel(level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Change the level of the stdlib logger *name* at runtime."""
        logging.getLogger(name).setLevel(_level_number(level))

    def _renderer(self) -> structlog.types.Processor:
        if self._format == "json":
            return structlog.processors.JSONRenderer()
        if self._format == "logfmt":
            return structlog.processors.LogfmtRenderer(key_order=["timestamp", "level", "event"])
        return structlog.dev.ConsoleRenderer()

    def _output(self) -> TextIO:
        return sys.stderr if self._stream == "stderr" else sys.stdout


def _choice(config: Config, key: str, allowed: tuple[str, ...]) -> str:
    value = str(config.get(key, allowed[0])).lower()
    if value not in allowed:
        raise ConfigurationException(
            f"Unsupported value '{value}' for {key}; expected one of {', '.join(allowed)}",
            context={"key": key, "value": value},
        )
    return value


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ConfigurationException(f"Unknown log level '{level}'", context={"level": level})
    return number
