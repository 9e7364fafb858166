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
"""Layered configuration: packaged defaults, a YAML or TOML file, then env vars.

Keys use dot notation (``asyncinit.lifecycle.teardown_timeout``). Every key
can be overridden by an environment variable named after it, upper-cased,
with dots replaced by underscores and the leading ``asyncinit.`` replaced by
``ASYNCINIT_`` (``ASYNCINIT_LIFECYCLE_TEARDOWN_TIMEOUT``).
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]

T = TypeVar("T")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10

_PREFIX_ATTR = "__asyncinit_config_prefix__"
_DEFAULTS_PACKAGE = "asyncinit.resources"
_DEFAULTS_FILE = "asyncinit-defaults.yaml"

_MISSING = object()

# Values accepted for ``float | None`` fields that mean "no value".
_NONE_WORDS = frozenset({"", "none", "null", "infinite"})


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a dataclass as bindable to the configuration section at *prefix*.

    Usage:
        @config_properties(prefix="asyncinit.lifecycle")
        @dataclass
        class LifecycleProperties:
            teardown_timeout: float | None = 10.0
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def env_key(key: str) -> str:
    """Environment variable that overrides *key*."""
    return "ASYNCINIT_" + key.removeprefix("asyncinit.").upper().replace(".", "_").replace("-", "_")


class Config:
    """Read-only view over nested configuration data.

    Lookup order for :meth:`get`, highest first:

    1. the environment variable named by :func:`env_key`
    2. the configuration data
    3. the caller's default
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self._loaded_sources: list[str] = []

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Read *path* (``.toml`` or YAML) over the packaged defaults.

        A file that does not exist contributes nothing.
        """
        path = Path(path)
        config = cls(cls._load_defaults() if load_defaults else {})
        if load_defaults:
            config._loaded_sources.append(f"{_DEFAULTS_FILE} (library defaults)")
        if path.is_file():
            config._data = _deep_merge(config._data, _read_file(path))
            config._loaded_sources.append(str(path))
        return config

    @staticmethod
    def _load_defaults() -> dict[str, Any]:
        resource = importlib.resources.files(_DEFAULTS_PACKAGE).joinpath(_DEFAULTS_FILE)
        return yaml.safe_load(resource.read_text(encoding="utf-8")) or {}

    @property
    def loaded_sources(self) -> list[str]:
        """Configuration sources in the order they were merged."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        """Value at *key*, or *default* when neither env nor data define it.

        String values may contain ``${NAME}`` or ``${other.key}`` placeholders,
        optionally with a fallback: ``${db.host:localhost}``.
        """
        env_value = os.environ.get(env_key(key))
        if env_value is not None:
            return env_value

        value = _lookup(self._data, key)
        if value is _MISSING or value is None:
            return default
        if isinstance(value, str) and "${" in value:
            return self._expand(value, depth=0)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """The mapping stored at *prefix*, or an empty dict."""
        section = _lookup(self._data, prefix)
        return section if isinstance(section, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Build a ``@config_properties`` dataclass from its section.

        Fields absent from both the section and the environment keep their
        dataclass defaults. String values are converted to the field type.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        section = self.get_section(prefix)
        hints = get_type_hints(config_cls)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            key = f"{prefix}.{field.name}"
            if env_key(key) in os.environ or section.get(field.name) is not None:
                values[field.name] = _coerce(self.get(key), hints.get(field.name))
            elif field.name in section:
                values[field.name] = None
        return config_cls(**values)

    def _expand(self, value: str, depth: int) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(
                f"Placeholders in '{value}' nest deeper than {_MAX_PLACEHOLDER_DEPTH} levels; "
                "check for circular references."
            )

        def substitute(match: re.Match[str]) -> str:
            name, _, fallback = match.group(1).partition(":")
            has_fallback = ":" in match.group(1)

            if name in os.environ:
                return os.environ[name]
            found = _lookup(self._data, name)
            if found is not _MISSING and found is not None:
                text = str(found)
                return self._expand(text, depth + 1) if "${" in text else text
            if has_fallback:
                return fallback
            raise ValueError(f"Cannot resolve placeholder '${{{match.group(1)}}}': not found in environment or config")

        return _PLACEHOLDER_RE.sub(substitute, value)


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _read_file(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as f:
            return tomllib.load(f)
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _coerce(value: Any, field_type: Any) -> Any:
    """Convert env and placeholder strings to scalar field types."""
    if not isinstance(value, str):
        return value
    if field_type is bool:
        return value.strip().lower() in ("true", "1", "yes", "on")
    if field_type is int:
        return int(value)
    if field_type is float:
        return float(value)
    if field_type == (float | None):
        return None if value.strip().lower() in _NONE_WORDS else float(value)
    return value
