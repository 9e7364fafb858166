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
"""Tests for StructlogAdapter, the default LoggingPort implementation."""

import logging
import sys

import pytest
import structlog

from asyncinit.core.config import Config
from asyncinit.kernel.exceptions import ConfigurationException
from asyncinit.logging import LoggingPort, StructlogAdapter


def _logging(**section) -> Config:
    return Config({"asyncinit": {"logging": section}})


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"
        assert adapter._output() is sys.stdout
        assert structlog.is_configured()

    def test_packaged_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config(Config._load_defaults()))
        assert adapter._format == "console"
        assert adapter._stream == "stdout"

    def test_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(_logging(level={"root": "debug"}))
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.parametrize("fmt", ["json", "JSON", "logfmt", "console"])
    def test_formats(self, fmt):
        adapter = StructlogAdapter()
        adapter.configure(_logging(format=fmt))
        assert adapter._format == fmt.lower()

    def test_json_renderer_selected(self):
        adapter = StructlogAdapter()
        adapter.configure(_logging(format="json"))
        assert isinstance(adapter._renderer(), structlog.processors.JSONRenderer)

    def test_stderr_stream(self):
        adapter = StructlogAdapter()
        adapter.configure(_logging(stream="stderr"))
        assert adapter._output() is sys.stderr

    def test_per_module_levels(self):
        adapter = StructlogAdapter()
        adapter.configure(_logging(level={"root": "INFO", "asyncinit.lifecycle": "warning"}))
        assert adapter._module_levels == {"asyncinit.lifecycle": "WARNING"}
        assert logging.getLogger("asyncinit.lifecycle").level == logging.WARNING
        adapter.set_level("asyncinit.lifecycle", "NOTSET")

    def test_env_overrides_format(self, monkeypatch):
        monkeypatch.setenv("ASYNCINIT_LOGGING_FORMAT", "json")
        adapter = StructlogAdapter()
        adapter.configure(_logging(format="console"))
        assert adapter._format == "json"

    def test_unknown_format_rejected(self):
        with pytest.raises(ConfigurationException, match="asyncinit.logging.format"):
            StructlogAdapter().configure(_logging(format="xml"))

    def test_unknown_level_rejected(self):
        with pytest.raises(ConfigurationException, match="Unknown log level"):
            StructlogAdapter().configure(_logging(level={"root": "LOUD"}))


class TestStructlogAdapterLoggers:
    def test_get_logger_returns_usable_logger(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("asyncinit.test")
        assert callable(getattr(logger, "info", None))

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("asyncinit.initialization", "ERROR")
        assert logging.getLogger("asyncinit.initialization").level == logging.ERROR
        adapter.set_level("asyncinit.initialization", "NOTSET")

    def test_set_unknown_level(self):
        with pytest.raises(ConfigurationException):
            StructlogAdapter().set_level("asyncinit", "LOUD")
