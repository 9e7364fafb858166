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
"""Lifecycle orchestration properties."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from asyncinit.core.config import config_properties


@config_properties(prefix="asyncinit.lifecycle")
@dataclass
class LifecycleProperties:
    """Configuration for initialize-and-run orchestration (asyncinit.lifecycle.*)."""

    teardown_timeout: float | None = 10.0

    @property
    def teardown_timeout_delta(self) -> timedelta | None:
        """The teardown bound, or None for no timeout."""
        if self.teardown_timeout is None:
            return None
        return timedelta(seconds=self.teardown_timeout)
