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
"""ApplicationLifetime — start/stop notifications shared by the host and its services."""

from __future__ import annotations

from asyncinit.kernel.cancellation import CancellationToken


class ApplicationLifetime:
    """Exposes the host's lifecycle as tokens that fire once.

    Services request a graceful shutdown with :meth:`stop_application`.
    """

    def __init__(self) -> None:
        self._started = CancellationToken()
        self._stopping = CancellationToken()
        self._stopped = CancellationToken()

    @property
    def application_started(self) -> CancellationToken:
        """Fires once every hosted service has started."""
        return self._started

    @property
    def application_stopping(self) -> CancellationToken:
        """Fires when a shutdown has been requested."""
        return self._stopping

    @property
    def application_stopped(self) -> CancellationToken:
        """Fires once every hosted service has stopped."""
        return self._stopped

    def stop_application(self) -> None:
        """Request a graceful shutdown of the host."""
        self._stopping.cancel()

    def notify_started(self) -> None:
        self._started.cancel()

    def notify_stopped(self) -> None:
        self._stopped.cancel()
