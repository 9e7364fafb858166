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
"""asyncinit hosting — the workload host and the lifecycle orchestrator."""

from asyncinit.hosting.builder import HostBuilder
from asyncinit.hosting.host import Host, add_hosted_service
from asyncinit.hosting.lifetime import ApplicationLifetime
from asyncinit.hosting.orchestrator import (
    LifecycleOrchestrator,
    LifecycleOutcome,
    LifecycleState,
    initialize,
    initialize_and_run,
    teardown,
)
from asyncinit.hosting.service import BackgroundService, HostedService

__all__ = [
    "ApplicationLifetime",
    "BackgroundService",
    "Host",
    "HostBuilder",
    "HostedService",
    "LifecycleOrchestrator",
    "LifecycleOutcome",
    "LifecycleState",
    "add_hosted_service",
    "initialize",
    "initialize_and_run",
    "teardown",
]
