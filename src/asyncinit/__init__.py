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
"""asyncinit — async initialization and teardown for long-running hosts."""

from asyncinit.container import Container, Scope, ServiceScope
from asyncinit.core.config import Config, config_properties
from asyncinit.hosting import (
    BackgroundService,
    Host,
    HostBuilder,
    HostedService,
    LifecycleOrchestrator,
    add_hosted_service,
    initialize,
    initialize_and_run,
    teardown,
)
from asyncinit.initialization import (
    AsyncInitializer,
    AsyncTeardown,
    add_async_initialization,
    add_async_initializer,
)
from asyncinit.kernel import (
    CancellationToken,
    ConfigurationException,
    LifecycleAggregateException,
    OperationCancelledException,
    ResourceDisposedException,
    TeardownTimeoutException,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncInitializer",
    "AsyncTeardown",
    "BackgroundService",
    "CancellationToken",
    "Config",
    "ConfigurationException",
    "Container",
    "Host",
    "HostBuilder",
    "HostedService",
    "LifecycleAggregateException",
    "LifecycleOrchestrator",
    "OperationCancelledException",
    "ResourceDisposedException",
    "Scope",
    "ServiceScope",
    "TeardownTimeoutException",
    "add_async_initialization",
    "add_async_initializer",
    "add_hosted_service",
    "config_properties",
    "initialize",
    "initialize_and_run",
    "teardown",
]
