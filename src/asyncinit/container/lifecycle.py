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
"""Release hooks for container-owned services."""

from __future__ import annotations

import inspect
from typing import Any

_RELEASE_HOOKS = ("aclose", "close")


async def call_lifecycle_hook(instance: Any, hook_name: str) -> bool:
    """Call a lifecycle hook on an instance if it exists.

    Returns True when the hook was found and called.
    """
    hook = getattr(instance, hook_name, None)
    if hook is not None and callable(hook):
        result = hook()
        if inspect.isawaitable(result):
            await result
        return True
    return False


def is_releasable(instance: Any) -> bool:
    return any(callable(getattr(instance, name, None)) for name in _RELEASE_HOOKS)


async def release(instance: Any) -> None:
    """Release *instance* through ``aclose()`` or, failing that, ``close()``."""
    for hook_name in _RELEASE_HOOKS:
        if await call_lifecycle_hook(instance, hook_name):
            return
