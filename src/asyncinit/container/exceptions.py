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
"""Container exceptions — fatal errors during service resolution."""

from __future__ import annotations

from asyncinit.kernel.exceptions import ServiceResolutionException


def _type_name(service_type: object) -> str:
    return getattr(service_type, "__name__", repr(service_type))


class NoSuchServiceError(ServiceResolutionException):
    """No registration found for the requested type or name."""

    def __init__(
        self,
        *,
        service_type: type | None = None,
        service_name: str | None = None,
        required_by: str | None = None,
        parameter: str | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        self.service_type = service_type
        self.service_name = service_name
        self.required_by = required_by
        self.parameter = parameter
        self.suggestions = suggestions or []

        if service_type is not None:
            headline = f"No service of type '{_type_name(service_type)}' is registered"
        elif service_name:
            headline = f"No service named '{service_name}' is registered"
        else:
            headline = "No matching service is registered"

        lines = [f"NoSuchServiceError: {headline}"]
        if required_by or parameter:
            lines.append("")
            if required_by:
                lines.append(f"  Required by: {required_by}")
            if parameter:
                lines.append(f"    Parameter: {parameter}")

        if self.suggestions:
            lines.append("")
            lines.append(f"  Similar registered types: {', '.join(self.suggestions)}")

        super().__init__("\n".join(lines), service=_type_name(service_type) if service_type else service_name or "")
        self.headline = headline


class NoUniqueServiceError(ServiceResolutionException):
    """Several registrations match a type that was resolved as a single service."""

    def __init__(self, *, service_type: type, candidates: list[str]) -> None:
        self.service_type = service_type
        self.candidates = candidates

        type_name = _type_name(service_type)
        lines = [
            f"NoUniqueServiceError: {len(candidates)} services of type '{type_name}' are registered",
            "",
            f"  Candidates: {candidates}",
            "",
            "  Fix: Use resolve_all(), or keep a single registration for the type",
        ]
        super().__init__("\n".join(lines), service=type_name)


class CircularDependencyError(ServiceResolutionException):
    """Circular dependency detected during resolution.

    The ``chain`` attribute contains the dependency path in resolution order.
    """

    def __init__(self, *, chain: list[str], current: str) -> None:
        self.chain = chain
        self.current = current
        chain_str = " -> ".join([*chain, current])
        super().__init__(f"CircularDependencyError: Circular dependency: {chain_str}", service=current)


class ScopeValidationError(ServiceResolutionException):
    """A scoped service was requested outside of a scope.

    Raised only when the container validates scopes. The most common cause is
    a singleton depending on a scoped service (a captive dependency).
    """

    def __init__(self, *, service: str, required_by: str | None = None) -> None:
        self.required_by = required_by
        if required_by:
            message = (
                f"Cannot consume scoped service '{service}' from singleton '{required_by}'"
            )
        else:
            message = f"Cannot resolve scoped service '{service}' from the root container"
        super().__init__(message, service=service)
