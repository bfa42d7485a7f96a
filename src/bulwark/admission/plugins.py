"""
Simple admission plugins and the plugin registry.

SecurityContextDeny refuses any pod that sets a container security
context; AlwaysAdmit admits everything. Both exist for clusters that
do not run constraint-based admission.
"""

from __future__ import annotations

from typing import Any, Callable, Union

from bulwark.admission.base import (
    AdmissionPlugin,
    AdmissionResult,
    DenialReason,
    Operation,
    parse_operation,
)
from bulwark.admission.controller import SecurityContextConstraintAdmission
from bulwark.errors import ErrorType, FieldError, ValidationErrorList
from bulwark.models import Pod


class AlwaysAdmit(AdmissionPlugin):
    """Admits every request."""

    def admit(
        self, pod: Pod, namespace: str, operation: Union[Operation, str] = Operation.CREATE
    ) -> AdmissionResult:
        return AdmissionResult.admit(pod, namespace or pod.namespace)


class SecurityContextDeny(AdmissionPlugin):
    """Denies pods in which any container sets a security context."""

    def admit(
        self, pod: Pod, namespace: str, operation: Union[Operation, str] = Operation.CREATE
    ) -> AdmissionResult:
        namespace = namespace or pod.namespace
        try:
            op = parse_operation(operation)
        except ValueError:
            return AdmissionResult.deny(
                pod, namespace, DenialReason.BAD_REQUEST, f"unknown operation {operation!r}"
            )
        if not self.handles(op):
            return AdmissionResult.admit(pod, namespace)

        errors = ValidationErrorList()
        for spec_field, index, container in pod.iter_containers():
            if container.security_context is not None:
                errors.append(
                    FieldError(
                        f"spec.{spec_field}[{index}].securityContext",
                        container.name,
                        "security context is forbidden",
                        ErrorType.FORBIDDEN,
                    )
                )

        if errors:
            return AdmissionResult.deny(
                pod,
                namespace,
                DenialReason.FORBIDDEN,
                "SecurityContext is forbidden",
                errors=errors,
                container=errors[0].value,
            )
        return AdmissionResult.admit(pod, namespace)


_PLUGINS: dict[str, Callable[..., AdmissionPlugin]] = {
    "SecurityContextConstraint": SecurityContextConstraintAdmission,
    "SecurityContextDeny": lambda **_: SecurityContextDeny(),
    "SecurityContextAdmit": lambda **_: AlwaysAdmit(),
}


def available_plugins() -> list[str]:
    """Get registered plugin names."""
    return sorted(_PLUGINS)


def get_admission_plugin(name: str, **dependencies: Any) -> AdmissionPlugin:
    """
    Create an admission plugin by name.

    Args:
        name: Registered plugin name
        **dependencies: Constructor arguments (stores, allocator, ...)

    Returns:
        AdmissionPlugin

    Raises:
        ValueError: If no plugin is registered under the name
    """
    factory = _PLUGINS.get(name)
    if factory is None:
        raise ValueError(f"Unknown admission plugin: {name}. Available: {available_plugins()}")
    return factory(**dependencies)
