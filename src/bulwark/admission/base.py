"""
Admission request and result types shared by all admission plugins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from bulwark.errors import ValidationErrorList
from bulwark.models import Pod


class Operation(Enum):
    """Operations an admission request can carry."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CONNECT = "CONNECT"


class AdmissionDecision(Enum):
    """Terminal outcome of an admission request."""

    ADMIT = "admit"
    DENY = "deny"


class DenialReason(Enum):
    """Why a request was denied."""

    BAD_REQUEST = "bad_request"  # Request is malformed
    LOOKUP_FAILURE = "lookup_failure"  # A collaborator failed
    NO_MATCHING_POLICY = "no_matching_policy"  # No usable policy for the principal
    POLICY_MISMATCH = "policy_mismatch"  # A container fits no candidate
    FORBIDDEN = "forbidden"  # Plugin forbids the request outright


@dataclass
class AdmissionResult:
    """
    Result of an admission request.

    Attributes:
        decision: Admit or deny
        pod_name: Name of the pod in the request
        namespace: Namespace of the request
        reason: Denial reason (None when admitted)
        message: Human-readable summary
        errors: Field errors behind a denial
        container: Container that could not be matched, if any
        policies: Policy committed per container name
    """

    decision: AdmissionDecision
    pod_name: str = ""
    namespace: str = ""
    reason: Optional[DenialReason] = None
    message: str = ""
    errors: ValidationErrorList = field(default_factory=ValidationErrorList)
    container: Optional[str] = None
    policies: dict[str, str] = field(default_factory=dict)

    @property
    def allowed(self) -> bool:
        """Check if the request was admitted."""
        return self.decision == AdmissionDecision.ADMIT

    @classmethod
    def admit(
        cls, pod: Pod, namespace: str, policies: dict[str, str] | None = None, message: str = ""
    ) -> AdmissionResult:
        return cls(
            decision=AdmissionDecision.ADMIT,
            pod_name=pod.name,
            namespace=namespace,
            message=message,
            policies=dict(policies or {}),
        )

    @classmethod
    def deny(
        cls,
        pod: Pod,
        namespace: str,
        reason: DenialReason,
        message: str,
        errors: ValidationErrorList | None = None,
        container: str | None = None,
    ) -> AdmissionResult:
        return cls(
            decision=AdmissionDecision.DENY,
            pod_name=pod.name,
            namespace=namespace,
            reason=reason,
            message=message,
            errors=ValidationErrorList(errors or []),
            container=container,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "decision": self.decision.value,
            "allowed": self.allowed,
            "pod": self.pod_name,
            "namespace": self.namespace,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "container": self.container,
            "errors": self.errors.to_dicts(),
            "policies": dict(self.policies),
        }


class AdmissionPlugin(ABC):
    """
    An admission plugin for pods.

    Plugins only act on the operations they handle; other operations
    are admitted untouched.
    """

    handled_operations: frozenset[Operation] = frozenset({Operation.CREATE, Operation.UPDATE})

    def handles(self, operation: Operation) -> bool:
        """Check whether the plugin acts on an operation."""
        return operation in self.handled_operations

    @abstractmethod
    def admit(
        self, pod: Pod, namespace: str, operation: Union[Operation, str] = Operation.CREATE
    ) -> AdmissionResult:
        """
        Decide whether a pod is admitted.

        Admitted pods may be mutated in place; denied pods never are.
        """
        pass


def parse_operation(operation: Union[Operation, str]) -> Operation:
    """
    Normalize an operation value.

    Raises:
        ValueError: If the operation is unknown
    """
    if isinstance(operation, Operation):
        return operation
    return Operation(str(operation).upper())
