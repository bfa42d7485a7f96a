"""
Mantissa Bulwark - Security Context Constraint Admission

Decides, for every container of a pod admitted to a cluster, which
security posture it may run with: run-as user, SELinux label, seccomp
profile, privileged flag, capabilities and host path volumes.

Quick Start:
    >>> from bulwark.config import AdmissionConfiguration, build_admission
    >>> from bulwark.models import Pod
    >>>
    >>> admission = build_admission(AdmissionConfiguration.from_file("bulwark.yaml"))
    >>> result = admission.admit(pod, "team-a", "CREATE")
    >>> print(result.decision.value, result.policies)
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Mantissa"

from bulwark.admission import (
    AdmissionDecision,
    AdmissionResult,
    DenialReason,
    Operation,
    PolicyMatcher,
    SecurityContextConstraintAdmission,
)
from bulwark.errors import (
    AllocationError,
    BulwarkError,
    CollaboratorLookupError,
    ConfigurationError,
    FieldError,
    PolicyLoadError,
    ValidationErrorList,
)
from bulwark.models import (
    Container,
    Pod,
    Principal,
    SecurityContext,
    SecurityPolicy,
    ServiceIdentity,
)
from bulwark.provider import PolicyProvider, create_provider

__all__ = [
    "__version__",
    # Admission
    "AdmissionDecision",
    "AdmissionResult",
    "DenialReason",
    "Operation",
    "PolicyMatcher",
    "SecurityContextConstraintAdmission",
    # Errors
    "AllocationError",
    "BulwarkError",
    "CollaboratorLookupError",
    "ConfigurationError",
    "FieldError",
    "PolicyLoadError",
    "ValidationErrorList",
    # Models
    "Container",
    "Pod",
    "Principal",
    "SecurityContext",
    "SecurityPolicy",
    "ServiceIdentity",
    # Provider
    "PolicyProvider",
    "create_provider",
]
