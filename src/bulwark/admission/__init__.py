"""
Pod admission for Mantissa Bulwark.

This package provides:
- PolicyMatcher: ACL filtering and deterministic candidate ordering
- SecurityContextConstraintAdmission: generate, validate and commit
  security contexts per container
- SecurityContextDeny, AlwaysAdmit: simple alternative plugins
"""

from __future__ import annotations

from bulwark.admission.base import (
    AdmissionDecision,
    AdmissionPlugin,
    AdmissionResult,
    DenialReason,
    Operation,
)
from bulwark.admission.controller import SecurityContextConstraintAdmission
from bulwark.admission.matcher import PolicyMatcher, policy_applies, sort_by_name
from bulwark.admission.plugins import (
    AlwaysAdmit,
    SecurityContextDeny,
    available_plugins,
    get_admission_plugin,
)

__all__ = [
    # Types
    "AdmissionDecision",
    "AdmissionPlugin",
    "AdmissionResult",
    "DenialReason",
    "Operation",
    # Matching
    "PolicyMatcher",
    "policy_applies",
    "sort_by_name",
    # Plugins
    "SecurityContextConstraintAdmission",
    "AlwaysAdmit",
    "SecurityContextDeny",
    "available_plugins",
    "get_admission_plugin",
]
