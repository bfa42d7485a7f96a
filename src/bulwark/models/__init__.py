"""
Data models for Mantissa Bulwark.

This package provides the core data models:
- Pod, Container, SecurityContext: the admitted workload
- SecurityPolicy: per-dimension rules and ACL
- ServiceIdentity, Principal: the requesting identity
"""

from __future__ import annotations

from bulwark.models.pod import (
    SECCOMP_CONTAINER_ANNOTATION_PREFIX,
    SECCOMP_POD_ANNOTATION_KEY,
    Capabilities,
    Container,
    Pod,
    SecurityContext,
    SELinuxOptions,
    Volume,
    VolumeMount,
)
from bulwark.models.policy import (
    SECCOMP_ALLOW_ANY,
    PolicyCollection,
    RunAsUserRule,
    RunAsUserStrategyType,
    SeccompRule,
    SecurityPolicy,
    SELinuxRule,
    SELinuxStrategyType,
)
from bulwark.models.principal import Principal, ServiceIdentity

__all__ = [
    # Pod
    "SECCOMP_CONTAINER_ANNOTATION_PREFIX",
    "SECCOMP_POD_ANNOTATION_KEY",
    "Capabilities",
    "Container",
    "Pod",
    "SecurityContext",
    "SELinuxOptions",
    "Volume",
    "VolumeMount",
    # Policy
    "SECCOMP_ALLOW_ANY",
    "PolicyCollection",
    "RunAsUserRule",
    "RunAsUserStrategyType",
    "SeccompRule",
    "SecurityPolicy",
    "SELinuxRule",
    "SELinuxStrategyType",
    # Identity
    "Principal",
    "ServiceIdentity",
]
