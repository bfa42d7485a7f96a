"""
Seccomp profile strategy.

Profiles are checked against an allow-list. The wildcard entry allows
any profile, including none, and is never handed out by generate.
"""

from __future__ import annotations

from typing import Optional

from bulwark.errors import ValidationErrorList
from bulwark.models import (
    SECCOMP_ALLOW_ANY,
    SECCOMP_CONTAINER_ANNOTATION_PREFIX,
    SECCOMP_POD_ANNOTATION_KEY,
    Container,
    Pod,
    SeccompRule,
)
from bulwark.strategies.base import SeccompStrategy

SECCOMP_CONTEXT_FIELD = "securityContext.seccompProfile"


def is_profile_allowed(profile: str, allowed_profiles: list[str]) -> bool:
    """Check a profile against an allow-list, honoring the wildcard."""
    for allowed in allowed_profiles:
        if profile == allowed or allowed == SECCOMP_ALLOW_ANY:
            return True
    return False


class MustRunAs(SeccompStrategy):
    """Profiles must come from the allow-list."""

    def __init__(self, allowed_profiles: list[str] | None = None):
        self.allowed_profiles = list(allowed_profiles or [])

    def generate(self, pod: Pod, container: Optional[Container] = None) -> Optional[str]:
        for profile in self.allowed_profiles:
            if profile != SECCOMP_ALLOW_ANY:
                return profile
        return None

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        """
        Validate the pod profile and the profile of every container.

        Each level is checked when it is set or when the allow-list is
        non-empty, with an absent profile compared as "". A container
        without its own annotation inherits the pod profile. For the
        container being evaluated the security context field comes first.

        Args:
            pod: Pod carrying the seccomp annotations
            container: Container being evaluated

        Returns:
            ValidationErrorList (empty if valid)
        """
        errs = ValidationErrorList()
        pod_profile = pod.pod_seccomp_profile

        self._check(errs, f"metadata.annotations[{SECCOMP_POD_ANNOTATION_KEY}]", pod_profile)

        for _, _, other in pod.iter_containers():
            if other.name == container.name:
                continue
            key = SECCOMP_CONTAINER_ANNOTATION_PREFIX + other.name
            self._check(errs, f"metadata.annotations[{key}]", pod.annotations.get(key, pod_profile))

        self._check(errs, self._container_field(pod, container), pod.container_seccomp_profile(container))

        return errs

    def _check(self, errs: ValidationErrorList, field_path: str, profile: Optional[str]) -> None:
        if profile is None and not self.allowed_profiles:
            return
        value = profile if profile is not None else ""
        if not is_profile_allowed(value, self.allowed_profiles):
            errs.extend(ValidationErrorList.not_supported(field_path, value, self.allowed_profiles))

    @staticmethod
    def _container_field(pod: Pod, container: Container) -> str:
        sc = container.security_context
        if sc is not None and sc.seccomp_profile is not None:
            return SECCOMP_CONTEXT_FIELD
        key = SECCOMP_CONTAINER_ANNOTATION_PREFIX + container.name
        if key in pod.annotations:
            return f"metadata.annotations[{key}]"
        return SECCOMP_CONTEXT_FIELD


def create_seccomp_strategy(rule: SeccompRule) -> SeccompStrategy:
    """Build the seccomp strategy for a rule."""
    return MustRunAs(rule.allowed_profiles)
