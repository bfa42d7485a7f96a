"""
Security policy model for Mantissa Bulwark.

A SecurityPolicy bundles one strategy rule per security dimension with
coarse allow flags and an ACL naming the users and groups that may
use it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from bulwark.models.pod import SELinuxOptions

SECCOMP_ALLOW_ANY = "*"


class RunAsUserStrategyType(Enum):
    """Strategies for the run-as user dimension."""

    MUST_RUN_AS = "MustRunAs"
    MUST_RUN_AS_RANGE = "MustRunAsRange"
    MUST_RUN_AS_NON_ROOT = "MustRunAsNonRoot"
    RUN_AS_ANY = "RunAsAny"


class SELinuxStrategyType(Enum):
    """Strategies for the SELinux label dimension."""

    MUST_RUN_AS = "MustRunAs"
    RUN_AS_ANY = "RunAsAny"


@dataclass
class RunAsUserRule:
    """
    Run-as user rule.

    ``type`` keeps the declared string so that an unknown strategy can
    be reported when the policy is turned into a provider.
    """

    type: str = RunAsUserStrategyType.RUN_AS_ANY.value
    uid: Optional[int] = None
    allocation_key: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"type": self.type}
        if self.uid is not None:
            data["uid"] = self.uid
        if self.allocation_key is not None:
            data["allocationKey"] = self.allocation_key
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunAsUserRule:
        """Create from dictionary."""
        return cls(
            type=data.get("type", RunAsUserStrategyType.RUN_AS_ANY.value),
            uid=data.get("uid"),
            allocation_key=data.get("allocationKey"),
        )


@dataclass
class SELinuxRule:
    """SELinux label rule."""

    type: str = SELinuxStrategyType.RUN_AS_ANY.value
    se_linux_options: Optional[SELinuxOptions] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"type": self.type}
        if self.se_linux_options is not None:
            data["seLinuxOptions"] = self.se_linux_options.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SELinuxRule:
        """Create from dictionary."""
        options = data.get("seLinuxOptions")
        return cls(
            type=data.get("type", SELinuxStrategyType.RUN_AS_ANY.value),
            se_linux_options=SELinuxOptions.from_dict(options) if options is not None else None,
        )


@dataclass
class SeccompRule:
    """Seccomp profile allow-list. ``"*"`` allows any profile."""

    allowed_profiles: list[str] = field(default_factory=list)

    @property
    def allows_any(self) -> bool:
        """Check if the wildcard is present."""
        return SECCOMP_ALLOW_ANY in self.allowed_profiles

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"allowedProfiles": list(self.allowed_profiles)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SeccompRule:
        """Create from dictionary."""
        return cls(allowed_profiles=list(data.get("allowedProfiles") or []))


@dataclass
class SecurityPolicy:
    """
    A named, ACL-scoped security context constraint.

    Attributes:
        name: Unique policy name, also the candidate ordering key
        run_as_user: Run-as user rule
        se_linux: SELinux label rule
        seccomp: Seccomp profile rule
        allow_privileged: Whether privileged containers are allowed
        allowed_capabilities: Capabilities a container may add
        allow_host_dir_volume: Whether host path volumes may be mounted
        users: User names allowed to use the policy
        groups: Group names allowed to use the policy
        description: Free-form description
    """

    name: str
    run_as_user: RunAsUserRule = field(default_factory=RunAsUserRule)
    se_linux: SELinuxRule = field(default_factory=SELinuxRule)
    seccomp: SeccompRule = field(default_factory=SeccompRule)
    allow_privileged: bool = False
    allowed_capabilities: list[str] = field(default_factory=list)
    allow_host_dir_volume: bool = False
    users: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "runAsUser": self.run_as_user.to_dict(),
            "seLinuxContext": self.se_linux.to_dict(),
            "seccomp": self.seccomp.to_dict(),
            "allowPrivilegedContainer": self.allow_privileged,
            "allowedCapabilities": list(self.allowed_capabilities),
            "allowHostDirVolumePlugin": self.allow_host_dir_volume,
            "users": list(self.users),
            "groups": list(self.groups),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SecurityPolicy:
        """
        Create from dictionary.

        Accepts either a flat policy or a Kubernetes-style object with
        the name under ``metadata``.
        """
        name = data.get("name")
        if not name:
            name = (data.get("metadata") or {}).get("name", "")
        return cls(
            name=name,
            description=data.get("description", ""),
            run_as_user=RunAsUserRule.from_dict(data.get("runAsUser") or {}),
            se_linux=SELinuxRule.from_dict(data.get("seLinuxContext") or {}),
            seccomp=SeccompRule.from_dict(data.get("seccomp") or {}),
            allow_privileged=bool(data.get("allowPrivilegedContainer", False)),
            allowed_capabilities=list(data.get("allowedCapabilities") or []),
            allow_host_dir_volume=bool(data.get("allowHostDirVolumePlugin", False)),
            users=list(data.get("users") or []),
            groups=list(data.get("groups") or []),
        )


class PolicyCollection:
    """Collection of security policies with lookup helpers."""

    def __init__(self, policies: list[SecurityPolicy] | None = None):
        self._policies = list(policies or [])

    def __len__(self) -> int:
        return len(self._policies)

    def __iter__(self) -> Iterator[SecurityPolicy]:
        return iter(self._policies)

    @property
    def policies(self) -> list[SecurityPolicy]:
        """Get the policies as a list."""
        return list(self._policies)

    def get(self, name: str) -> SecurityPolicy | None:
        """Get a policy by name."""
        for policy in self._policies:
            if policy.name == name:
                return policy
        return None

    def names(self) -> list[str]:
        """Get sorted policy names."""
        return sorted(p.name for p in self._policies)
