"""
Requesting identity models for Mantissa Bulwark.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SERVICE_ACCOUNT_USER_PREFIX = "system:serviceaccount:"
ALL_SERVICE_ACCOUNTS_GROUP = "system:serviceaccounts"
NAMESPACE_SERVICE_ACCOUNTS_GROUP_PREFIX = "system:serviceaccounts:"


@dataclass
class ServiceIdentity:
    """A service account as returned by an identity store."""

    name: str
    namespace: str
    uid: str = ""
    groups: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "uid": self.uid,
            "groups": list(self.groups),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceIdentity:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            namespace=data.get("namespace", ""),
            uid=data.get("uid", ""),
            groups=list(data.get("groups") or []),
        )


@dataclass(frozen=True)
class Principal:
    """The user name and groups a policy ACL is matched against."""

    user: str
    groups: frozenset[str] = frozenset()

    @classmethod
    def for_service_identity(cls, identity: ServiceIdentity) -> Principal:
        """
        Derive the principal of a service account.

        Follows the Kubernetes naming: the user is
        system:serviceaccount:<namespace>:<name> and the account belongs
        to system:serviceaccounts and system:serviceaccounts:<namespace>.
        """
        user = f"{SERVICE_ACCOUNT_USER_PREFIX}{identity.namespace}:{identity.name}"
        groups = {
            ALL_SERVICE_ACCOUNTS_GROUP,
            f"{NAMESPACE_SERVICE_ACCOUNTS_GROUP_PREFIX}{identity.namespace}",
        }
        groups.update(identity.groups)
        return cls(user=user, groups=frozenset(groups))
