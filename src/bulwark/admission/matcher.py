"""
Candidate policy matching.

Selects the policies a principal may use and orders them by name so
that the same request always walks the same candidates.
"""

from __future__ import annotations

from bulwark.models import Principal, SecurityPolicy
from bulwark.stores.base import PolicyStore


def policy_applies(policy: SecurityPolicy, principal: Principal) -> bool:
    """Check whether a policy's ACL admits a principal."""
    if principal.user in policy.users:
        return True
    return any(group in principal.groups for group in policy.groups)


def sort_by_name(policies: list[SecurityPolicy]) -> list[SecurityPolicy]:
    """Order policies deterministically by name."""
    return sorted(policies, key=lambda p: p.name)


class PolicyMatcher:
    """Resolves the ordered candidate policies for a principal."""

    def __init__(self, policy_store: PolicyStore):
        self._policy_store = policy_store

    def candidates_for(self, principal: Principal) -> list[SecurityPolicy]:
        """
        Get candidate policies for a principal.

        Args:
            principal: Requesting principal

        Returns:
            Policies whose ACL names the principal's user or one of its
            groups, sorted by name

        Raises:
            CollaboratorLookupError: If the policy store fails
        """
        visible = self._policy_store.list_policies()
        return sort_by_name([p for p in visible if policy_applies(p, principal)])
