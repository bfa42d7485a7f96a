"""
In-memory collaborator stores.

Used by the static configuration backend and by tests.
"""

from __future__ import annotations

from bulwark.errors import CollaboratorLookupError
from bulwark.models import SecurityPolicy, ServiceIdentity, Volume
from bulwark.stores.base import AllocationStore, IdentityStore, PolicyStore, VolumeStore


class InMemoryPolicyStore(PolicyStore):
    """Policy store holding a fixed list of policies."""

    def __init__(self, policies: list[SecurityPolicy] | None = None):
        self._policies = list(policies or [])

    def add(self, policy: SecurityPolicy) -> None:
        """Add a policy."""
        self._policies.append(policy)

    def list_policies(self) -> list[SecurityPolicy]:
        return list(self._policies)


class InMemoryIdentityStore(IdentityStore):
    """Identity store keyed by (namespace, name)."""

    def __init__(self, identities: list[ServiceIdentity] | None = None):
        self._identities: dict[tuple[str, str], ServiceIdentity] = {}
        for identity in identities or []:
            self.add(identity)

    def add(self, identity: ServiceIdentity) -> None:
        """Add or replace a service identity."""
        self._identities[(identity.namespace, identity.name)] = identity

    def get_service_identity(self, namespace: str, name: str) -> ServiceIdentity:
        identity = self._identities.get((namespace, name))
        if identity is None:
            raise CollaboratorLookupError(
                f'serviceaccount "{name}" not found in namespace "{namespace}"',
                resource="serviceaccounts",
                name=name,
            )
        return identity


class InMemoryVolumeStore(VolumeStore):
    """Volume store keyed by volume name."""

    def __init__(self, volumes: list[Volume] | None = None):
        self._volumes = {v.name: v for v in volumes or []}

    def add(self, volume: Volume) -> None:
        """Add or replace a volume."""
        self._volumes[volume.name] = volume

    def get_volume(self, name: str) -> Volume:
        volume = self._volumes.get(name)
        if volume is None:
            raise CollaboratorLookupError(
                f'volume "{name}" not found', resource="persistentvolumes", name=name
            )
        return volume


class InMemoryAllocationStore(AllocationStore):
    """Allocation store mapping namespace to its annotations."""

    def __init__(self, annotations: dict[str, dict[str, str]] | None = None):
        self._annotations = {ns: dict(values) for ns, values in (annotations or {}).items()}

    def set_annotation(self, namespace: str, key: str, value: str) -> None:
        """Set an annotation on a namespace."""
        self._annotations.setdefault(namespace, {})[key] = value

    def get_annotation(self, namespace: str, key: str) -> str | None:
        if namespace not in self._annotations:
            raise CollaboratorLookupError(
                f'namespace "{namespace}" not found', resource="namespaces", name=namespace
            )
        return self._annotations[namespace].get(key)
