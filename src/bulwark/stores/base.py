"""
Collaborator store interfaces for Mantissa Bulwark.

Admission reads policies, service identities, volumes and allocation
annotations through these interfaces. Implementations raise
CollaboratorLookupError when the backing system fails or an object
does not exist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bulwark.models import SecurityPolicy, ServiceIdentity, Volume


class PolicyStore(ABC):
    """Source of the security policies visible to admission."""

    @abstractmethod
    def list_policies(self) -> list[SecurityPolicy]:
        """
        List all visible policies.

        Returns:
            List of policies, in no particular order

        Raises:
            CollaboratorLookupError: If the policies cannot be listed
        """
        pass


class IdentityStore(ABC):
    """Source of service account identities."""

    @abstractmethod
    def get_service_identity(self, namespace: str, name: str) -> ServiceIdentity:
        """
        Get a service account.

        Args:
            namespace: Service account namespace
            name: Service account name

        Returns:
            ServiceIdentity

        Raises:
            CollaboratorLookupError: If the account cannot be fetched
        """
        pass


class VolumeStore(ABC):
    """Source of cluster-level volume definitions."""

    @abstractmethod
    def get_volume(self, name: str) -> Volume:
        """
        Get a volume by name.

        Raises:
            CollaboratorLookupError: If the volume cannot be fetched
        """
        pass


class AllocationStore(ABC):
    """Backing store for pre-allocated ids, keyed by namespace."""

    @abstractmethod
    def get_annotation(self, namespace: str, key: str) -> str | None:
        """
        Get the allocation annotation of a namespace.

        Returns:
            The raw annotation value, or None if the namespace has none

        Raises:
            CollaboratorLookupError: If the namespace cannot be fetched
        """
        pass
