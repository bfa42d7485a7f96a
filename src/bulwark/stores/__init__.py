"""
Collaborator stores for Mantissa Bulwark.

Provides the interfaces admission reads through, plus in-memory,
YAML file and Kubernetes API implementations.
"""

from __future__ import annotations

from bulwark.stores.base import (
    AllocationStore,
    IdentityStore,
    PolicyStore,
    VolumeStore,
)
from bulwark.stores.files import FilePolicyStore, PolicyLoader
from bulwark.stores.kubernetes import (
    KubernetesIdentityStore,
    KubernetesNamespaceAnnotationStore,
    KubernetesVolumeStore,
    create_core_v1_api,
)
from bulwark.stores.memory import (
    InMemoryAllocationStore,
    InMemoryIdentityStore,
    InMemoryPolicyStore,
    InMemoryVolumeStore,
)

__all__ = [
    # Interfaces
    "AllocationStore",
    "IdentityStore",
    "PolicyStore",
    "VolumeStore",
    # Files
    "FilePolicyStore",
    "PolicyLoader",
    # Kubernetes
    "KubernetesIdentityStore",
    "KubernetesNamespaceAnnotationStore",
    "KubernetesVolumeStore",
    "create_core_v1_api",
    # In-memory
    "InMemoryAllocationStore",
    "InMemoryIdentityStore",
    "InMemoryPolicyStore",
    "InMemoryVolumeStore",
]
