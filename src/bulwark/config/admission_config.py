"""
Admission configuration for Mantissa Bulwark.

Provides configuration for where policies come from, which backend
answers identity, volume and allocation lookups, and logging.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from bulwark.admission import SecurityContextConstraintAdmission
from bulwark.allocation import Allocator
from bulwark.models import ServiceIdentity, Volume
from bulwark.stores import (
    AllocationStore,
    FilePolicyStore,
    IdentityStore,
    InMemoryAllocationStore,
    InMemoryIdentityStore,
    InMemoryVolumeStore,
    KubernetesIdentityStore,
    KubernetesNamespaceAnnotationStore,
    KubernetesVolumeStore,
    VolumeStore,
    create_core_v1_api,
)
from bulwark.strategies import DEFAULT_NON_ROOT_UID


class Backend(Enum):
    """Where identities, volumes and allocations are read from."""

    STATIC = "static"  # Declared in the configuration file
    KUBERNETES = "kubernetes"  # Read from the cluster API


@dataclass
class KubernetesConfig:
    """Kubernetes client settings."""

    kubeconfig: str | None = None
    context: str | None = None
    in_cluster: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kubeconfig": self.kubeconfig,
            "context": self.context,
            "in_cluster": self.in_cluster,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KubernetesConfig:
        """Create from dictionary."""
        return cls(
            kubeconfig=data.get("kubeconfig"),
            context=data.get("context"),
            in_cluster=bool(data.get("in_cluster", False)),
        )


@dataclass
class StaticBackendConfig:
    """Identities, volumes and namespace annotations declared inline."""

    service_accounts: list[ServiceIdentity] = field(default_factory=list)
    volumes: list[Volume] = field(default_factory=list)
    namespace_annotations: dict[str, dict[str, str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "service_accounts": [sa.to_dict() for sa in self.service_accounts],
            "volumes": [v.to_dict() for v in self.volumes],
            "namespace_annotations": self.namespace_annotations,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StaticBackendConfig:
        """Create from dictionary."""
        return cls(
            service_accounts=[
                ServiceIdentity.from_dict(sa) for sa in data.get("service_accounts") or []
            ],
            volumes=[Volume.from_dict(v) for v in data.get("volumes") or []],
            namespace_annotations={
                ns: dict(values or {})
                for ns, values in (data.get("namespace_annotations") or {}).items()
            },
        )


@dataclass
class AdmissionConfiguration:
    """
    Complete admission configuration.

    Attributes:
        policy_dirs: Directories holding policy YAML files
        non_root_uid: Fallback uid for MustRunAsNonRoot
        backend: Lookup backend (static or kubernetes)
        kubernetes: Kubernetes client settings
        static: Inline data for the static backend
        log_level: Log level
        log_format: Log format (human or json)
    """

    policy_dirs: list[str] = field(default_factory=lambda: ["policies/"])
    non_root_uid: int = DEFAULT_NON_ROOT_UID
    backend: Backend = Backend.STATIC
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    static: StaticBackendConfig = field(default_factory=StaticBackendConfig)
    log_level: str = "INFO"
    log_format: str = "human"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "policy_dirs": self.policy_dirs,
            "non_root_uid": self.non_root_uid,
            "backend": self.backend.value,
            "kubernetes": self.kubernetes.to_dict(),
            "static": self.static.to_dict(),
            "log_level": self.log_level,
            "log_format": self.log_format,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdmissionConfiguration:
        """Create from dictionary."""
        return cls(
            policy_dirs=list(data.get("policy_dirs") or ["policies/"]),
            non_root_uid=int(data.get("non_root_uid", DEFAULT_NON_ROOT_UID)),
            backend=Backend(data.get("backend", Backend.STATIC.value)),
            kubernetes=KubernetesConfig.from_dict(data.get("kubernetes") or {}),
            static=StaticBackendConfig.from_dict(data.get("static") or {}),
            log_level=data.get("log_level", "INFO"),
            log_format=data.get("log_format", "human"),
        )

    @classmethod
    def from_file(cls, path: str) -> AdmissionConfiguration:
        """Load configuration from a JSON or YAML file."""
        path = os.path.expanduser(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith(".json"):
                return cls.from_dict(json.load(f))
            return cls.from_dict(yaml.safe_load(f) or {})

    def save(self, path: str) -> None:
        """Save configuration to a JSON or YAML file."""
        path = os.path.expanduser(path)
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            if path.endswith(".json"):
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)


def load_config_from_env() -> AdmissionConfiguration:
    """
    Load configuration from environment variables.

    Environment variables:
        BULWARK_CONFIG_FILE: Path to configuration file
        BULWARK_POLICY_DIRS: Comma-separated policy directories
        BULWARK_BACKEND: Lookup backend (static, kubernetes)
        BULWARK_NON_ROOT_UID: Fallback uid for MustRunAsNonRoot
        BULWARK_KUBECONFIG: Path to kubeconfig
        BULWARK_IN_CLUSTER: Use in-cluster Kubernetes configuration
        BULWARK_LOG_LEVEL: Log level
        BULWARK_LOG_FORMAT: Log format

    Returns:
        AdmissionConfiguration instance
    """
    config_file = os.getenv("BULWARK_CONFIG_FILE")
    if config_file and os.path.exists(config_file):
        return AdmissionConfiguration.from_file(config_file)

    config = AdmissionConfiguration()

    policy_dirs = os.getenv("BULWARK_POLICY_DIRS")
    if policy_dirs:
        config.policy_dirs = [d.strip() for d in policy_dirs.split(",") if d.strip()]

    backend = os.getenv("BULWARK_BACKEND")
    if backend:
        config.backend = Backend(backend.lower())

    non_root_uid = os.getenv("BULWARK_NON_ROOT_UID")
    if non_root_uid:
        config.non_root_uid = int(non_root_uid)

    config.kubernetes.kubeconfig = os.getenv("BULWARK_KUBECONFIG") or None
    config.kubernetes.in_cluster = os.getenv("BULWARK_IN_CLUSTER", "").lower() in ("1", "true", "yes")

    config.log_level = os.getenv("BULWARK_LOG_LEVEL", config.log_level)
    config.log_format = os.getenv("BULWARK_LOG_FORMAT", config.log_format)

    return config


def build_admission(config: AdmissionConfiguration) -> SecurityContextConstraintAdmission:
    """
    Wire stores and the admission plugin from a configuration.

    Args:
        config: Admission configuration

    Returns:
        SecurityContextConstraintAdmission ready to admit pods
    """
    identity_store: IdentityStore
    volume_store: VolumeStore
    allocation_store: AllocationStore

    if config.backend == Backend.KUBERNETES:
        core_v1 = create_core_v1_api(**config.kubernetes.to_dict())
        identity_store = KubernetesIdentityStore(core_v1=core_v1)
        volume_store = KubernetesVolumeStore(core_v1=core_v1)
        allocation_store = KubernetesNamespaceAnnotationStore(core_v1=core_v1)
    else:
        identity_store = InMemoryIdentityStore(config.static.service_accounts)
        volume_store = InMemoryVolumeStore(config.static.volumes)
        allocation_store = InMemoryAllocationStore(config.static.namespace_annotations)

    return SecurityContextConstraintAdmission(
        policy_store=FilePolicyStore(config.policy_dirs),
        identity_store=identity_store,
        allocator=Allocator(allocation_store),
        volume_store=volume_store,
        non_root_uid=config.non_root_uid,
    )
