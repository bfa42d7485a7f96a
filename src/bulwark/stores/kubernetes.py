"""
Kubernetes API backed collaborator stores.

Thin adapters over the CoreV1 API for service accounts, persistent
volumes and namespace allocation annotations.
"""

from __future__ import annotations

import logging
from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from bulwark.errors import CollaboratorLookupError
from bulwark.models import ServiceIdentity, Volume
from bulwark.stores.base import AllocationStore, IdentityStore, VolumeStore

logger = logging.getLogger(__name__)


def create_core_v1_api(
    kubeconfig: str | None = None,
    context: str | None = None,
    in_cluster: bool = False,
) -> Any:
    """
    Load Kubernetes configuration and build a CoreV1Api client.

    Args:
        kubeconfig: Path to kubeconfig file (default: ~/.kube/config)
        context: Kubernetes context to use (default: current context)
        in_cluster: If True, use in-cluster configuration

    Returns:
        CoreV1Api client
    """
    if in_cluster:
        config.load_incluster_config()
    else:
        config.load_kube_config(
            config_file=kubeconfig,
            context=context,
        )
    return client.CoreV1Api(client.ApiClient())


class KubernetesClientMixin:
    """Lazily builds a CoreV1Api client from kubeconfig or in-cluster config."""

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        in_cluster: bool = False,
        core_v1: Any = None,
    ) -> None:
        """
        Initialize the client settings.

        Args:
            kubeconfig: Path to kubeconfig file (default: ~/.kube/config)
            context: Kubernetes context to use (default: current context)
            in_cluster: If True, use in-cluster configuration
            core_v1: Pre-built CoreV1Api, skips configuration loading
        """
        self._kubeconfig = kubeconfig
        self._context = context
        self._in_cluster = in_cluster
        self._core_v1 = core_v1

    @property
    def core_v1(self) -> Any:
        """Get the CoreV1Api client, creating it on first use."""
        if self._core_v1 is None:
            self._core_v1 = create_core_v1_api(self._kubeconfig, self._context, self._in_cluster)
        return self._core_v1


class KubernetesIdentityStore(KubernetesClientMixin, IdentityStore):
    """Reads ServiceAccount objects."""

    def get_service_identity(self, namespace: str, name: str) -> ServiceIdentity:
        try:
            account = self.core_v1.read_namespaced_service_account(name, namespace)
        except ApiException as e:
            logger.warning(f"Failed to read service account {namespace}/{name}: {e.status}")
            raise CollaboratorLookupError(
                f"unable to get serviceaccount {namespace}/{name}: {e.reason}",
                resource="serviceaccounts",
                name=name,
            ) from e

        metadata = account.metadata
        return ServiceIdentity(
            name=metadata.name or name,
            namespace=metadata.namespace or namespace,
            uid=metadata.uid or "",
        )


class KubernetesVolumeStore(KubernetesClientMixin, VolumeStore):
    """Reads PersistentVolume objects."""

    def get_volume(self, name: str) -> Volume:
        try:
            pv = self.core_v1.read_persistent_volume(name)
        except ApiException as e:
            logger.warning(f"Failed to read persistent volume {name}: {e.status}")
            raise CollaboratorLookupError(
                f"unable to get persistentvolume {name}: {e.reason}",
                resource="persistentvolumes",
                name=name,
            ) from e

        host_path = getattr(pv.spec, "host_path", None)
        return Volume(
            name=pv.metadata.name or name,
            host_path=host_path.path if host_path is not None else None,
        )


class KubernetesNamespaceAnnotationStore(KubernetesClientMixin, AllocationStore):
    """Reads allocation annotations from Namespace objects."""

    def get_annotation(self, namespace: str, key: str) -> str | None:
        try:
            ns = self.core_v1.read_namespace(namespace)
        except ApiException as e:
            logger.warning(f"Failed to read namespace {namespace}: {e.status}")
            raise CollaboratorLookupError(
                f"unable to get namespace {namespace}: {e.reason}",
                resource="namespaces",
                name=namespace,
            ) from e

        annotations = ns.metadata.annotations or {}
        return annotations.get(key)
