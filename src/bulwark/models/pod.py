"""
Pod data model for Mantissa Bulwark.

Covers the subset of a Kubernetes Pod that security context
admission reads and writes: containers, their security contexts,
volume mounts, volumes and seccomp annotations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

SECCOMP_POD_ANNOTATION_KEY = "seccomp.security.alpha.kubernetes.io/pod"
SECCOMP_CONTAINER_ANNOTATION_PREFIX = "container.seccomp.security.alpha.kubernetes.io/"


@dataclass
class SELinuxOptions:
    """SELinux label applied to a container."""

    user: str = ""
    role: str = ""
    type: str = ""
    level: str = ""
    disabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {}
        for key in ("user", "role", "type", "level"):
            value = getattr(self, key)
            if value:
                data[key] = value
        if self.disabled:
            data["disabled"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SELinuxOptions:
        """Create from dictionary."""
        return cls(
            user=data.get("user", ""),
            role=data.get("role", ""),
            type=data.get("type", ""),
            level=data.get("level", ""),
            disabled=bool(data.get("disabled", False)),
        )


@dataclass
class Capabilities:
    """Kernel capabilities to add to or drop from a container."""

    add: list[str] = field(default_factory=list)
    drop: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"add": list(self.add), "drop": list(self.drop)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Capabilities:
        """Create from dictionary."""
        return cls(
            add=list(data.get("add") or []),
            drop=list(data.get("drop") or []),
        )


@dataclass
class SecurityContext:
    """
    Container security context.

    Every field is optional; None means the caller did not request a
    value and a policy strategy may fill it in.
    """

    run_as_user: Optional[int] = None
    se_linux_options: Optional[SELinuxOptions] = None
    seccomp_profile: Optional[str] = None
    privileged: Optional[bool] = None
    capabilities: Optional[Capabilities] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting unset fields."""
        data: dict[str, Any] = {}
        if self.run_as_user is not None:
            data["runAsUser"] = self.run_as_user
        if self.se_linux_options is not None:
            data["seLinuxOptions"] = self.se_linux_options.to_dict()
        if self.seccomp_profile is not None:
            data["seccompProfile"] = self.seccomp_profile
        if self.privileged is not None:
            data["privileged"] = self.privileged
        if self.capabilities is not None:
            data["capabilities"] = self.capabilities.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SecurityContext:
        """Create from dictionary."""
        se_linux = data.get("seLinuxOptions")
        caps = data.get("capabilities")
        return cls(
            run_as_user=data.get("runAsUser"),
            se_linux_options=SELinuxOptions.from_dict(se_linux) if se_linux is not None else None,
            seccomp_profile=data.get("seccompProfile"),
            privileged=data.get("privileged"),
            capabilities=Capabilities.from_dict(caps) if caps is not None else None,
        )


@dataclass
class VolumeMount:
    """A container's reference to a named volume."""

    name: str
    mount_path: str = ""
    read_only: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"name": self.name, "mountPath": self.mount_path}
        if self.read_only:
            data["readOnly"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VolumeMount:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            mount_path=data.get("mountPath", ""),
            read_only=bool(data.get("readOnly", False)),
        )


@dataclass
class Volume:
    """
    A volume definition.

    Only host_path matters to admission; every other volume source is
    kept opaque in ``source``.
    """

    name: str
    host_path: Optional[str] = None
    source: dict[str, Any] = field(default_factory=dict)

    @property
    def is_host_path(self) -> bool:
        """Check if the volume exposes a host directory."""
        return self.host_path is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"name": self.name}
        data.update(self.source)
        if self.host_path is not None:
            data["hostPath"] = {"path": self.host_path}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Volume:
        """Create from dictionary (pod volume or PersistentVolume spec)."""
        host_path = data.get("hostPath")
        source = {k: v for k, v in data.items() if k not in ("name", "hostPath")}
        return cls(
            name=data["name"],
            host_path=host_path.get("path", "") if isinstance(host_path, dict) else host_path,
            source=source,
        )


@dataclass
class Container:
    """A container within a pod."""

    name: str
    image: str = ""
    security_context: Optional[SecurityContext] = None
    volume_mounts: list[VolumeMount] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"name": self.name}
        if self.image:
            data["image"] = self.image
        if self.security_context is not None:
            data["securityContext"] = self.security_context.to_dict()
        if self.volume_mounts:
            data["volumeMounts"] = [vm.to_dict() for vm in self.volume_mounts]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Container:
        """Create from dictionary."""
        sc = data.get("securityContext")
        return cls(
            name=data["name"],
            image=data.get("image", ""),
            security_context=SecurityContext.from_dict(sc) if sc is not None else None,
            volume_mounts=[VolumeMount.from_dict(vm) for vm in data.get("volumeMounts") or []],
        )


@dataclass
class Pod:
    """
    A pod submitted for admission.

    Attributes:
        name: Pod name
        namespace: Pod namespace
        service_account_name: Service account the pod runs as
        annotations: Pod annotations (seccomp profiles live here)
        containers: Application containers
        init_containers: Init containers
        volumes: Volumes declared by the pod
    """

    name: str
    namespace: str = ""
    service_account_name: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    containers: list[Container] = field(default_factory=list)
    init_containers: list[Container] = field(default_factory=list)
    volumes: list[Volume] = field(default_factory=list)

    def iter_containers(self) -> Iterator[tuple[str, int, Container]]:
        """
        Iterate over every container with its spec field and index.

        Init containers come first, matching the order the kubelet
        starts them.
        """
        for index, container in enumerate(self.init_containers):
            yield "initContainers", index, container
        for index, container in enumerate(self.containers):
            yield "containers", index, container

    def container_at(self, spec_field: str, index: int) -> Container:
        """Get the container at a position returned by iter_containers."""
        if spec_field == "initContainers":
            return self.init_containers[index]
        return self.containers[index]

    def find_volume(self, name: str) -> Volume | None:
        """Find a pod-declared volume by name."""
        for volume in self.volumes:
            if volume.name == name:
                return volume
        return None

    @property
    def pod_seccomp_profile(self) -> str | None:
        """Pod level seccomp profile annotation, if set."""
        return self.annotations.get(SECCOMP_POD_ANNOTATION_KEY)

    def container_seccomp_profile(self, container: Container) -> str | None:
        """
        Effective seccomp profile for a container.

        The container's own security context wins, then its annotation,
        then the pod level annotation.
        """
        sc = container.security_context
        if sc is not None and sc.seccomp_profile is not None:
            return sc.seccomp_profile
        key = SECCOMP_CONTAINER_ANNOTATION_PREFIX + container.name
        if key in self.annotations:
            return self.annotations[key]
        return self.pod_seccomp_profile

    def to_dict(self) -> dict[str, Any]:
        """Convert to a Kubernetes-style manifest dictionary."""
        metadata: dict[str, Any] = {"name": self.name}
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)

        spec: dict[str, Any] = {"containers": [c.to_dict() for c in self.containers]}
        if self.service_account_name:
            spec["serviceAccountName"] = self.service_account_name
        if self.init_containers:
            spec["initContainers"] = [c.to_dict() for c in self.init_containers]
        if self.volumes:
            spec["volumes"] = [v.to_dict() for v in self.volumes]

        return {"apiVersion": "v1", "kind": "Pod", "metadata": metadata, "spec": spec}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pod:
        """Create from a Kubernetes-style manifest dictionary."""
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            service_account_name=spec.get("serviceAccountName") or spec.get("serviceAccount", ""),
            annotations=dict(metadata.get("annotations") or {}),
            containers=[Container.from_dict(c) for c in spec.get("containers") or []],
            init_containers=[Container.from_dict(c) for c in spec.get("initContainers") or []],
            volumes=[Volume.from_dict(v) for v in spec.get("volumes") or []],
        )
