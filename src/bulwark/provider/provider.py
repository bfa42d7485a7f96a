"""
Policy providers.

A provider binds one SecurityPolicy to one strategy per dimension and
exposes security context generation and validation for a container.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod

from bulwark.allocation import Allocator
from bulwark.errors import (
    CollaboratorLookupError,
    ConfigurationError,
    ValidationErrorList,
)
from bulwark.models import (
    SECCOMP_POD_ANNOTATION_KEY,
    Capabilities,
    Container,
    Pod,
    SecurityContext,
    SecurityPolicy,
    Volume,
)
from bulwark.stores.base import VolumeStore
from bulwark.strategies import (
    DEFAULT_NON_ROOT_UID,
    RunAsUserStrategy,
    SeccompStrategy,
    SELinuxStrategy,
    create_run_as_user_strategy,
    create_se_linux_strategy,
    create_seccomp_strategy,
)

logger = logging.getLogger(__name__)


class PolicyProvider(ABC):
    """Creates and validates container security contexts for one policy."""

    @property
    @abstractmethod
    def policy_name(self) -> str:
        """Name of the policy, for audit attribution only."""
        pass

    @abstractmethod
    def create_security_context(self, pod: Pod, container: Container) -> SecurityContext:
        """
        Create a security context for a container.

        Raises:
            AllocationError: If a generated value cannot be resolved
        """
        pass

    @abstractmethod
    def create_pod_annotations(self, pod: Pod) -> dict[str, str]:
        """Create the pod level annotations the pod leaves unset."""
        pass

    @abstractmethod
    def validate_security_context(self, pod: Pod, container: Container) -> ValidationErrorList:
        """
        Validate a container's security context.

        Raises:
            CollaboratorLookupError: If a volume cannot be resolved
        """
        pass


class SimplePolicyProvider(PolicyProvider):
    """
    Provider built from a policy's declared strategies.

    Strategies are chosen once at construction; the provider holds no
    state beyond them and may be built fresh for every request.
    """

    def __init__(
        self,
        policy: SecurityPolicy,
        run_as_user: RunAsUserStrategy,
        se_linux: SELinuxStrategy,
        seccomp: SeccompStrategy,
        volume_store: VolumeStore | None = None,
    ):
        self._policy = policy
        self._run_as_user = run_as_user
        self._se_linux = se_linux
        self._seccomp = seccomp
        self._volume_store = volume_store

    @property
    def policy(self) -> SecurityPolicy:
        """Get the policy."""
        return self._policy

    @property
    def policy_name(self) -> str:
        return self._policy.name

    def create_security_context(self, pod: Pod, container: Container) -> SecurityContext:
        """
        Create a security context for a container.

        Only fields the container leaves unset are generated; requested
        values are carried over untouched. The container itself is not
        modified.

        Args:
            pod: Pod the container belongs to
            container: Container to create the context for

        Returns:
            New SecurityContext

        Raises:
            AllocationError: If a generated value cannot be resolved
        """
        if container.security_context is not None:
            sc = copy.deepcopy(container.security_context)
        else:
            sc = SecurityContext()

        if sc.run_as_user is None:
            sc.run_as_user = self._run_as_user.generate(pod, container)

        if sc.se_linux_options is None:
            sc.se_linux_options = self._se_linux.generate(pod, container)

        if pod.container_seccomp_profile(container) is None:
            sc.seccomp_profile = self._seccomp.generate(pod, container)

        if sc.privileged is None:
            sc.privileged = False

        if sc.capabilities is not None:
            allowed = set(self._policy.allowed_capabilities)
            sc.capabilities = Capabilities(
                add=[cap for cap in sc.capabilities.add if cap in allowed],
                drop=list(sc.capabilities.drop),
            )

        return sc

    def create_pod_annotations(self, pod: Pod) -> dict[str, str]:
        """
        Create the pod level seccomp annotation if the pod has none.

        The pod is not modified; the caller applies the returned
        annotations.

        Args:
            pod: Pod to generate annotations for

        Returns:
            Annotations to add (empty when nothing is generated)
        """
        annotations: dict[str, str] = {}
        if pod.pod_seccomp_profile is None:
            profile = self._seccomp.generate(pod)
            if profile is not None:
                annotations[SECCOMP_POD_ANNOTATION_KEY] = profile
        return annotations

    def validate_security_context(self, pod: Pod, container: Container) -> ValidationErrorList:
        """
        Validate a container's security context against the policy.

        Errors from every dimension are accumulated; nothing stops at
        the first violation.

        Args:
            pod: Pod the container belongs to
            container: Container whose context is validated

        Returns:
            ValidationErrorList (empty if valid)

        Raises:
            CollaboratorLookupError: If a mounted volume cannot be resolved
        """
        errs = ValidationErrorList()

        sc = container.security_context
        if sc is None:
            errs.extend(
                ValidationErrorList.required(
                    "securityContext", f"no security context is set for container {container.name}"
                )
            )
            return errs

        errs.extend(self._run_as_user.validate(pod, container))
        errs.extend(self._se_linux.validate(pod, container))
        errs.extend(self._seccomp.validate(pod, container))

        if not self._policy.allow_privileged and sc.privileged:
            errs.extend(
                ValidationErrorList.invalid(
                    "securityContext.privileged", True, "privileged containers are not allowed"
                )
            )

        if sc.capabilities is not None:
            for cap in sc.capabilities.add:
                if cap not in self._policy.allowed_capabilities:
                    errs.extend(
                        ValidationErrorList.invalid(
                            "securityContext.capabilities.add",
                            cap,
                            "capability may not be added",
                        )
                    )

        if not self._policy.allow_host_dir_volume:
            for mount in container.volume_mounts:
                volume = self._resolve_volume(pod, mount.name)
                if volume.is_host_path:
                    errs.extend(
                        ValidationErrorList.invalid(
                            "volumeMounts", mount.name, "host path volumes are not allowed"
                        )
                    )

        return errs

    def _resolve_volume(self, pod: Pod, name: str) -> Volume:
        volume = pod.find_volume(name)
        if volume is not None:
            return volume
        if self._volume_store is None:
            raise CollaboratorLookupError(
                f'volume "{name}" is not declared by pod {pod.name} and no volume store is configured',
                resource="volumes",
                name=name,
            )
        return self._volume_store.get_volume(name)


def create_provider(
    policy: SecurityPolicy,
    allocator: Allocator | None = None,
    volume_store: VolumeStore | None = None,
    non_root_uid: int = DEFAULT_NON_ROOT_UID,
) -> SimplePolicyProvider:
    """
    Build a provider for a policy.

    Args:
        policy: Policy to bind
        allocator: Allocator for range based run-as user rules
        volume_store: Store used to resolve volumes not declared by the pod
        non_root_uid: Fallback uid for MustRunAsNonRoot

    Returns:
        SimplePolicyProvider

    Raises:
        ConfigurationError: If a declared strategy is unknown or incomplete
    """
    try:
        run_as_user = create_run_as_user_strategy(policy.run_as_user, allocator, non_root_uid)
        se_linux = create_se_linux_strategy(policy.se_linux)
        seccomp = create_seccomp_strategy(policy.seccomp)
    except ConfigurationError as e:
        raise ConfigurationError(str(e), policy_name=policy.name) from e

    return SimplePolicyProvider(policy, run_as_user, se_linux, seccomp, volume_store)
