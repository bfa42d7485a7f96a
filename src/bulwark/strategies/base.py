"""
Strategy interfaces, one per security dimension.

A strategy generates a value for a container that did not request one
and validates the value a container ends up with. Generation only
fails on unresolved dependencies such as allocator errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from bulwark.errors import ValidationErrorList
from bulwark.models import Container, Pod, SELinuxOptions

RUN_AS_USER_FIELD = "securityContext.runAsUser"
SE_LINUX_FIELD = "securityContext.seLinuxOptions"


class RunAsUserStrategy(ABC):
    """Rule for the run-as user dimension."""

    @abstractmethod
    def generate(self, pod: Pod, container: Container) -> Optional[int]:
        """Generate a uid for a container without one."""
        pass

    @abstractmethod
    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        """Validate the container's uid."""
        pass


class SELinuxStrategy(ABC):
    """Rule for the SELinux label dimension."""

    @abstractmethod
    def generate(self, pod: Pod, container: Container) -> Optional[SELinuxOptions]:
        """Generate a label for a container without one."""
        pass

    @abstractmethod
    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        """Validate the container's label."""
        pass


class SeccompStrategy(ABC):
    """Rule for the seccomp profile dimension."""

    @abstractmethod
    def generate(self, pod: Pod, container: Optional[Container] = None) -> Optional[str]:
        """Generate a profile for a container, or for the pod when no container is given."""
        pass

    @abstractmethod
    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        """Validate the pod profile and every container profile."""
        pass


def requested_run_as_user(container: Container) -> Optional[int]:
    """Get the uid a container asks for, if any."""
    if container.security_context is None:
        return None
    return container.security_context.run_as_user


def requested_se_linux(container: Container) -> Optional[SELinuxOptions]:
    """Get the SELinux label a container asks for, if any."""
    if container.security_context is None:
        return None
    return container.security_context.se_linux_options
