"""
Pytest configuration and fixtures for Mantissa Bulwark tests.

This module provides common fixtures used across unit and integration tests.
"""

from __future__ import annotations

import pytest

from bulwark.admission import SecurityContextConstraintAdmission
from bulwark.allocation import Allocator
from bulwark.models import (
    Container,
    Pod,
    RunAsUserRule,
    SeccompRule,
    SecurityContext,
    SecurityPolicy,
    SELinuxOptions,
    SELinuxRule,
    ServiceIdentity,
)
from bulwark.stores import (
    InMemoryAllocationStore,
    InMemoryIdentityStore,
    InMemoryPolicyStore,
    InMemoryVolumeStore,
)

UID_RANGE_ANNOTATION = "openshift.io/sa.scc.uid-range"
SERVICE_ACCOUNT_USER = "system:serviceaccount:team-a:builder"


def make_pod(
    *containers: Container,
    name: str = "web",
    namespace: str = "team-a",
    service_account: str = "builder",
    annotations: dict[str, str] | None = None,
) -> Pod:
    """Build a pod with the given containers (one bare container by default)."""
    return Pod(
        name=name,
        namespace=namespace,
        service_account_name=service_account,
        annotations=dict(annotations or {}),
        containers=list(containers) or [Container(name="app", image="nginx")],
    )


# Sample policy fixtures


@pytest.fixture
def privileged_policy() -> SecurityPolicy:
    """Return a permissive policy that allows privileged containers."""
    return SecurityPolicy(
        name="privileged",
        run_as_user=RunAsUserRule(type="RunAsAny"),
        se_linux=SELinuxRule(type="RunAsAny"),
        seccomp=SeccompRule(allowed_profiles=["*"]),
        allow_privileged=True,
        allowed_capabilities=["NET_ADMIN", "SYS_TIME"],
        allow_host_dir_volume=True,
        users=[SERVICE_ACCOUNT_USER],
    )


@pytest.fixture
def restricted_policy() -> SecurityPolicy:
    """Return a restrictive, namespace-allocated uid policy."""
    return SecurityPolicy(
        name="restricted",
        run_as_user=RunAsUserRule(type="MustRunAsRange", allocation_key=UID_RANGE_ANNOTATION),
        se_linux=SELinuxRule(
            type="MustRunAs",
            se_linux_options=SELinuxOptions(user="system_u", role="system_r", type="svirt_lxc_net_t", level="s0:c1,c0"),
        ),
        seccomp=SeccompRule(allowed_profiles=["runtime/default"]),
        allow_privileged=False,
        allowed_capabilities=[],
        allow_host_dir_volume=False,
        groups=["system:serviceaccounts"],
    )


@pytest.fixture
def allocation_store() -> InMemoryAllocationStore:
    """Return an allocation store with one namespace allocated."""
    return InMemoryAllocationStore({"team-a": {UID_RANGE_ANNOTATION: "1000100000/10000"}})


@pytest.fixture
def allocator(allocation_store) -> Allocator:
    """Return an allocator over the sample allocation store."""
    return Allocator(allocation_store)


@pytest.fixture
def identity_store() -> InMemoryIdentityStore:
    """Return an identity store holding the builder service account."""
    return InMemoryIdentityStore(
        [ServiceIdentity(name="builder", namespace="team-a", uid="8a3c1f9e")]
    )


@pytest.fixture
def volume_store() -> InMemoryVolumeStore:
    """Return an empty volume store."""
    return InMemoryVolumeStore()


@pytest.fixture
def admission_factory(identity_store, allocator, volume_store):
    """Return a factory building an admission plugin over given policies."""

    def factory(*policies: SecurityPolicy) -> SecurityContextConstraintAdmission:
        return SecurityContextConstraintAdmission(
            policy_store=InMemoryPolicyStore(list(policies)),
            identity_store=identity_store,
            allocator=allocator,
            volume_store=volume_store,
        )

    return factory


@pytest.fixture
def privileged_container() -> Container:
    """Return a container requesting privileged mode."""
    return Container(
        name="app",
        image="nginx",
        security_context=SecurityContext(privileged=True),
    )


@pytest.fixture
def pod_factory():
    """Return the make_pod helper."""
    return make_pod
