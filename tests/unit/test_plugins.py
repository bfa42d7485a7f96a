"""
Unit tests for the simple admission plugins and plugin registry.
"""

from __future__ import annotations

import pytest

from bulwark.admission import (
    AlwaysAdmit,
    DenialReason,
    SecurityContextConstraintAdmission,
    SecurityContextDeny,
    available_plugins,
    get_admission_plugin,
)
from bulwark.errors import ErrorType
from bulwark.models import Container, SecurityContext
from bulwark.stores import InMemoryPolicyStore


class TestSecurityContextDeny:
    """Tests for SecurityContextDeny."""

    def test_admits_pod_without_contexts(self, pod_factory):
        """Test pods that set no security context are admitted."""
        result = SecurityContextDeny().admit(pod_factory(), "team-a")
        assert result.allowed

    def test_denies_any_context(self, pod_factory):
        """Test every container setting a context is reported."""
        pod = pod_factory(
            Container(name="plain"),
            Container(name="custom", security_context=SecurityContext(run_as_user=0)),
        )
        pod.init_containers = [Container(name="setup", security_context=SecurityContext())]

        result = SecurityContextDeny().admit(pod, "team-a")

        assert result.reason == DenialReason.FORBIDDEN
        assert result.errors.fields == [
            "spec.initContainers[0].securityContext",
            "spec.containers[1].securityContext",
        ]
        assert all(e.error_type == ErrorType.FORBIDDEN for e in result.errors)
        assert result.container == "setup"

    def test_ignores_delete(self, pod_factory):
        """Test out of scope operations are admitted."""
        pod = pod_factory(Container(name="c", security_context=SecurityContext(privileged=True)))
        assert SecurityContextDeny().admit(pod, "team-a", "DELETE").allowed


class TestAlwaysAdmit:
    """Tests for AlwaysAdmit."""

    def test_admits_everything(self, pod_factory, privileged_container):
        """Test even privileged pods are admitted untouched."""
        pod = pod_factory(privileged_container)
        result = AlwaysAdmit().admit(pod, "")
        assert result.allowed
        assert result.namespace == "team-a"
        assert pod.containers[0].security_context == SecurityContext(privileged=True)


class TestPluginRegistry:
    """Tests for the admission plugin registry."""

    def test_available_plugins(self):
        """Test the three plugins are registered."""
        assert available_plugins() == [
            "SecurityContextAdmit",
            "SecurityContextConstraint",
            "SecurityContextDeny",
        ]

    def test_get_simple_plugins(self):
        """Test simple plugins are built without dependencies."""
        assert isinstance(get_admission_plugin("SecurityContextDeny"), SecurityContextDeny)
        assert isinstance(get_admission_plugin("SecurityContextAdmit"), AlwaysAdmit)

    def test_get_constraint_plugin(self, identity_store, allocator):
        """Test the constraint plugin receives its stores."""
        plugin = get_admission_plugin(
            "SecurityContextConstraint",
            policy_store=InMemoryPolicyStore(),
            identity_store=identity_store,
            allocator=allocator,
        )
        assert isinstance(plugin, SecurityContextConstraintAdmission)

    def test_unknown_plugin(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown admission plugin"):
            get_admission_plugin("PodSecurityPolicy")
