"""
Unit tests for field errors and Bulwark exceptions.
"""

from __future__ import annotations

from bulwark.errors import (
    AllocationError,
    BulwarkError,
    CollaboratorLookupError,
    ConfigurationError,
    ErrorType,
    FieldError,
    PolicyLoadError,
    ValidationErrorList,
)


class TestFieldError:
    """Tests for FieldError formatting."""

    def test_invalid(self):
        """Test invalid errors show the value and detail."""
        err = FieldError("securityContext.runAsUser", 0, "must be 1000")
        assert str(err) == "securityContext.runAsUser: Invalid value: 0: must be 1000"

    def test_required(self):
        """Test required errors name the missing field."""
        err = ValidationErrorList.required("securityContext", "no security context")[0]
        assert str(err) == "securityContext: Required value: no security context"

    def test_not_supported(self):
        """Test not-supported errors list the allowed values."""
        err = ValidationErrorList.not_supported("securityContext.seccompProfile", "bar", ["foo", "baz"])[0]
        assert str(err) == (
            'securityContext.seccompProfile: Unsupported value: "bar": supported values: "foo", "baz"'
        )

    def test_to_dict(self):
        """Test dictionary form carries the error type."""
        err = ValidationErrorList.not_supported("f", "v", ["a"])[0]
        assert err.to_dict() == {
            "field": "f",
            "value": "v",
            "detail": "value is not in the allowed list",
            "type": "not_supported",
            "allowed_values": ["a"],
        }
        assert "allowed_values" not in FieldError("f", 1, "d").to_dict()


class TestValidationErrorList:
    """Tests for ValidationErrorList."""

    def test_accumulates_in_order(self):
        """Test errors keep insertion order and are never truncated."""
        errs = ValidationErrorList()
        for i in range(50):
            errs.extend(ValidationErrorList.invalid(f"field{i}", i, "bad"))
        assert len(errs) == 50
        assert errs.fields[0] == "field0"
        assert errs.fields[-1] == "field49"

    def test_empty_is_falsy(self):
        """Test an empty list means valid."""
        assert not ValidationErrorList()
        assert ValidationErrorList() == []

    def test_str_joins(self):
        """Test the string form joins every error."""
        errs = ValidationErrorList.internal("a", "x")
        errs.extend(ValidationErrorList.invalid("b", 1, "y"))
        assert str(errs) == "a: Internal error: x; b: Invalid value: 1: y"
        assert [d["type"] for d in errs.to_dicts()] == ["internal", "invalid"]


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        """Test every error derives from BulwarkError."""
        for exc in (
            ConfigurationError("x"),
            AllocationError("x"),
            CollaboratorLookupError("x"),
            PolicyLoadError("x"),
        ):
            assert isinstance(exc, BulwarkError)

    def test_configuration_error_prefix(self):
        """Test the policy name prefixes the message."""
        assert str(ConfigurationError("bad type", policy_name="restricted")) == "policy restricted: bad type"
        assert str(ConfigurationError("bad type")) == "bad type"

    def test_attributes(self):
        """Test context attributes are kept."""
        alloc = AllocationError("no range", namespace="team-a", key="k")
        assert (alloc.namespace, alloc.key) == ("team-a", "k")
        lookup = CollaboratorLookupError("gone", resource="serviceaccounts", name="builder")
        assert (lookup.resource, lookup.name) == ("serviceaccounts", "builder")
        load = PolicyLoadError("File not found", "/p/a.yaml")
        assert str(load) == "/p/a.yaml: File not found"
        assert ErrorType.FORBIDDEN.value == "forbidden"
