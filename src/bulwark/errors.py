"""
Error types and field validation plumbing for Mantissa Bulwark.

Validation problems are accumulated as FieldError entries in a
ValidationErrorList and returned to the caller. Infrastructure and
configuration problems are raised as BulwarkError subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class ErrorType(Enum):
    """Kinds of field validation errors."""

    INVALID = "invalid"  # Value present but not acceptable
    REQUIRED = "required"  # Value required but absent
    NOT_SUPPORTED = "not_supported"  # Value outside an allow-list
    FORBIDDEN = "forbidden"  # Field may not be used at all
    INTERNAL = "internal"  # Value could not be checked


@dataclass
class FieldError:
    """A single field-attributed validation error."""

    field: str
    value: Any
    detail: str
    error_type: ErrorType = ErrorType.INVALID
    allowed_values: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "field": self.field,
            "value": self.value,
            "detail": self.detail,
            "type": self.error_type.value,
        }
        if self.allowed_values:
            data["allowed_values"] = list(self.allowed_values)
        return data

    def __str__(self) -> str:
        if self.error_type == ErrorType.REQUIRED:
            return f"{self.field}: Required value: {self.detail}"
        if self.error_type == ErrorType.NOT_SUPPORTED:
            allowed = ", ".join(f'"{v}"' for v in self.allowed_values)
            return (
                f'{self.field}: Unsupported value: "{self.value}": '
                f"supported values: {allowed}"
            )
        if self.error_type == ErrorType.FORBIDDEN:
            return f"{self.field}: Forbidden: {self.detail}"
        if self.error_type == ErrorType.INTERNAL:
            return f"{self.field}: Internal error: {self.detail}"
        return f"{self.field}: Invalid value: {self.value!r}: {self.detail}"


class ValidationErrorList(list):
    """Ordered, never-truncated list of FieldError entries."""

    def __init__(self, errors: Iterable[FieldError] | None = None):
        super().__init__(errors or [])

    @classmethod
    def invalid(cls, field_path: str, value: Any, detail: str) -> "ValidationErrorList":
        return cls([FieldError(field_path, value, detail, ErrorType.INVALID)])

    @classmethod
    def required(cls, field_path: str, detail: str) -> "ValidationErrorList":
        return cls([FieldError(field_path, None, detail, ErrorType.REQUIRED)])

    @classmethod
    def not_supported(
        cls, field_path: str, value: Any, allowed: list[Any]
    ) -> "ValidationErrorList":
        return cls(
            [
                FieldError(
                    field_path,
                    value,
                    "value is not in the allowed list",
                    ErrorType.NOT_SUPPORTED,
                    list(allowed),
                )
            ]
        )

    @classmethod
    def internal(cls, field_path: str, detail: str) -> "ValidationErrorList":
        return cls([FieldError(field_path, None, detail, ErrorType.INTERNAL)])

    @property
    def fields(self) -> list[str]:
        """Field paths of all errors, in order."""
        return [e.field for e in self]

    def to_dicts(self) -> list[dict[str, Any]]:
        """Convert all errors to dictionaries."""
        return [e.to_dict() for e in self]

    def __str__(self) -> str:
        return "; ".join(str(e) for e in self)


class BulwarkError(Exception):
    """Base class for Bulwark errors."""


class ConfigurationError(BulwarkError):
    """A policy declares an unrecognized or malformed strategy."""

    def __init__(self, message: str, policy_name: str | None = None):
        self.policy_name = policy_name
        prefix = f"policy {policy_name}: " if policy_name else ""
        super().__init__(f"{prefix}{message}")


class AllocationError(BulwarkError):
    """The allocator could not resolve a pre-allocated id."""

    def __init__(self, message: str, namespace: str = "", key: str = ""):
        self.namespace = namespace
        self.key = key
        super().__init__(message)


class CollaboratorLookupError(BulwarkError):
    """An identity, policy or volume collaborator failed."""

    def __init__(self, message: str, resource: str = "", name: str = ""):
        self.resource = resource
        self.name = name
        super().__init__(message)


class PolicyLoadError(BulwarkError):
    """Exception raised when policy loading fails."""

    def __init__(self, message: str, source_path: str | None = None):
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")
