"""
Run-as user strategies.
"""

from __future__ import annotations

from typing import Optional

from bulwark.allocation import Allocator
from bulwark.errors import AllocationError, ConfigurationError, ValidationErrorList
from bulwark.models import Container, Pod, RunAsUserRule, RunAsUserStrategyType
from bulwark.strategies.base import RUN_AS_USER_FIELD, RunAsUserStrategy, requested_run_as_user


DEFAULT_NON_ROOT_UID = 1


class MustRunAs(RunAsUserStrategy):
    """Containers must run as one fixed uid."""

    def __init__(self, uid: int):
        self.uid = uid

    def generate(self, pod: Pod, container: Container) -> Optional[int]:
        return self.uid

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        uid = requested_run_as_user(container)
        if uid is None:
            return ValidationErrorList.required(
                RUN_AS_USER_FIELD, f"container {container.name} must run as uid {self.uid}"
            )
        if uid != self.uid:
            return ValidationErrorList.invalid(
                RUN_AS_USER_FIELD, uid, f"must be {self.uid}"
            )
        return ValidationErrorList()


class MustRunAsRange(RunAsUserStrategy):
    """
    Containers must run as the uid allocated to their namespace.

    The uid is read through the allocator on both generate and
    validate, so both paths agree on the value.
    """

    def __init__(self, allocator: Allocator, allocation_key: str):
        self.allocator = allocator
        self.allocation_key = allocation_key

    def generate(self, pod: Pod, container: Container) -> Optional[int]:
        return self.allocator.get(pod.namespace, self.allocation_key)

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        errs = ValidationErrorList()
        uid = requested_run_as_user(container)
        if uid is None:
            errs.extend(
                ValidationErrorList.required(
                    RUN_AS_USER_FIELD,
                    f"container {container.name} must run as the uid allocated to "
                    f"namespace {pod.namespace}",
                )
            )
            return errs

        try:
            allocated = self.allocator.get(pod.namespace, self.allocation_key)
        except AllocationError as e:
            errs.extend(
                ValidationErrorList.internal(
                    RUN_AS_USER_FIELD, f"unable to resolve allocated uid: {e}"
                )
            )
            return errs

        if uid != allocated:
            errs.extend(
                ValidationErrorList.invalid(
                    RUN_AS_USER_FIELD,
                    uid,
                    f"must be {allocated}, the uid allocated to namespace {pod.namespace}",
                )
            )
        return errs


class MustRunAsNonRoot(RunAsUserStrategy):
    """Containers may run as any uid except root."""

    def __init__(self, fallback_uid: int = DEFAULT_NON_ROOT_UID):
        self.fallback_uid = fallback_uid

    def generate(self, pod: Pod, container: Container) -> Optional[int]:
        uid = requested_run_as_user(container)
        if uid is not None and uid > 0:
            return uid
        return self.fallback_uid

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        uid = requested_run_as_user(container)
        if uid is None:
            return ValidationErrorList.required(
                RUN_AS_USER_FIELD, f"container {container.name} must run as a non-root uid"
            )
        if uid <= 0:
            return ValidationErrorList.invalid(
                RUN_AS_USER_FIELD, uid, "running with the root uid is forbidden"
            )
        return ValidationErrorList()


class RunAsAny(RunAsUserStrategy):
    """Any uid, or none, is acceptable."""

    def generate(self, pod: Pod, container: Container) -> Optional[int]:
        return requested_run_as_user(container)

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        return ValidationErrorList()


def create_run_as_user_strategy(
    rule: RunAsUserRule,
    allocator: Allocator | None = None,
    non_root_uid: int = DEFAULT_NON_ROOT_UID,
) -> RunAsUserStrategy:
    """
    Build the run-as user strategy a rule declares.

    Args:
        rule: Policy rule
        allocator: Allocator for MustRunAsRange
        non_root_uid: Fallback uid for MustRunAsNonRoot

    Returns:
        RunAsUserStrategy

    Raises:
        ConfigurationError: If the type is unknown or the rule is incomplete
    """
    try:
        strategy_type = RunAsUserStrategyType(rule.type)
    except ValueError:
        raise ConfigurationError(f"unrecognized RunAsUser strategy type {rule.type!r}")

    if strategy_type == RunAsUserStrategyType.MUST_RUN_AS:
        if rule.uid is None:
            raise ConfigurationError("MustRunAs requires a uid")
        return MustRunAs(rule.uid)

    if strategy_type == RunAsUserStrategyType.MUST_RUN_AS_RANGE:
        if not rule.allocation_key:
            raise ConfigurationError("MustRunAsRange requires an allocation key")
        if allocator is None:
            raise ConfigurationError("MustRunAsRange requires an allocator")
        return MustRunAsRange(allocator, rule.allocation_key)

    if strategy_type == RunAsUserStrategyType.MUST_RUN_AS_NON_ROOT:
        if non_root_uid <= 0:
            raise ConfigurationError(f"non-root fallback uid must be positive, got {non_root_uid}")
        return MustRunAsNonRoot(non_root_uid)

    return RunAsAny()
