"""
SELinux label strategies.
"""

from __future__ import annotations

import copy
from typing import Optional

from bulwark.errors import ConfigurationError, ValidationErrorList
from bulwark.models import Container, Pod, SELinuxOptions, SELinuxRule, SELinuxStrategyType
from bulwark.strategies.base import SE_LINUX_FIELD, SELinuxStrategy, requested_se_linux

_LABEL_FIELDS = ("user", "role", "type", "level")


class MustRunAs(SELinuxStrategy):
    """Containers must carry exactly the configured label."""

    def __init__(self, options: SELinuxOptions):
        self.options = options

    def generate(self, pod: Pod, container: Container) -> Optional[SELinuxOptions]:
        return copy.deepcopy(self.options)

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        errs = ValidationErrorList()
        requested = requested_se_linux(container)
        if requested is None:
            errs.extend(
                ValidationErrorList.required(
                    SE_LINUX_FIELD, f"container {container.name} must set an SELinux label"
                )
            )
            return errs

        # No merging with defaults; every label field must match as given.
        for name in _LABEL_FIELDS:
            wanted = getattr(self.options, name)
            actual = getattr(requested, name)
            if actual != wanted:
                errs.extend(
                    ValidationErrorList.invalid(
                        f"{SE_LINUX_FIELD}.{name}", actual, f"must be {wanted!r}"
                    )
                )
        return errs


class RunAsAny(SELinuxStrategy):
    """Any label, or none, is acceptable."""

    def generate(self, pod: Pod, container: Container) -> Optional[SELinuxOptions]:
        return requested_se_linux(container)

    def validate(self, pod: Pod, container: Container) -> ValidationErrorList:
        return ValidationErrorList()


def create_se_linux_strategy(rule: SELinuxRule) -> SELinuxStrategy:
    """
    Build the SELinux strategy a rule declares.

    Raises:
        ConfigurationError: If the type is unknown or the rule is incomplete
    """
    try:
        strategy_type = SELinuxStrategyType(rule.type)
    except ValueError:
        raise ConfigurationError(f"unrecognized SELinux strategy type {rule.type!r}")

    if strategy_type == SELinuxStrategyType.MUST_RUN_AS:
        if rule.se_linux_options is None:
            raise ConfigurationError("SELinux MustRunAs requires seLinuxOptions")
        return MustRunAs(rule.se_linux_options)

    return RunAsAny()
