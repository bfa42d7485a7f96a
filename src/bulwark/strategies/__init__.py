"""
Per-dimension strategy library for Mantissa Bulwark.

Each security dimension has a small, closed set of strategies:
- Run-as user: MustRunAs, MustRunAsRange, MustRunAsNonRoot, RunAsAny
- SELinux: MustRunAs, RunAsAny
- Seccomp: MustRunAs (allow-list with optional wildcard)

The factory functions pick the variant a policy declares and raise
ConfigurationError for anything else.
"""

from __future__ import annotations

from bulwark.strategies import seccomp, selinux, user
from bulwark.strategies.base import RunAsUserStrategy, SeccompStrategy, SELinuxStrategy
from bulwark.strategies.seccomp import create_seccomp_strategy, is_profile_allowed
from bulwark.strategies.selinux import create_se_linux_strategy
from bulwark.strategies.user import DEFAULT_NON_ROOT_UID, create_run_as_user_strategy

__all__ = [
    # Modules
    "seccomp",
    "selinux",
    "user",
    # Interfaces
    "RunAsUserStrategy",
    "SeccompStrategy",
    "SELinuxStrategy",
    # Factories
    "DEFAULT_NON_ROOT_UID",
    "create_run_as_user_strategy",
    "create_se_linux_strategy",
    "create_seccomp_strategy",
    "is_profile_allowed",
]
