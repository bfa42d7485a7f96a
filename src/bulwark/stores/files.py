"""
Policy loader for Mantissa Bulwark.

Loads security policies from YAML files and exposes them as a
PolicyStore.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import yaml

from bulwark.errors import CollaboratorLookupError, PolicyLoadError
from bulwark.models import PolicyCollection, SecurityPolicy
from bulwark.stores.base import PolicyStore

logger = logging.getLogger(__name__)


class PolicyLoader:
    """
    Loads and validates security policies from YAML files.

    A file may hold a single policy, a YAML list of policies, or a
    Kubernetes-style ``kind: List`` object with ``items``.
    """

    def __init__(self, policy_dirs: list[str] | None = None):
        """
        Initialize the policy loader.

        Args:
            policy_dirs: Directories to search for policies.
                        Defaults to ["policies/"]
        """
        self._policy_dirs = policy_dirs or ["policies/"]

    @property
    def policy_dirs(self) -> list[str]:
        """Get configured policy directories."""
        return list(self._policy_dirs)

    def load_all(self) -> PolicyCollection:
        """
        Load all policies from configured directories.

        Invalid files and invalid policies are logged and skipped.

        Returns:
            PolicyCollection with all valid policies
        """
        policies: list[SecurityPolicy] = []
        seen: set[str] = set()

        policy_files = self.discover_policies()
        if not policy_files:
            logger.warning("No policy files found in configured directories")
            return PolicyCollection([])

        for path in policy_files:
            try:
                loaded = self.load_file(path)
            except PolicyLoadError as e:
                logger.warning(f"Failed to load policy file: {e}")
                continue

            for policy in loaded:
                errors = self.validate_policy(policy)
                if errors:
                    logger.warning(f"Policy in {path} has validation errors: {errors}")
                    continue
                if policy.name in seen:
                    logger.warning(f"Duplicate policy {policy.name} in {path} ignored")
                    continue
                seen.add(policy.name)
                policies.append(policy)

        logger.info(f"Loaded {len(policies)} policies from {len(policy_files)} files")
        return PolicyCollection(policies)

    def load_file(self, path: str) -> list[SecurityPolicy]:
        """
        Load every policy in a single YAML file.

        Args:
            path: Path to the policy YAML file

        Returns:
            Policies found in the file

        Raises:
            PolicyLoadError: If the file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise PolicyLoadError("File not found", path)
        except (OSError, yaml.YAMLError) as e:
            raise PolicyLoadError(str(e), path)

        try:
            return [SecurityPolicy.from_dict(item) for item in self._documents(data)]
        except (AttributeError, TypeError, ValueError) as e:
            raise PolicyLoadError(f"Malformed policy: {e}", path)

    def validate_policy(self, policy: SecurityPolicy) -> list[str]:
        """
        Validate policy shape.

        Strategy type names are not checked here; an unknown type
        excludes the policy at admission time instead.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not policy.name:
            errors.append("Missing required field: name")
        if not isinstance(policy.run_as_user.type, str):
            errors.append("runAsUser.type must be a string")
        if not isinstance(policy.se_linux.type, str):
            errors.append("seLinuxContext.type must be a string")
        uid = policy.run_as_user.uid
        if uid is not None and (isinstance(uid, bool) or not isinstance(uid, int)):
            errors.append("runAsUser.uid must be an integer")
        for profile in policy.seccomp.allowed_profiles:
            if not isinstance(profile, str):
                errors.append(f"seccomp.allowedProfiles entry {profile!r} must be a string")

        return errors

    def discover_policies(self) -> list[str]:
        """
        Find all YAML files in policy directories.

        Returns:
            Sorted list of policy file paths
        """
        policy_files: list[str] = []

        for dir_path in self._policy_dirs:
            dir_path = os.path.expanduser(dir_path)

            if not os.path.isdir(dir_path):
                logger.debug(f"Policy directory not found: {dir_path}")
                continue

            for root, _, files in os.walk(dir_path):
                for file in files:
                    if file.endswith((".yaml", ".yml")):
                        policy_files.append(os.path.join(root, file))

        return sorted(policy_files)

    @staticmethod
    def _documents(data: Any) -> list[dict[str, Any]]:
        if data is None:
            return []
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and data.get("kind") == "List":
            return list(data.get("items") or [])
        if isinstance(data, dict):
            return [data]
        raise TypeError(f"expected a mapping or list, got {type(data).__name__}")


class FilePolicyStore(PolicyStore):
    """
    Policy store backed by YAML policy directories.

    Files are re-read on every list so that each admission request sees
    a fresh snapshot.
    """

    def __init__(self, policy_dirs: list[str] | None = None):
        self._loader = PolicyLoader(policy_dirs)

    @property
    def loader(self) -> PolicyLoader:
        """Get the underlying loader."""
        return self._loader

    def list_policies(self) -> list[SecurityPolicy]:
        try:
            return self._loader.load_all().policies
        except OSError as e:
            raise CollaboratorLookupError(
                f"unable to read policy directories: {e}", resource="policies"
            ) from e
