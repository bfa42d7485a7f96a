"""
Pre-allocated id resolution.

Namespaces carry an annotation naming the block of user ids assigned to
them. The allocator turns (namespace, annotation key) into the first id
of that block.
"""

from __future__ import annotations

import logging
import re

from bulwark.errors import AllocationError, CollaboratorLookupError
from bulwark.stores.base import AllocationStore

logger = logging.getLogger(__name__)

# "N", "N/size" or "N-M"
_BLOCK_PATTERN = re.compile(r"^\s*(\d+)\s*(?:[/-]\s*(\d+)\s*)?$")


def parse_allocated_id(value: str) -> int:
    """
    Parse an allocation annotation value.

    Args:
        value: Annotation value such as "1000", "1000/10000" or "1000-1999"

    Returns:
        The first id of the block

    Raises:
        ValueError: If the value is not a recognized block format
    """
    match = _BLOCK_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"invalid id allocation {value!r}")
    start = int(match.group(1))
    if "-" in value and match.group(2) is not None and int(match.group(2)) < start:
        raise ValueError(f"invalid id range {value!r}")
    return start


class Allocator:
    """
    Resolves annotation-backed pre-allocated ids.

    Holds no cache: every call reads the backing store, so generate and
    validate see the same value within a request and nothing carries
    over between requests.
    """

    def __init__(self, store: AllocationStore):
        self._store = store

    def get(self, namespace: str, key: str) -> int:
        """
        Resolve the id allocated to a namespace.

        Args:
            namespace: Namespace of the pod
            key: Annotation key holding the allocation

        Returns:
            Allocated id

        Raises:
            AllocationError: If the id cannot be resolved
        """
        try:
            value = self._store.get_annotation(namespace, key)
        except CollaboratorLookupError as e:
            raise AllocationError(
                f"unable to read allocation {key} for namespace {namespace}: {e}",
                namespace=namespace,
                key=key,
            ) from e

        if value is None:
            raise AllocationError(
                f"namespace {namespace} has no allocation annotation {key}",
                namespace=namespace,
                key=key,
            )

        try:
            uid = parse_allocated_id(value)
        except ValueError as e:
            raise AllocationError(
                f"namespace {namespace} annotation {key}: {e}",
                namespace=namespace,
                key=key,
            ) from e

        logger.debug(f"Resolved allocated id {uid} for {namespace} ({key})")
        return uid
