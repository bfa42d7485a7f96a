"""
Object cloning for trial admission.

Admission generates and validates on a clone of the pod so the real
request is only touched on commit.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, TypeVar

T = TypeVar("T")


class Cloner(ABC):
    """Produces independent copies that share no mutable state."""

    @abstractmethod
    def clone(self, obj: T) -> T:
        """Return a deep, independent copy of obj."""
        pass


class DeepCopyCloner(Cloner):
    """Cloner based on copy.deepcopy."""

    def clone(self, obj: T) -> T:
        return copy.deepcopy(obj)


def clone(obj: Any) -> Any:
    """Clone an object with the default cloner."""
    return DeepCopyCloner().clone(obj)
