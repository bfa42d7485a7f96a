"""
Id allocation for Mantissa Bulwark.
"""

from __future__ import annotations

from bulwark.allocation.allocator import Allocator, parse_allocated_id

__all__ = [
    "Allocator",
    "parse_allocated_id",
]
