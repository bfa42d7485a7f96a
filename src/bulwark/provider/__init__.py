"""
Policy providers for Mantissa Bulwark.
"""

from __future__ import annotations

from bulwark.provider.provider import PolicyProvider, SimplePolicyProvider, create_provider

__all__ = [
    "PolicyProvider",
    "SimplePolicyProvider",
    "create_provider",
]
