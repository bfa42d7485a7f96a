"""
Observability for Mantissa Bulwark.

Provides logging for admission decisions.
"""

from bulwark.observability.logging import (
    BulwarkLogger,
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "BulwarkLogger",
    "HumanReadableFormatter",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]
