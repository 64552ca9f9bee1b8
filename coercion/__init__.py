"""
Numeric coercion helpers shared by the cleaning and ingestion pipelines.

This module provides:
- coerce_number for best-effort conversion of untrusted values
- is_finite_number and is_positive_integer for strict type checks
"""

from coercion.numeric import (
    coerce_number,
    is_finite_number,
    is_positive_integer,
)

__all__ = [
    "coerce_number",
    "is_finite_number",
    "is_positive_integer",
]
