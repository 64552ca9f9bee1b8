"""
Numeric coercion for untrusted telemetry values.

Device payloads routinely carry numbers as strings, strings with trailing
units ("42.3km/h"), nulls, or plain garbage. The helpers in this module turn
any of those into either a finite float or None, without ever raising.
"""

import math
import re
from typing import Any, Optional

# Leading numeric prefix: optional sign, digits with optional fraction
# (or a bare fraction), optional exponent.
NUMERIC_PREFIX_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


def _parse_numeric_prefix(value: str) -> Optional[float]:
    match = NUMERIC_PREFIX_PATTERN.match(value.lstrip())
    if match is None:
        return None
    number = float(match.group(0))
    if not math.isfinite(number):
        # e.g. "1e999" overflows to inf
        return None
    return number


def _as_finite_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except OverflowError:
        # ints beyond the float range
        return None
    return number if math.isfinite(number) else None


def coerce_number(value: Any) -> Optional[float]:
    """
    Convert an arbitrary value to a finite float, or None.
    
    Strings are parsed by their leading numeric prefix, so "42.3abc"
    becomes 42.3 and "abc" becomes None. Booleans, containers and any
    other non-numeric types become None.
    
    Args:
        value: The raw value to coerce
        
    Returns:
        A finite float, or None if the value has no numeric reading
    """
    if value is None or isinstance(value, bool):
        return None
    
    if isinstance(value, (int, float)):
        return _as_finite_float(value)
    
    if isinstance(value, str):
        return _parse_numeric_prefix(value)
    
    return None


def is_finite_number(value: Any) -> bool:
    """Check that value is an int or float (not bool) that fits a finite float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return _as_finite_float(value) is not None


def is_positive_integer(value: Any) -> bool:
    """
    Check that value is an integer strictly greater than zero.
    
    Integral floats such as 5.0 are accepted because JSON does not
    distinguish them from integers. Integers too large for a float are
    rejected like infinity.
    
    Args:
        value: The value to check
        
    Returns:
        True if value is a positive integer
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0 and _as_finite_float(value) is not None
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer() and value > 0
    return False
