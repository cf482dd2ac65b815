"""
Param lookup utilities (flat dict contract).
Operators read values through these helpers so a missing or malformed key
falls back to the documented default instead of raising.
"""
from typing import Any, Optional


def get_param(params: Optional[dict], name: str, default: Any = None) -> Any:
    """Read params[name], or default when params is empty or the key is missing/None."""
    if not params or not name:
        return default
    value = params.get(name)
    return default if value is None else value


def get_float(params: Optional[dict], name: str, default: float) -> float:
    """Read a param as float; non-numeric values fall back to default."""
    raw = get_param(params, name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        return float(default)


def get_int(params: Optional[dict], name: str, default: int) -> int:
    """Read a count-like param, rounded to the nearest integer."""
    return int(round(get_float(params, name, default)))


def clamp_if_bounds(
    value: float,
    min: Optional[float] = None,
    max: Optional[float] = None,
) -> float:
    """
    Clamp value to [min, max] when bounds are not None.
    Non-numeric values are returned unchanged.
    """
    try:
        v = float(value)
    except (TypeError, ValueError):
        return value
    if min is not None and v < min:
        return min
    if max is not None and v > max:
        return max
    return v
