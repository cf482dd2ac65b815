"""
Parameter resolution: merge DEFAULT_PARAMS with incoming params.
Incoming values override defaults; unknown keys pass through untouched.
"""
from typing import Dict, Any, Optional

from transmute.params.schema import DEFAULT_PARAMS


def resolve_params(params: Optional[dict]) -> Dict[str, Any]:
    """
    Returns a new dict: every catalog default, overridden by params.
    None values in params are treated as "not provided".
    """
    resolved = dict(DEFAULT_PARAMS)
    for key, value in (params or {}).items():
        if value is not None:
            resolved[key] = value
    return resolved
