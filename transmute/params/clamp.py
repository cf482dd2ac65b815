"""
Boundary clamping: bring catalog keys inside their declared [min, max].
Applied by the HTTP service and CLI before calling the engine; operators never clamp.
"""
from transmute.core.params import clamp_if_bounds
from transmute.params.schema import PARAM_SCHEMA


def clamp_params(params: dict) -> dict:
    """
    Clamp known keys to their schema bounds; int-typed keys are rounded.
    Returns a new dict (does not mutate input). Unknown keys are copied as-is.
    """
    result = params.copy()

    for key, entry in PARAM_SCHEMA.items():
        if key not in result:
            continue
        value = clamp_if_bounds(result[key], entry["min"], entry["max"])
        if entry["type"] == "int" and isinstance(value, (int, float)):
            value = int(round(value))
        result[key] = value

    return result
