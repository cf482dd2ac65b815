"""
Parameter schema and defaults for the transformation catalog.
Default values: single source is schema.PARAM_SCHEMA; use resolve_params({}) for resolved defaults.
"""
from transmute.params.schema import PARAM_SCHEMA, DEFAULT_PARAMS, get_default_params
from transmute.params.resolve import resolve_params
from transmute.params.clamp import clamp_params
from transmute.params.contract import to_engine_params

__all__ = [
    "PARAM_SCHEMA",
    "DEFAULT_PARAMS",
    "get_default_params",
    "resolve_params",
    "clamp_params",
    "to_engine_params",
]
