"""
Engine params contract: only catalog keys (plus "seed") reach the operators.
Unknown keys are stripped; in dev mode the stripped keys are logged.
"""
from typing import Dict, Any
import os
import logging

from transmute.params.schema import PARAM_SCHEMA

logger = logging.getLogger("transmute")

EXTRA_PARAM_KEYS = frozenset({"seed"})

DEV = os.environ.get("ENV", "development").lower() in ("development", "dev", "test")


def strip_unknown_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of params with keys outside the catalog removed."""
    return {k: v for k, v in params.items() if k in PARAM_SCHEMA or k in EXTRA_PARAM_KEYS}


def to_engine_params(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a raw request body to engine params.
    This is the single entry point for params coming from the service or CLI.
    """
    raw = raw or {}
    unknown = sorted(k for k in raw if k not in PARAM_SCHEMA and k not in EXTRA_PARAM_KEYS)
    if unknown:
        if DEV:
            logger.warning("[Parameter Contract] Unknown fields stripped before engine: %s", unknown)
        raw = strip_unknown_params(raw)
    return dict(raw)
