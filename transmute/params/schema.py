"""
Parameter schema and defaults for the transformation catalog.
Keys are flat and camelCase so requests from the front-end map 1:1.
Bounds are informational for the engine; clamp_params applies them at the boundary.
"""
from typing import Dict, Any, Literal

from transmute.core.types import TransformationType

ParamType = Literal["float", "int"]

# Schema entry structure: type, default, min, max, step, transformation, label, unit
ParamSchemaEntry = Dict[str, Any]


def _make_param(
    param_type: ParamType,
    default: float,
    min_val: float,
    max_val: float,
    step: float,
    transformation: TransformationType,
    label: str,
    unit: str = "",
) -> ParamSchemaEntry:
    """Helper to create a schema entry."""
    return {
        "type": param_type,
        "default": default,
        "min": min_val,
        "max": max_val,
        "step": step,
        "transformation": transformation.value,
        "label": label,
        "unit": unit,
    }


T = TransformationType

PARAM_SCHEMA: Dict[str, ParamSchemaEntry] = {
    # Rhythmic Gating
    "gateThreshold": _make_param("float", 0.2, 0.01, 1.0, 0.01, T.RHYTHMIC, "Gate Threshold"),
    # Spectral Shaping
    "spectralMix": _make_param("float", 1.0, 0.0, 1.0, 0.01, T.SPECTRAL, "Mix"),
    # Time Scale Warping
    "transientSensitivity": _make_param("float", 1.8, 1.1, 4.0, 0.1, T.TIME_WARP, "Transient Sensitivity"),
    # Surface Translation
    "surfaceJitter": _make_param("float", 0.0, 0.0, 1.0, 0.01, T.SURFACE_TRANSLATE, "Jitter"),
    # Harmonic Imprinting
    "numHarmonics": _make_param("int", 12, 1, 20, 1, T.HARMONIC_IMPRINT, "Number of Harmonics"),
    "harmonicQ": _make_param("float", 30.0, 1.0, 100.0, 1, T.HARMONIC_IMPRINT, "Resonance (Q)"),
    # Interference Echoes
    "interferenceFeedback": _make_param("float", 0.5, 0.0, 0.95, 0.01, T.INTERFERENCE_ECHOES, "Feedback"),
    "interferenceMix": _make_param("float", 0.5, 0.0, 1.0, 0.01, T.INTERFERENCE_ECHOES, "Echo Mix"),
    # Formant Shifting
    "numFormants": _make_param("int", 4, 1, 8, 1, T.FORMANT_SHIFTING, "Formants"),
    "formantQ": _make_param("float", 20.0, 1.0, 50.0, 1, T.FORMANT_SHIFTING, "Resonance (Q)"),
    "formantMix": _make_param("float", 0.7, 0.0, 1.0, 0.01, T.FORMANT_SHIFTING, "Mix"),
    # Dynamic Ring Modulation
    "ringModBaseFreq": _make_param("float", 100.0, 20.0, 2000.0, 1, T.DYNAMIC_RING_MOD, "Base Frequency", "Hz"),
    "ringModRange": _make_param("float", 1000.0, 0.0, 5000.0, 10, T.DYNAMIC_RING_MOD, "Frequency Range", "Hz"),
    "ringModMix": _make_param("float", 0.5, 0.0, 1.0, 0.01, T.DYNAMIC_RING_MOD, "Mix"),
    # Transformation Morph
    "morphPosition": _make_param("float", 0.5, 0.0, 1.0, 0.01, T.TRANSFORMATION_MORPH, "Morph A/B"),
}


def get_default_params() -> Dict[str, float]:
    """Default value for every catalog key."""
    return {name: entry["default"] for name, entry in PARAM_SCHEMA.items()}


def params_for(transformation: TransformationType) -> Dict[str, ParamSchemaEntry]:
    """Schema entries owned by one transformation (empty for parameterless ones)."""
    value = TransformationType(transformation).value
    return {name: entry for name, entry in PARAM_SCHEMA.items() if entry["transformation"] == value}


DEFAULT_PARAMS: Dict[str, float] = get_default_params()
