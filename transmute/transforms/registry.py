"""
Name -> operator lookup. Names may be a TransformationType, its slug
("amplitude_mapping") or its display label ("Amplitude Mapping").
The morph combinator is not a plain operator; TransformEngine dispatches it.
"""
from typing import Callable, Dict, Union

from transmute.core.errors import UnsupportedTransformationError
from transmute.core.types import PCMBuffer, TransformationType
from transmute.transforms.amplitude import apply_amplitude_mapping, apply_rhythmic_gating
from transmute.transforms.convolution import apply_convolution
from transmute.transforms.echoes import apply_interference_echoes
from transmute.transforms.resonance import apply_formant_shifting, apply_harmonic_imprinting
from transmute.transforms.ring_mod import apply_dynamic_ring_modulation
from transmute.transforms.spectral import apply_fourier_masking, apply_spectral_shaping
from transmute.transforms.surface import apply_surface_translation
from transmute.transforms.time_warp import apply_time_scale_warping

Operator = Callable[..., PCMBuffer]

OPERATORS: Dict[TransformationType, Operator] = {
    TransformationType.AMPLITUDE: apply_amplitude_mapping,
    TransformationType.RHYTHMIC: apply_rhythmic_gating,
    TransformationType.SPECTRAL: apply_spectral_shaping,
    TransformationType.CONVOLUTION: apply_convolution,
    TransformationType.TIME_WARP: apply_time_scale_warping,
    TransformationType.SURFACE_TRANSLATE: apply_surface_translation,
    TransformationType.FOURIER_MASKING: apply_fourier_masking,
    TransformationType.HARMONIC_IMPRINT: apply_harmonic_imprinting,
    TransformationType.INTERFERENCE_ECHOES: apply_interference_echoes,
    TransformationType.FORMANT_SHIFTING: apply_formant_shifting,
    TransformationType.DYNAMIC_RING_MOD: apply_dynamic_ring_modulation,
}

_BY_LABEL = {t.label.lower(): t for t in TransformationType}


def resolve_transformation(name: Union[str, TransformationType]) -> TransformationType:
    if isinstance(name, TransformationType):
        return name
    if not isinstance(name, str):
        raise UnsupportedTransformationError(name)
    key = name.strip()
    try:
        return TransformationType(key)
    except ValueError:
        pass
    if key.lower() in _BY_LABEL:
        return _BY_LABEL[key.lower()]
    raise UnsupportedTransformationError(name)


def get_operator(name: Union[str, TransformationType]) -> Operator:
    """Operator for a single transformation; the morph combinator is rejected."""
    kind = resolve_transformation(name)
    if kind is TransformationType.TRANSFORMATION_MORPH:
        raise UnsupportedTransformationError(name, reason="morph cannot be used as a morph operand")
    return OPERATORS[kind]
