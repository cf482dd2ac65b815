"""
Source -> target transformation operators.
Every operator has the signature (source, target, params=None, *, fft_cache=None) -> PCMBuffer.
"""
from transmute.transforms.amplitude import apply_amplitude_mapping, apply_rhythmic_gating
from transmute.transforms.convolution import apply_convolution
from transmute.transforms.echoes import apply_interference_echoes
from transmute.transforms.engine import TransformEngine
from transmute.transforms.morph import apply_transformation_morph
from transmute.transforms.registry import OPERATORS, get_operator, resolve_transformation
from transmute.transforms.resonance import apply_formant_shifting, apply_harmonic_imprinting
from transmute.transforms.ring_mod import apply_dynamic_ring_modulation
from transmute.transforms.spectral import apply_fourier_masking, apply_spectral_shaping
from transmute.transforms.surface import apply_surface_translation
from transmute.transforms.time_warp import apply_time_scale_warping

__all__ = [
    "OPERATORS",
    "TransformEngine",
    "apply_amplitude_mapping",
    "apply_convolution",
    "apply_dynamic_ring_modulation",
    "apply_formant_shifting",
    "apply_fourier_masking",
    "apply_harmonic_imprinting",
    "apply_interference_echoes",
    "apply_rhythmic_gating",
    "apply_spectral_shaping",
    "apply_surface_translation",
    "apply_time_scale_warping",
    "apply_transformation_morph",
    "get_operator",
    "resolve_transformation",
]
