"""
Resonance operators: peaks found in the source spectrum become boosted
peaking-EQ bands on the target.
"""
import logging
from typing import Optional

from transmute.core.errors import InsufficientFeatureError
from transmute.core.params import get_float, get_int
from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache
from transmute.dsp.render import OfflineRenderer, apply_filter
from transmute.features.spectrum import formants, harmonics, require_peaks

logger = logging.getLogger(__name__)

HARMONIC_GAIN_DB = 15.0
FORMANT_GAIN_DB = 18.0


def _peaking_stages(freqs, sample_rate: int, gain_db: float, q: float):
    """One peaking stage per frequency strictly inside (0, Nyquist)."""
    nyquist = sample_rate / 2
    return [apply_filter("peaking", f, q=q, gain_db=gain_db) for f in freqs if 0 < f < nyquist]


def apply_harmonic_imprinting(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    num_harmonics = get_int(params, "numHarmonics", 12)
    harmonic_q = get_float(params, "harmonicQ", 30.0)

    try:
        freqs = require_peaks(harmonics(source, num_harmonics, target.sample_rate, cache=fft_cache))
    except InsufficientFeatureError as exc:
        logger.info("Harmonic imprinting skipped, returning target: %s", exc)
        return target

    stages = _peaking_stages(freqs, target.sample_rate, HARMONIC_GAIN_DB, harmonic_q)
    logger.debug("Harmonic imprinting: %d peaks, %d filters", len(freqs), len(stages))

    renderer = OfflineRenderer(target.num_channels, target.length, target.sample_rate)
    renderer.connect(target, *stages)
    return renderer.render()


def apply_formant_shifting(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    num_formants = get_int(params, "numFormants", 4)
    formant_q = get_float(params, "formantQ", 20.0)
    formant_mix = get_float(params, "formantMix", 0.7)

    try:
        freqs = require_peaks(formants(source, num_formants, target.sample_rate, cache=fft_cache))
    except InsufficientFeatureError as exc:
        logger.info("Formant shifting skipped, returning target: %s", exc)
        return target

    stages = _peaking_stages(freqs, target.sample_rate, FORMANT_GAIN_DB, formant_q)
    logger.debug("Formant shifting: formants=%s", [round(f, 1) for f in freqs])

    renderer = OfflineRenderer(target.num_channels, target.length, target.sample_rate)
    renderer.connect(target, gain=1.0 - formant_mix)
    renderer.connect(target, *stages, gain=formant_mix)
    return renderer.render()
