import logging
from typing import Optional

import torch

from transmute.core.params import get_float
from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache
from transmute.dsp.mixer import crossfade, fit_length
from transmute.dsp.oscillators import Oscillator
from transmute.features.amplitude import SMOOTHING_MODULATION, envelope

logger = logging.getLogger(__name__)


def apply_dynamic_ring_modulation(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    Ring modulation whose carrier frequency follows the source envelope:
    f[n] = ringModBaseFreq + env[n] * ringModRange. Every channel shares one carrier.
    """
    base_freq = get_float(params, "ringModBaseFreq", 100.0)
    freq_range = get_float(params, "ringModRange", 1000.0)
    mix = get_float(params, "ringModMix", 0.5)

    env = fit_length(envelope(source, SMOOTHING_MODULATION).channel(0), target.length).to(torch.float64)
    frequency = base_freq + env * freq_range
    carrier = Oscillator.sine(frequency, target.sample_rate)

    logger.debug("Ring mod carrier %.1f..%.1f Hz", base_freq, base_freq + freq_range)
    wet = target.samples * carrier
    return target.with_samples(crossfade(target.samples, wet, mix))
