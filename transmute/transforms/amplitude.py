"""
Envelope-driven operators: the source's loudness contour reshapes the target.
"""
import logging
from typing import Optional

import torch

from transmute.core.params import get_float
from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache
from transmute.features.amplitude import SMOOTHING_DEFAULT, SMOOTHING_GATE, envelope

logger = logging.getLogger(__name__)


def apply_envelope_to_buffer(curve: PCMBuffer, target: PCMBuffer) -> PCMBuffer:
    """
    Multiply target channel c by curve channel c % curve_channels over the first
    min(len) frames. Frames past the curve's end are silent. Target shape and rate.
    """
    result = torch.zeros_like(target.samples)
    length = min(target.length, curve.length)
    if length == 0:
        return target.with_samples(result)

    index = torch.arange(target.num_channels) % curve.num_channels
    aligned = curve.samples[index, :length]
    result[:, :length] = target.samples[:, :length] * aligned
    return target.with_samples(result)


def apply_amplitude_mapping(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """Imposes the source's normalized amplitude envelope on the target."""
    source_envelope = envelope(source, SMOOTHING_DEFAULT)
    return apply_envelope_to_buffer(source_envelope, target)


def apply_rhythmic_gating(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    Hard gate: the target passes where the slow source envelope exceeds
    gateThreshold and is silenced elsewhere. No intermediate gain values.
    """
    gate_threshold = get_float(params, "gateThreshold", 0.2)
    source_envelope = envelope(source, SMOOTHING_GATE)
    gate = (source_envelope.samples > gate_threshold).to(torch.float32)
    open_ratio = float(gate.mean()) if gate.numel() else 0.0
    logger.debug("Rhythmic gate threshold=%.3f open=%.1f%%", gate_threshold, open_ratio * 100.0)
    return apply_envelope_to_buffer(source_envelope.with_samples(gate), target)
