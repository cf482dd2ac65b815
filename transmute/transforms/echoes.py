import logging
from typing import Optional

import torch

from transmute.core.params import get_float
from transmute.core.types import PCMBuffer
from transmute.dsp.envelopes import ms_to_samples
from transmute.dsp.fft import FFTCache
from transmute.dsp.render import OfflineRenderer, apply_delay_feedback, multiply
from transmute.features.onsets import transients

logger = logging.getLogger(__name__)

ECHO_THRESHOLD = 1.8
GATE_MS = 10.0
DELAY_S = 0.3
DAMPING_HZ = 4000.0
TAIL_S = 4.0


def transient_gate(onsets, source_rate: int, target_rate: int, length: int) -> torch.Tensor:
    """1.0 for GATE_MS after each onset (mapped to the target rate), 0.0 elsewhere."""
    gate = torch.zeros(length)
    width = ms_to_samples(GATE_MS, target_rate)
    for idx in onsets:
        start = int(round(idx / source_rate * target_rate))
        if start >= length:
            continue
        gate[start:min(start + width, length)] = 1.0
    return gate


def apply_interference_echoes(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    Short bursts of the target, opened at every source transient, feed a
    damped feedback delay. The echo tail extends the output by TAIL_S seconds.
    """
    feedback = get_float(params, "interferenceFeedback", 0.5)
    mix = get_float(params, "interferenceMix", 0.5)

    onsets = transients(source, ECHO_THRESHOLD)
    if len(onsets) <= 1:
        logger.info("Interference echoes skipped, returning target: no source transients")
        return target

    sr = target.sample_rate
    gate = transient_gate(onsets, source.sample_rate, sr, target.length)
    logger.debug("Interference echoes: %d gates, feedback=%.2f", len(onsets), feedback)

    renderer = OfflineRenderer(target.num_channels, target.length + int(TAIL_S * sr), sr)
    renderer.connect(target, gain=1.0 - mix)
    renderer.connect(target, multiply(gate), apply_delay_feedback(DELAY_S, feedback, DAMPING_HZ), gain=mix)
    return renderer.render()
