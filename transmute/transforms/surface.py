import logging
from typing import Optional

import torch

from transmute.core.params import get_float, get_param
from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache

logger = logging.getLogger(__name__)

# Full jitter moves the index by up to 5% of the sorted range
JITTER_SPAN = 0.05


def apply_surface_translation(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    Re-sequence the target's sample values using the source waveform as a lookup
    signal: each source amplitude in [-1, 1] picks a value from the sorted target.
    Mono result with the source's length and sample rate.
    Optional params["seed"] makes the jitter reproducible.
    """
    surface_jitter = get_float(params, "surfaceJitter", 0.0)
    seed = get_param(params, "seed")

    source_data = source.channel(0).to(torch.float64)
    sorted_target = torch.sort(target.channel(0)).values
    sorted_length = sorted_target.shape[-1]

    if sorted_length == 0:
        logger.debug("Surface translation with an empty target; returning silence")
        return PCMBuffer.silent(1, source.length, source.sample_rate)

    normalized = (source_data + 1.0) / 2.0
    base_index = torch.floor(normalized * (sorted_length - 1))

    jitter_amount = surface_jitter * sorted_length * JITTER_SPAN
    if jitter_amount > 0:
        generator = torch.Generator()
        if seed is not None:
            generator.manual_seed(int(seed))
        else:
            generator.seed()
        noise = torch.rand(source.length, generator=generator, dtype=torch.float64)
        base_index = base_index + (noise - 0.5) * jitter_amount

    # Round half up
    final_index = torch.floor(base_index + 0.5).long()
    final_index = torch.clamp(final_index, 0, sorted_length - 1)

    return PCMBuffer(sorted_target[final_index].unsqueeze(0), source.sample_rate)
