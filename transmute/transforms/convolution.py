import logging
from typing import Optional

import torch
import torchaudio.functional as F

from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache

logger = logging.getLogger(__name__)

SILENCE_THRESHOLD = 0.005


def normalize_impulse_response(ir: torch.Tensor) -> torch.Tensor:
    """
    Scale the IR to unit energy per channel (total power divided by the channel
    count), so a unit impulse in every channel stays a unit impulse.
    Silent IRs are returned as-is.
    """
    energy = torch.sqrt(torch.sum(ir.to(torch.float64) ** 2) / max(1, ir.shape[0]))
    if energy <= 0:
        return ir.clone()
    return (ir.to(torch.float64) / energy).to(ir.dtype)


def trim_silence(buffer: PCMBuffer, threshold: float = SILENCE_THRESHOLD) -> PCMBuffer:
    """
    Drop leading frames until channel 0 first exceeds threshold.
    A buffer that never exceeds it is returned unchanged.
    """
    above = torch.nonzero(torch.abs(buffer.channel(0)) > threshold)
    if above.numel() == 0:
        return buffer
    first = int(above[0, 0])
    if first == 0:
        return buffer
    return buffer.with_samples(buffer.samples[:, first:].clone())


def apply_convolution(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    Full linear convolution of the target with the source as impulse response.
    Target channel c uses source channel c % source_channels. Output length is
    source + target - 1 before the leading-silence trim.
    """
    new_length = source.length + target.length - 1
    if source.length == 0 or target.length == 0:
        logger.debug("Convolution with an empty buffer; returning silence")
        return PCMBuffer.silent(target.num_channels, new_length, target.sample_rate)

    ir = normalize_impulse_response(source.samples)
    index = torch.arange(target.num_channels) % source.num_channels
    wet = F.fftconvolve(target.samples.to(torch.float64), ir[index].to(torch.float64), mode="full")

    rendered = PCMBuffer(wet.to(torch.float32), target.sample_rate)
    return trim_silence(rendered)
