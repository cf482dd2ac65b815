"""
Energy-jump onset detection on channel 0.
"""
from typing import List

import torch

from transmute.core.errors import InsufficientFeatureError
from transmute.core.types import PCMBuffer
from transmute.dsp.envelopes import ms_to_samples

CHUNK_SIZE = 512
DEFAULT_THRESHOLD = 1.8
DEFAULT_MIN_SEPARATION_MS = 50.0


def chunk_rms(samples: torch.Tensor, chunk_size: int = CHUNK_SIZE) -> torch.Tensor:
    """RMS of consecutive chunks; the last chunk may be shorter."""
    n = samples.shape[-1]
    if n == 0:
        return torch.zeros(0, dtype=torch.float64)
    num_chunks = (n + chunk_size - 1) // chunk_size
    padded = torch.zeros(num_chunks * chunk_size, dtype=torch.float64)
    padded[:n] = samples.to(torch.float64)
    sums = (padded.reshape(num_chunks, chunk_size) ** 2).sum(dim=1)
    counts = torch.full((num_chunks,), float(chunk_size), dtype=torch.float64)
    counts[-1] = n - (num_chunks - 1) * chunk_size
    return torch.sqrt(sums / counts)


def transients(
    buffer: PCMBuffer,
    threshold: float = DEFAULT_THRESHOLD,
    min_separation_ms: float = DEFAULT_MIN_SEPARATION_MS,
) -> List[int]:
    """
    Ascending onset frames. Always starts with 0 and ends with the final frame
    (length - 1) unless that frame is already the last entry.
    A chunk is an onset when its RMS exceeds the previous chunk's RMS * threshold
    and it lies more than min_separation_ms after the previous onset.
    """
    data = buffer.channel(0)
    min_separation = ms_to_samples(min_separation_ms, buffer.sample_rate)
    energies = chunk_rms(data).tolist()

    onsets = [0]
    last = 0
    for i in range(1, len(energies)):
        if energies[i] > energies[i - 1] * threshold:
            frame = i * CHUNK_SIZE
            if frame - last > min_separation:
                onsets.append(frame)
                last = frame

    final_frame = buffer.length - 1
    if onsets[-1] < final_frame:
        onsets.append(final_frame)
    return onsets


def require_transients(onsets: List[int], minimum: int = 2) -> List[int]:
    if len(onsets) < minimum:
        raise InsufficientFeatureError(f"found {len(onsets)} transient(s), need at least {minimum}")
    return onsets
