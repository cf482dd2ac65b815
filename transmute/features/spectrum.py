"""
Spectral peak picking on the opening FFT frame of channel 0.
A simplified formant detector: real formant tracking would use LPC.
"""
from typing import List, Optional, Tuple

import torch

from transmute.core.errors import InsufficientFeatureError
from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache, fft, magnitude_phase

PEAK_FFT_SIZE = 8192
FORMANT_RANGE = (300.0, 5000.0)


def peaks(
    buffer: PCMBuffer,
    count: int,
    sample_rate: int,
    fft_size: int = PEAK_FFT_SIZE,
    freq_range: Optional[Tuple[float, float]] = None,
    cache: Optional[FFTCache] = None,
) -> List[float]:
    """
    Frequencies (Hz) of the `count` strongest local maxima, strongest first.
    Bins are 1 .. fft_size/2 - 1 (DC and Nyquist ignored), optionally restricted
    to freq_range (inclusive); maxima are taken among the restricted bins only.
    Bin frequencies use `sample_rate`, which callers set to the target's rate.
    """
    if count <= 0:
        return []

    real = torch.zeros(fft_size, dtype=torch.float64)
    chunk = buffer.channel(0)[:fft_size]
    real[: chunk.shape[-1]] = chunk.to(torch.float64)
    imag = torch.zeros(fft_size, dtype=torch.float64)
    fft(real, imag, inverse=False, cache=cache)

    bins = torch.arange(1, fft_size // 2)
    freqs = bins.to(torch.float64) * sample_rate / fft_size
    mags, _ = magnitude_phase(real[bins], imag[bins])

    if freq_range is not None:
        low, high = freq_range
        keep = (freqs >= low) & (freqs <= high)
        freqs = freqs[keep]
        mags = mags[keep]

    if mags.shape[-1] < 3:
        return []

    centre = mags[1:-1]
    is_peak = (centre > mags[:-2]) & (centre > mags[2:])
    peak_freqs = freqs[1:-1][is_peak]
    peak_mags = centre[is_peak]

    order = torch.sort(peak_mags, descending=True, stable=True).indices
    return peak_freqs[order][:count].tolist()


def harmonics(buffer: PCMBuffer, count: int, sample_rate: int, cache: Optional[FFTCache] = None) -> List[float]:
    return peaks(buffer, count, sample_rate, cache=cache)


def formants(buffer: PCMBuffer, count: int, sample_rate: int, cache: Optional[FFTCache] = None) -> List[float]:
    return peaks(buffer, count, sample_rate, freq_range=FORMANT_RANGE, cache=cache)


def require_peaks(freqs: List[float]) -> List[float]:
    if not freqs:
        raise InsufficientFeatureError("no spectral peaks found in source")
    return freqs
