"""
Biquad filters with explicit RBJ Audio-EQ-Cookbook coefficients, run through
torchaudio's lfilter with output clamping disabled (boosted bands may exceed 1.0).
Filtering happens in float64; results come back as float32.
"""
import math
from typing import Tuple

import torch
import torchaudio.functional as F

Coeffs = Tuple[Tuple[float, float, float], Tuple[float, float, float]]


def _clamp_freq(freq: float, sample_rate: int) -> float:
    # Keep center/cutoff strictly inside (0, Nyquist)
    return max(1e-3, min(float(freq), sample_rate / 2 - 1))


def lowpass_coeffs(sample_rate: int, cutoff_freq: float, q: float) -> Coeffs:
    w0 = 2 * math.pi * _clamp_freq(cutoff_freq, sample_rate) / sample_rate
    alpha = math.sin(w0) / (2 * q)
    cos_w0 = math.cos(w0)
    b = ((1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2)
    a = (1 + alpha, -2 * cos_w0, 1 - alpha)
    return b, a


def bandpass_coeffs(sample_rate: int, center_freq: float, q: float) -> Coeffs:
    """Constant 0 dB peak gain band-pass."""
    w0 = 2 * math.pi * _clamp_freq(center_freq, sample_rate) / sample_rate
    alpha = math.sin(w0) / (2 * q)
    cos_w0 = math.cos(w0)
    b = (alpha, 0.0, -alpha)
    a = (1 + alpha, -2 * cos_w0, 1 - alpha)
    return b, a


def peaking_coeffs(sample_rate: int, center_freq: float, gain_db: float, q: float) -> Coeffs:
    A = 10.0 ** (gain_db / 40.0)
    w0 = 2 * math.pi * _clamp_freq(center_freq, sample_rate) / sample_rate
    alpha = math.sin(w0) / (2 * q)
    cos_w0 = math.cos(w0)
    b = (1 + alpha * A, -2 * cos_w0, 1 - alpha * A)
    a = (1 + alpha / A, -2 * cos_w0, 1 - alpha / A)
    return b, a


class Filter:
    @staticmethod
    def biquad(waveform: torch.Tensor, coeffs: Coeffs) -> torch.Tensor:
        """Apply one biquad section along the last dimension."""
        if waveform.shape[-1] == 0:
            return waveform.clone()
        b, a = coeffs
        x = waveform.to(torch.float64)
        b_t = torch.tensor(b, dtype=torch.float64) / a[0]
        a_t = torch.tensor(a, dtype=torch.float64) / a[0]
        y = F.lfilter(x, a_t, b_t, clamp=False)
        return y.to(waveform.dtype)

    @staticmethod
    def lowpass(waveform: torch.Tensor, sample_rate: int, cutoff_freq: float, q: float = 0.707) -> torch.Tensor:
        """LowPass biquad. q=0.707 is Butterworth."""
        return Filter.biquad(waveform, lowpass_coeffs(sample_rate, cutoff_freq, q))

    @staticmethod
    def bandpass(waveform: torch.Tensor, sample_rate: int, center_freq: float, q: float = 0.707) -> torch.Tensor:
        """BandPass biquad, 0 dB at the center frequency."""
        return Filter.biquad(waveform, bandpass_coeffs(sample_rate, center_freq, q))

    @staticmethod
    def peaking(waveform: torch.Tensor, sample_rate: int, center_freq: float, gain_db: float, q: float = 1.0) -> torch.Tensor:
        """
        Peaking EQ.
        gain_db: positive = boost, negative = cut. Unity gain far from center_freq.
        """
        return Filter.biquad(waveform, peaking_coeffs(sample_rate, center_freq, gain_db, q))
