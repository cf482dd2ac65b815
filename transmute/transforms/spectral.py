"""
Frequency-domain operators: vocoder-style band shaping and magnitude/phase masking.
"""
import logging
import math
from typing import Optional

import torch

from transmute.core.params import get_float
from transmute.core.types import PCMBuffer
from transmute.dsp.envelopes import EnvelopeFollower
from transmute.dsp.fft import FFTCache, fft, magnitude_phase
from transmute.dsp.filters import Filter
from transmute.dsp.mixer import fit_channels, fit_length
from transmute.dsp.render import OfflineRenderer

logger = logging.getLogger(__name__)

# Logarithmically spaced band centers (Hz)
BAND_FREQUENCIES = (
    60, 150, 300, 500, 750, 1000, 1500, 2000,
    3000, 4000, 5000, 7000, 9000, 11000, 14000, 18000,
)
BAND_Q = 5.0
FOLLOWER_CUTOFF_HZ = 10.0

MASK_FFT_SIZE = 2048
MASK_HOP_SIZE = MASK_FFT_SIZE // 4
MASK_FRAMES_PER_BATCH = 256


# -----------------------------------------------------------------------------
# Spectral Shaping
# -----------------------------------------------------------------------------

def _vocoder_bank(source_samples: torch.Tensor):
    """Stage: sum over bands of target_band * envelope(source_band)."""
    def _stage(x: torch.Tensor, sample_rate: int) -> torch.Tensor:
        modulator = fit_length(fit_channels(source_samples, x.shape[0]), x.shape[-1])
        follower = EnvelopeFollower(sample_rate, FOLLOWER_CUTOFF_HZ)
        wet = torch.zeros_like(x)
        for freq in BAND_FREQUENCIES:
            band_env = follower(Filter.bandpass(modulator, sample_rate, freq, BAND_Q))
            wet += Filter.bandpass(x, sample_rate, freq, BAND_Q) * band_env
        return wet
    _stage.__name__ = "vocoder_bank"
    return _stage


def apply_spectral_shaping(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    16-band vocoder: each target band is gain-modulated by the envelope of the
    same source band, then crossfaded with the dry target by spectralMix.
    """
    spectral_mix = get_float(params, "spectralMix", 1.0)

    renderer = OfflineRenderer(target.num_channels, target.length, target.sample_rate)
    renderer.connect(target, gain=1.0 - spectral_mix)
    renderer.connect(target, _vocoder_bank(source.samples), gain=spectral_mix)
    return renderer.render()


# -----------------------------------------------------------------------------
# Fourier Masking
# -----------------------------------------------------------------------------

def hann_window(size: int) -> torch.Tensor:
    """Symmetric Hann window (denominator size - 1)."""
    i = torch.arange(size, dtype=torch.float64)
    return 0.5 * (1.0 - torch.cos(2.0 * math.pi * i / (size - 1)))


def apply_fourier_masking(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    """
    STFT cross-synthesis: source magnitude at target phase, windowed overlap-add.
    Mono result of length min(source, target) at the source's sample rate; only
    frames that fit entirely inside that length contribute.
    """
    cache = fft_cache if fft_cache is not None else FFTCache()
    n = MASK_FFT_SIZE
    hop = MASK_HOP_SIZE
    length = min(source.length, target.length)
    result = torch.zeros(length, dtype=torch.float64)

    if length < n:
        logger.debug("Fourier masking: %d frames is shorter than one %d-point frame", length, n)
        return PCMBuffer(result.to(torch.float32), source.sample_rate)

    window = hann_window(n)
    source_frames = source.channel(0)[:length].to(torch.float64).unfold(0, n, hop)
    target_frames = target.channel(0)[:length].to(torch.float64).unfold(0, n, hop)
    num_frames = source_frames.shape[0]

    for batch_start in range(0, num_frames, MASK_FRAMES_PER_BATCH):
        batch_end = min(batch_start + MASK_FRAMES_PER_BATCH, num_frames)

        s_re = source_frames[batch_start:batch_end] * window
        s_im = torch.zeros_like(s_re)
        t_re = target_frames[batch_start:batch_end] * window
        t_im = torch.zeros_like(t_re)
        fft(s_re, s_im, inverse=False, cache=cache)
        fft(t_re, t_im, inverse=False, cache=cache)

        source_mag, _ = magnitude_phase(s_re, s_im)
        _, target_phase = magnitude_phase(t_re, t_im)
        new_re = source_mag * torch.cos(target_phase)
        new_im = source_mag * torch.sin(target_phase)
        fft(new_re, new_im, inverse=True, cache=cache)

        synthesized = new_re * window
        for k in range(batch_end - batch_start):
            start = (batch_start + k) * hop
            result[start:start + n] += synthesized[k]

    return PCMBuffer(result.to(torch.float32), source.sample_rate)
