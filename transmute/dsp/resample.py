"""
Variable playback-rate reads (tape-style speed change: pitch follows duration).
"""
import math

import torch


def playback_segment(signal: torch.Tensor, start: int, rate: float, out_len: int) -> torch.Tensor:
    """
    Read out_len frames from signal (channels, frames) beginning at frame `start`,
    advancing `rate` input frames per output frame. Linear interpolation; reads past
    the end of the signal hold the last frame.
    """
    channels, n = signal.shape
    if out_len <= 0 or n == 0:
        return torch.zeros(channels, max(0, out_len), dtype=signal.dtype)

    positions = start + torch.arange(out_len, dtype=torch.float64) * rate
    positions = torch.clamp(positions, 0.0, n - 1)

    indices_floor = torch.floor(positions).long()
    indices_ceil = torch.clamp(indices_floor + 1, max=n - 1)
    frac = (positions - indices_floor).to(signal.dtype)

    return signal[:, indices_floor] * (1.0 - frac) + signal[:, indices_ceil] * frac


def seconds_to_frames(seconds: float, sample_rate: int) -> int:
    return int(math.ceil(seconds * sample_rate - 1e-9))
