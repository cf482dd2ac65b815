import torch
import torchaudio.functional as F

from transmute.dsp.filters import Filter


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def ms_to_s(ms: float) -> float:
    """Convert milliseconds to seconds."""
    return ms / 1000.0


def ms_to_samples(ms: float, sample_rate: int) -> int:
    """Milliseconds to a whole number of frames (floored)."""
    return int(sample_rate * ms_to_s(ms))


# -----------------------------------------------------------------------------
# Followers
# -----------------------------------------------------------------------------

def one_pole_follower(waveform: torch.Tensor, smoothing: float) -> torch.Tensor:
    """
    y[n] = smoothing * y[n-1] + (1 - smoothing) * |x[n]|, y[-1] = 0.
    Runs along the last dimension; output is non-negative.
    """
    if waveform.shape[-1] == 0:
        return torch.zeros_like(waveform)
    rectified = torch.abs(waveform).to(torch.float64)
    b = torch.tensor([1.0 - smoothing, 0.0], dtype=torch.float64)
    a = torch.tensor([1.0, -smoothing], dtype=torch.float64)
    return F.lfilter(rectified, a, b, clamp=False).to(waveform.dtype)


def normalize_peak(envelope: torch.Tensor) -> torch.Tensor:
    """Divide each row by its peak; rows with a zero peak are left untouched."""
    if envelope.shape[-1] == 0:
        return envelope.clone()
    peak = envelope.amax(dim=-1, keepdim=True)
    safe = torch.where(peak > 0, peak, torch.ones_like(peak))
    return envelope / safe


class EnvelopeFollower:
    """
    Band envelope follower: full-wave rectification then a low cutoff lowpass.
    Used to turn a band-passed signal into a gain curve.
    """

    def __init__(self, sample_rate: int, cutoff_hz: float = 10.0, q: float = 0.707):
        self.sample_rate = sample_rate
        self.cutoff_hz = cutoff_hz
        self.q = q

    def __call__(self, waveform: torch.Tensor) -> torch.Tensor:
        return Filter.lowpass(torch.abs(waveform), self.sample_rate, self.cutoff_hz, self.q)
