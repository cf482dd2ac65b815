from transmute.core.types import PCMBuffer
from transmute.dsp.envelopes import normalize_peak, one_pole_follower

# Smoothing presets: closer to 1.0 tracks more slowly
SMOOTHING_DEFAULT = 0.995
SMOOTHING_GATE = 0.998
SMOOTHING_MODULATION = 0.99


def envelope(buffer: PCMBuffer, smoothing: float = SMOOTHING_DEFAULT) -> PCMBuffer:
    """
    Per-channel amplitude envelope, each channel normalized to a peak of 1.0.
    All-zero channels stay all-zero. Same shape and rate as the input.
    """
    follower = one_pole_follower(buffer.samples, smoothing)
    return buffer.with_samples(normalize_peak(follower))
