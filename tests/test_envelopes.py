"""
Unit tests for transmute/dsp/envelopes: helpers, one-pole follower, band follower.
Run from project root: python -m pytest tests/test_envelopes.py -v
Or: python tests/test_envelopes.py
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch
from transmute.dsp.envelopes import (
    ms_to_s,
    ms_to_samples,
    one_pole_follower,
    normalize_peak,
    EnvelopeFollower,
)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def test_ms_to_s():
    assert ms_to_s(0) == 0.0
    assert ms_to_s(1000) == 1.0
    assert ms_to_s(50) == 0.05


def test_ms_to_samples_floors():
    assert ms_to_samples(50, 44100) == 2205
    assert ms_to_samples(10, 8000) == 80
    assert ms_to_samples(0.01, 8000) == 0


# -----------------------------------------------------------------------------
# One-pole follower
# -----------------------------------------------------------------------------

def test_one_pole_follower_matches_recursion():
    """y[n] = s*y[n-1] + (1-s)*|x[n]|"""
    x = torch.tensor([[0.5, -1.0, 0.0, 0.25, -0.75]])
    s = 0.9
    y = one_pole_follower(x, s)
    expected = []
    prev = 0.0
    for v in x[0].tolist():
        prev = s * prev + (1 - s) * abs(v)
        expected.append(prev)
    torch.testing.assert_close(y[0], torch.tensor(expected), rtol=1e-6, atol=1e-7)


def test_one_pole_follower_not_clamped():
    """Rectified input above 1.0 must not be clipped by the filter."""
    x = torch.full((1, 2000), 4.0)
    y = one_pole_follower(x, 0.99)
    assert float(y[0, -1]) > 3.9


def test_one_pole_follower_empty():
    y = one_pole_follower(torch.zeros(2, 0), 0.995)
    assert y.shape == (2, 0)


def test_normalize_peak_rows():
    env = torch.tensor([[0.0, 0.5, 0.25], [0.0, 0.0, 0.0]])
    out = normalize_peak(env)
    torch.testing.assert_close(out[0], torch.tensor([0.0, 1.0, 0.5]))
    assert float(out[1].abs().sum()) == 0.0


# -----------------------------------------------------------------------------
# Band envelope follower
# -----------------------------------------------------------------------------

def test_envelope_follower_tracks_level():
    """Rectified + 10 Hz lowpass of a steady sine settles near its mean |x| (2/pi)."""
    sr = 8000
    t = torch.arange(sr * 2) / sr
    sine = torch.sin(2 * torch.pi * 440 * t).unsqueeze(0)
    env = EnvelopeFollower(sr, cutoff_hz=10.0)(sine)
    tail = env[0, sr:]
    assert abs(float(tail.mean()) - 2 / torch.pi) < 0.02
    assert not torch.isnan(env).any()


def test_envelope_follower_silence():
    env = EnvelopeFollower(8000)(torch.zeros(1, 1000))
    assert float(env.abs().max()) == 0.0


if __name__ == "__main__":
    test_ms_to_s()
    test_ms_to_samples_floors()
    test_one_pole_follower_matches_recursion()
    test_one_pole_follower_not_clamped()
    test_one_pole_follower_empty()
    test_normalize_peak_rows()
    test_envelope_follower_tracks_level()
    test_envelope_follower_silence()
    print("All envelope tests passed.")
