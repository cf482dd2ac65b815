"""
Tests for transmute/dsp/filters: RBJ biquads run unclamped through lfilter.
Run from project root: python -m pytest tests/test_filters.py -v
"""
import sys
import os
import math

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
import torch
from transmute.dsp.filters import Filter, lowpass_coeffs, bandpass_coeffs, peaking_coeffs

SR = 16000


def _sine(freq, seconds=1.0, amp=1.0):
    t = torch.arange(int(SR * seconds), dtype=torch.float64) / SR
    return (amp * torch.sin(2 * torch.pi * freq * t)).to(torch.float32).unsqueeze(0)


def _steady_rms(x):
    tail = x[..., x.shape[-1] // 2:]
    return float(torch.sqrt(torch.mean(tail.to(torch.float64) ** 2)))


class TestCoefficients:
    def test_lowpass_unity_dc_gain(self):
        b, a = lowpass_coeffs(SR, 1000.0, 0.707)
        assert abs(sum(b) / sum(a) - 1.0) < 1e-12

    def test_bandpass_blocks_dc(self):
        b, a = bandpass_coeffs(SR, 1000.0, 5.0)
        assert abs(sum(b)) < 1e-12

    def test_peaking_zero_gain_is_identity(self):
        b, a = peaking_coeffs(SR, 1000.0, 0.0, 2.0)
        for bi, ai in zip(b, a):
            assert abs(bi - ai) < 1e-12

    def test_frequency_above_nyquist_is_clamped(self):
        b, a = lowpass_coeffs(8000, 18000.0, 0.707)
        assert all(math.isfinite(v) for v in b + a)


class TestResponses:
    def test_lowpass_attenuates_high_frequency(self):
        low = Filter.lowpass(_sine(200), SR, 1000.0)
        high = Filter.lowpass(_sine(6000), SR, 1000.0)
        assert _steady_rms(low) > 0.65
        assert _steady_rms(high) < 0.05

    def test_bandpass_unity_at_center(self):
        out = Filter.bandpass(_sine(1000), SR, 1000.0, q=5.0)
        assert abs(_steady_rms(out) - _steady_rms(_sine(1000))) < 0.02

    def test_bandpass_rejects_off_band(self):
        out = Filter.bandpass(_sine(4000), SR, 500.0, q=5.0)
        assert _steady_rms(out) < 0.05

    @pytest.mark.parametrize("gain_db", [6.0, 15.0])
    def test_peaking_boosts_center_by_gain(self, gain_db):
        dry = _sine(1000)
        wet = Filter.peaking(dry, SR, 1000.0, gain_db, q=2.0)
        ratio = _steady_rms(wet) / _steady_rms(dry)
        expected = 10.0 ** (gain_db / 20.0)
        assert abs(ratio - expected) / expected < 0.03

    def test_peaking_unity_far_from_center(self):
        dry = _sine(100)
        wet = Filter.peaking(dry, SR, 5000.0, 15.0, q=30.0)
        assert abs(_steady_rms(wet) / _steady_rms(dry) - 1.0) < 0.01

    def test_boost_is_not_clamped(self):
        """A boosted band must be allowed past 1.0."""
        wet = Filter.peaking(_sine(1000, amp=0.5), SR, 1000.0, 18.0, q=2.0)
        assert float(wet.abs().max()) > 1.0

    def test_dtype_and_shape_preserved(self):
        x = torch.randn(2, 500)
        y = Filter.lowpass(x, SR, 2000.0)
        assert y.shape == x.shape
        assert y.dtype == torch.float32

    def test_empty_signal(self):
        assert Filter.bandpass(torch.zeros(1, 0), SR, 1000.0).shape == (1, 0)
