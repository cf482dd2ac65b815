import sys
import os
import unittest
import math

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch
from transmute.dsp.oscillators import Oscillator
from transmute.dsp.resample import playback_segment, seconds_to_frames

class TestOscillators(unittest.TestCase):
    def setUp(self):
        self.sr = 8000
        self.n = 800

    def test_sine_shape_and_range(self):
        freq = torch.full((self.n,), 440.0)
        wave = Oscillator.sine(freq, self.sr)
        self.assertEqual(wave.shape, (self.n,))
        self.assertEqual(wave.dtype, torch.float32)
        self.assertTrue(torch.max(wave) <= 1.0001)
        self.assertTrue(torch.min(wave) >= -1.0001)

    def test_constant_frequency_matches_closed_form(self):
        freq = torch.full((self.n,), 100.0)
        wave = Oscillator.sine(freq, self.sr)
        n = torch.arange(self.n, dtype=torch.float64)
        expected = torch.sin(2 * math.pi * 100.0 * n / self.sr).to(torch.float32)
        torch.testing.assert_close(wave, expected, atol=1e-5, rtol=0)

    def test_phase_starts_at_zero_and_wraps(self):
        freq = torch.full((self.n,), 3000.0)
        phase = Oscillator.phase_from_frequency(freq, self.sr)
        self.assertEqual(float(phase[0]), 0.0)
        self.assertTrue(float(phase.max()) < 2 * math.pi)
        self.assertTrue(float(phase.min()) >= 0.0)

    def test_phase_uses_previous_frequency(self):
        freq = torch.tensor([1000.0, 2000.0, 0.0])
        phase = Oscillator.phase_from_frequency(freq, self.sr)
        self.assertAlmostEqual(float(phase[1]), 2 * math.pi * 1000.0 / self.sr)
        self.assertAlmostEqual(float(phase[2]), 2 * math.pi * 3000.0 / self.sr)

    def test_empty_frequency_curve(self):
        self.assertEqual(Oscillator.sine(torch.zeros(0), self.sr).shape, (0,))

    def test_determinism(self):
        freq = torch.linspace(100.0, 1000.0, self.n)
        wave1 = Oscillator.sine(freq, self.sr)
        wave2 = Oscillator.sine(freq, self.sr)
        self.assertTrue(torch.equal(wave1, wave2))


class TestPlayback(unittest.TestCase):
    def test_rate_one_copies(self):
        sig = torch.arange(10.0).unsqueeze(0)
        out = playback_segment(sig, 2, 1.0, 5)
        self.assertEqual(out[0].tolist(), [2.0, 3.0, 4.0, 5.0, 6.0])

    def test_rate_half_interpolates(self):
        sig = torch.arange(10.0).unsqueeze(0)
        out = playback_segment(sig, 0, 0.5, 4)
        torch.testing.assert_close(out[0], torch.tensor([0.0, 0.5, 1.0, 1.5]))

    def test_reads_past_end_hold_last_frame(self):
        sig = torch.arange(4.0).unsqueeze(0)
        out = playback_segment(sig, 2, 2.0, 3)
        self.assertEqual(out[0].tolist(), [2.0, 3.0, 3.0])

    def test_seconds_to_frames(self):
        self.assertEqual(seconds_to_frames(0.5, 8000), 4000)
        self.assertEqual(seconds_to_frames(0.50001, 8000), 4001)
        self.assertEqual(seconds_to_frames(0.0, 8000), 0)

if __name__ == '__main__':
    unittest.main()
