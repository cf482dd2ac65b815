"""
Oscillators driven by a per-sample frequency curve.
Phase starts at 0 on every render so identical inputs give identical carriers.
"""
import math

import torch

TWO_PI = 2 * math.pi


class Oscillator:
    @staticmethod
    def phase_from_frequency(frequency: torch.Tensor, sample_rate: int) -> torch.Tensor:
        """
        Integrate an instantaneous frequency curve (Hz) into phase, wrapped to [0, 2*pi).
        phase[0] = 0; phase[n] = phase[n-1] + 2*pi*f[n-1]/sr.
        """
        n = frequency.shape[-1]
        if n == 0:
            return torch.zeros(0, dtype=torch.float64)
        increments = TWO_PI * frequency.to(torch.float64) / sample_rate
        phase = torch.zeros(n, dtype=torch.float64)
        phase[1:] = torch.cumsum(increments[:-1], dim=0)
        return torch.remainder(phase, TWO_PI)

    @staticmethod
    def sine(frequency: torch.Tensor, sample_rate: int) -> torch.Tensor:
        """
        Sine carrier following a frequency curve (scalar-per-sample FM).

        Args:
            frequency: Frequency curve in Hz, one value per output sample
            sample_rate: Sample rate

        Returns:
            float32 carrier of the same length, starting at sin(0) = 0
        """
        return torch.sin(Oscillator.phase_from_frequency(frequency, sample_rate)).to(torch.float32)
