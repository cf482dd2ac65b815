"""
Iterative radix-2 Cooley-Tukey FFT over separate real/imag tensors.
Plans (bit-reversal table + sin/cos tables) are built once per size and held by an
explicitly owned FFTCache; there is no module-level cache.
"""
import math
from typing import Dict, Optional

import torch

from transmute.core.errors import InvalidSizeError


def is_power_of_two(size) -> bool:
    return isinstance(size, int) and size > 0 and (size & (size - 1)) == 0


class FFTPlan:
    """Precomputed tables for one transform size."""

    def __init__(self, size: int):
        if not is_power_of_two(size):
            raise InvalidSizeError(size)
        self.size = size
        self.log2_size = int(math.log2(size))

        indices = torch.arange(size, dtype=torch.long)
        reversed_bits = torch.zeros(size, dtype=torch.long)
        for bit in range(self.log2_size):
            reversed_bits |= ((indices >> bit) & 1) << (self.log2_size - 1 - bit)
        self.bit_reverse = reversed_bits

        angles = math.pi * torch.arange(size, dtype=torch.float64) / size
        self.sin_table = torch.sin(angles)
        self.cos_table = torch.cos(angles)

    def transform(self, real: torch.Tensor, imag: torch.Tensor, inverse: bool = False) -> None:
        """
        In-place transform along the last dimension.
        Forward uses the e^{-i...} convention (same as torch.fft.fft); inverse divides by N.
        """
        n = self.size
        length = real.shape[-1] if real.dim() else 0
        if real.shape != imag.shape:
            raise InvalidSizeError(
                length, f"real and imag shapes differ: {tuple(real.shape)} vs {tuple(imag.shape)}"
            )
        if length != n:
            raise InvalidSizeError(length, f"frame length {length} does not match FFT size {n}")

        re = real.to(torch.float64)[..., self.bit_reverse]
        im = imag.to(torch.float64)[..., self.bit_reverse]
        batch_shape = re.shape[:-1]
        sign = 1.0 if inverse else -1.0

        length = 2
        while length <= n:
            half = length // 2
            # angle 2*pi*j/length == pi*k/n
            k = torch.arange(half) * (n // half)
            tw_re = self.cos_table[k]
            tw_im = sign * self.sin_table[k]

            re = re.reshape(*batch_shape, n // length, length)
            im = im.reshape(*batch_shape, n // length, length)
            u_re, p_re = re[..., :half], re[..., half:]
            u_im, p_im = im[..., :half], im[..., half:]

            t_re = p_re * tw_re - p_im * tw_im
            t_im = p_re * tw_im + p_im * tw_re

            re = torch.cat((u_re + t_re, u_re - t_re), dim=-1).reshape(*batch_shape, n)
            im = torch.cat((u_im + t_im, u_im - t_im), dim=-1).reshape(*batch_shape, n)
            length <<= 1

        if inverse:
            re = re / n
            im = im / n

        real.copy_(re)
        imag.copy_(im)


class FFTCache:
    """
    Size-keyed plan cache. A concurrent miss may build the same plan twice;
    setdefault only ever publishes a fully built plan.
    """

    def __init__(self):
        self._plans: Dict[int, FFTPlan] = {}

    def get(self, size: int) -> FFTPlan:
        plan = self._plans.get(size)
        if plan is None:
            plan = self._plans.setdefault(size, FFTPlan(size))
        return plan

    def __contains__(self, size) -> bool:
        return size in self._plans

    def __len__(self) -> int:
        return len(self._plans)


def fft(
    real: torch.Tensor,
    imag: torch.Tensor,
    inverse: bool = False,
    cache: Optional[FFTCache] = None,
) -> None:
    """Transform real/imag in place. Size is taken from the last dimension."""
    size = real.shape[-1] if real.dim() else 0
    if not is_power_of_two(size):
        raise InvalidSizeError(size)
    plan = cache.get(size) if cache is not None else FFTPlan(size)
    plan.transform(real, imag, inverse)


def magnitude_phase(real: torch.Tensor, imag: torch.Tensor):
    """Polar form of a spectral frame."""
    return torch.sqrt(real ** 2 + imag ** 2), torch.atan2(imag, real)
