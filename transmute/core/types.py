from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import torch


@dataclass(frozen=True)
class PCMBuffer:
    """
    Decoded audio: a (channels, frames) float32 tensor plus its sample rate.
    Treated as immutable; operators allocate new tensors for their results.
    """
    samples: torch.Tensor
    sample_rate: int

    def __post_init__(self):
        samples = self.samples
        if not isinstance(samples, torch.Tensor):
            samples = torch.as_tensor(samples)
        if samples.dim() == 1:
            samples = samples.unsqueeze(0)
        if samples.dim() != 2 or samples.shape[0] < 1:
            raise ValueError(f"PCMBuffer expects (channels, frames), got shape {tuple(samples.shape)}")
        object.__setattr__(self, "samples", samples.to(torch.float32))
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def num_channels(self) -> int:
        return self.samples.shape[0]

    @property
    def length(self) -> int:
        return self.samples.shape[-1]

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.length / self.sample_rate

    def channel(self, index: int) -> torch.Tensor:
        return self.samples[index]

    def with_samples(self, samples: torch.Tensor) -> "PCMBuffer":
        """New buffer at the same sample rate."""
        return PCMBuffer(samples, self.sample_rate)

    @classmethod
    def from_channels(cls, channels: Sequence, sample_rate: int) -> "PCMBuffer":
        """Build from a list of equal-length per-channel arrays."""
        tensors = [torch.as_tensor(c, dtype=torch.float32).reshape(-1) for c in channels]
        lengths = {t.shape[-1] for t in tensors}
        if len(lengths) > 1:
            raise ValueError(f"channel lengths differ: {sorted(lengths)}")
        return cls(torch.stack(tensors), sample_rate)

    @classmethod
    def silent(cls, num_channels: int, length: int, sample_rate: int) -> "PCMBuffer":
        return cls(torch.zeros(max(1, num_channels), max(0, length)), sample_rate)


class TransformationType(str, Enum):
    AMPLITUDE = "amplitude_mapping"
    RHYTHMIC = "rhythmic_gating"
    SPECTRAL = "spectral_shaping"
    CONVOLUTION = "convolution_morphing"
    TIME_WARP = "time_scale_warping"
    SURFACE_TRANSLATE = "surface_translation"
    FOURIER_MASKING = "fourier_masking"
    HARMONIC_IMPRINT = "harmonic_imprinting"
    INTERFERENCE_ECHOES = "interference_echoes"
    FORMANT_SHIFTING = "formant_shifting"
    DYNAMIC_RING_MOD = "dynamic_ring_modulation"
    TRANSFORMATION_MORPH = "transformation_morph"

    @property
    def label(self) -> str:
        """Display name, e.g. "Amplitude Mapping"."""
        return self.value.replace("_", " ").title()
