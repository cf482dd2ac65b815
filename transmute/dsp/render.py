"""
Offline render pipeline: a fixed-length, fixed-channel, fixed-rate context.
Branches are declared with connect(signal, *stages, gain=..., offset=...) and summed
into the destination by render(). Stages are plain callables
(tensor, sample_rate) -> tensor applied in order; nothing runs until render().
A zero-length context renders an empty buffer without running any stage.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Union

import torch

from transmute.core.errors import RenderFailureError, TransmuteError
from transmute.core.types import PCMBuffer
from transmute.dsp.delay import FeedbackDelay
from transmute.dsp.filters import Filter
from transmute.dsp.mixer import fit_channels, fit_length

logger = logging.getLogger(__name__)

Stage = Callable[[torch.Tensor, int], torch.Tensor]


# -----------------------------------------------------------------------------
# Stage builders
# -----------------------------------------------------------------------------

def apply_filter(kind: str, freq: float, q: float = 0.707, gain_db: float = 0.0) -> Stage:
    """Biquad stage: kind is "lowpass", "bandpass" or "peaking"."""
    if kind == "lowpass":
        def _stage(x, sr):
            return Filter.lowpass(x, sr, freq, q)
    elif kind == "bandpass":
        def _stage(x, sr):
            return Filter.bandpass(x, sr, freq, q)
    elif kind == "peaking":
        def _stage(x, sr):
            return Filter.peaking(x, sr, freq, gain_db, q)
    else:
        raise ValueError(f"Unknown filter kind: {kind}")
    _stage.__name__ = f"{kind}@{freq:g}Hz"
    return _stage


def mix_gain(gain: float) -> Stage:
    def _stage(x, sr):
        return x * gain
    _stage.__name__ = f"gain({gain:g})"
    return _stage


def multiply(curve: torch.Tensor) -> Stage:
    """Sample-wise multiply by a curve (1-D or per-channel), fitted to the branch shape."""
    def _stage(x, sr):
        fitted = fit_length(fit_channels(curve.to(x.dtype), x.shape[0]), x.shape[-1])
        return x * fitted
    _stage.__name__ = "multiply"
    return _stage


def apply_delay_feedback(delay_s: float, feedback: float, cutoff_hz: float) -> Stage:
    """Delay line with a lowpass in the feedback loop; returns the wet signal only."""
    def _stage(x, sr):
        return FeedbackDelay(sr, delay_s, feedback, cutoff_hz).process(x)
    _stage.__name__ = f"delay({delay_s:g}s, fb={feedback:g})"
    return _stage


# -----------------------------------------------------------------------------
# Render context
# -----------------------------------------------------------------------------

@dataclass
class _Branch:
    signal: torch.Tensor
    stages: List[Stage] = field(default_factory=list)
    gain: float = 1.0
    offset: int = 0


class OfflineRenderer:
    def __init__(self, num_channels: int, length: int, sample_rate: int):
        self.num_channels = max(1, int(num_channels))
        self.length = max(0, int(length))
        self.sample_rate = int(sample_rate)
        self._branches: List[_Branch] = []

    def connect(
        self,
        signal: Union[PCMBuffer, torch.Tensor],
        *stages: Stage,
        gain: float = 1.0,
        offset: int = 0,
    ) -> "OfflineRenderer":
        """Register a branch: signal -> stages... -> gain -> destination."""
        if isinstance(signal, PCMBuffer):
            signal = signal.samples
        self._branches.append(_Branch(signal, list(stages), float(gain), max(0, int(offset))))
        return self

    def render(self) -> PCMBuffer:
        destination = torch.zeros(self.num_channels, self.length)
        if self.length == 0:
            return PCMBuffer(destination, self.sample_rate)

        for index, branch in enumerate(self._branches):
            x = fit_length(fit_channels(branch.signal.to(torch.float32), self.num_channels), self.length, branch.offset)
            for stage in branch.stages:
                x = self._run_stage(stage, x, index)
            destination += x * branch.gain

        return PCMBuffer(destination, self.sample_rate)

    def _run_stage(self, stage: Stage, x: torch.Tensor, branch_index: int) -> torch.Tensor:
        name = getattr(stage, "__name__", repr(stage))
        try:
            out = stage(x, self.sample_rate)
        except TransmuteError:
            raise
        except RuntimeError as exc:
            logger.error("Render stage %s (branch %d) failed: %s", name, branch_index, exc)
            raise RenderFailureError(f"render stage {name} failed: {exc}") from exc
        if not isinstance(out, torch.Tensor):
            raise RenderFailureError(f"render stage {name} returned {type(out).__name__}, expected a tensor")
        if out.shape != x.shape:
            raise RenderFailureError(
                f"render stage {name} changed shape {tuple(x.shape)} -> {tuple(out.shape)}"
            )
        return out.to(torch.float32)
