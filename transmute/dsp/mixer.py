"""
Shape fitting and gain mixing for (channels, frames) tensors.
Channel rules follow speaker up/down-mix: equal -> as is, mono -> copied to every
channel, anything -> mono by averaging, otherwise channel c reads input c % in.
"""
import torch


def fit_channels(signal: torch.Tensor, num_channels: int) -> torch.Tensor:
    """Map a (C, N) tensor onto num_channels rows."""
    if signal.dim() == 1:
        signal = signal.unsqueeze(0)
    in_channels = signal.shape[0]
    if in_channels == num_channels:
        return signal
    if in_channels == 1:
        return signal.expand(num_channels, -1)
    if num_channels == 1:
        return signal.mean(dim=0, keepdim=True)
    index = torch.arange(num_channels) % in_channels
    return signal[index]


def fit_length(signal: torch.Tensor, length: int, offset: int = 0) -> torch.Tensor:
    """
    Place signal at frame offset inside a zero tensor of the given length.
    Anything past the end is cut.
    """
    out = torch.zeros(*signal.shape[:-1], max(0, length), dtype=signal.dtype)
    if offset >= length:
        return out
    count = min(signal.shape[-1], length - offset)
    if count > 0:
        out[..., offset:offset + count] = signal[..., :count]
    return out


def crossfade(dry: torch.Tensor, wet: torch.Tensor, mix: float) -> torch.Tensor:
    """wet * mix + dry * (1 - mix). Shapes must match."""
    return wet * mix + dry * (1.0 - mix)


def sum_padded(signals, gains, num_channels: int) -> torch.Tensor:
    """
    Sum gain-scaled signals after fitting them to num_channels and the
    longest length. Shorter signals are zero-padded.
    """
    length = max((s.shape[-1] for s in signals), default=0)
    master = torch.zeros(num_channels, length)
    for signal, gain in zip(signals, gains):
        fitted = fit_length(fit_channels(signal, num_channels), length)
        master = master + fitted * gain
    return master
