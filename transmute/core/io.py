import io

import numpy as np
import soundfile as sf
import torch

from transmute.core.types import PCMBuffer


class AudioIO:
    """File/byte boundary for PCM buffers. Not used by the operators themselves."""

    @staticmethod
    def load(path: str) -> PCMBuffer:
        """Decodes an audio file into a PCMBuffer."""
        data, sample_rate = sf.read(path, dtype="float32", always_2d=True)
        return AudioIO._from_frames(data, sample_rate)

    @staticmethod
    def from_bytes(payload: bytes) -> PCMBuffer:
        """Decodes an in-memory audio file (for API requests)."""
        data, sample_rate = sf.read(io.BytesIO(payload), dtype="float32", always_2d=True)
        return AudioIO._from_frames(data, sample_rate)

    @staticmethod
    def save_wav(buffer: PCMBuffer, path: str, normalize: bool = False):
        """Saves a buffer to a 16-bit PCM WAV file."""
        data = AudioIO._to_frames(buffer, normalize)
        sf.write(path, data, buffer.sample_rate, subtype="PCM_16")

    @staticmethod
    def to_bytes(buffer: PCMBuffer, format: str = "WAV") -> bytes:
        """Returns the buffer as a 16-bit PCM file (for API responses)."""
        out = io.BytesIO()
        data = AudioIO._to_frames(buffer, normalize=False)
        sf.write(out, data, buffer.sample_rate, format=format, subtype="PCM_16")
        return out.getvalue()

    @staticmethod
    def _from_frames(data: np.ndarray, sample_rate: int) -> PCMBuffer:
        # soundfile gives (frames, channels)
        samples = torch.from_numpy(np.ascontiguousarray(data.T))
        return PCMBuffer(samples, sample_rate)

    @staticmethod
    def _to_frames(buffer: PCMBuffer, normalize: bool) -> np.ndarray:
        data = buffer.samples.detach().cpu().numpy().T

        if normalize:
            peak = np.max(np.abs(data)) if data.size else 0.0
            if peak > 0:
                data = data / peak

        # Clamp to avoid wrap-around clipping
        return np.clip(data, -1.0, 1.0)
