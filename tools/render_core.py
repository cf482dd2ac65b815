"""
Core rendering utilities with debug outputs, fingerprinting, and param tracing.
Used by the render.py tool.
"""
import sys
import os
import json
import hashlib
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch
import numpy as np

from transmute.core.io import AudioIO
from transmute.core.types import PCMBuffer
from transmute.params.clamp import clamp_params
from transmute.params.contract import to_engine_params
from transmute.params.resolve import resolve_params
from transmute.transforms.engine import TransformEngine


def _get_git_hash() -> str:
    """Get short git commit hash."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            cwd=os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except OSError:
        pass
    return "unknown"


def compute_audio_fingerprint(buffer: PCMBuffer) -> Dict:
    """Compute fingerprint: SHA256, peak, RMS, band energies."""
    audio_1d = buffer.samples.reshape(-1).float()
    sample_rate = buffer.sample_rate

    # SHA256 hash of audio bytes
    sha256 = hashlib.sha256(audio_1d.numpy().tobytes()).hexdigest()

    n = len(audio_1d)
    if n < 2:
        return {
            "sha256": sha256,
            "peak": float(torch.max(torch.abs(audio_1d))) if n else 0.0,
            "rms": 0.0,
            "low_energy": 0.0,
            "mid_energy": 0.0,
            "high_energy": 0.0,
        }

    peak = float(torch.max(torch.abs(audio_1d)))
    rms = float(torch.sqrt(torch.mean(audio_1d ** 2) + 1e-12))

    # Band energies of channel 0
    mono = buffer.channel(0)
    n_fft = 2 ** int(np.ceil(np.log2(max(2, buffer.length))))
    magnitude = torch.abs(torch.fft.rfft(mono, n=n_fft))
    freqs = torch.fft.rfftfreq(n_fft, 1.0 / sample_rate)

    # Low: 20-200Hz, Mid: 200-5000Hz, High: 5000Hz-Nyquist
    low_mask = (freqs >= 20.0) & (freqs <= 200.0)
    mid_mask = (freqs >= 200.0) & (freqs <= 5000.0)
    high_mask = (freqs >= 5000.0) & (freqs <= sample_rate / 2.0)

    return {
        "sha256": sha256,
        "peak": peak,
        "rms": rms,
        "low_energy": float(torch.sum(magnitude[low_mask] ** 2)),
        "mid_energy": float(torch.sum(magnitude[mid_mask] ** 2)),
        "high_energy": float(torch.sum(magnitude[high_mask] ** 2)),
    }


def render_transformation(
    transformation: str,
    source_path: str,
    target_path: str,
    params: dict,
    output_dir: Path,
    filename: str,
    transform_a: Optional[str] = None,
    transform_b: Optional[str] = None,
    seed: Optional[int] = None,
    debug: bool = False,
    normalize: bool = False,
    script_name: str = "unknown",
) -> Tuple[PCMBuffer, Dict]:
    """
    Run one transformation on two audio files with full param tracing and fingerprinting.

    Args:
        transformation: Transformation slug or label
        source_path: Audio file whose features are extracted
        target_path: Audio file that is reshaped
        params: Input params dict (flat, camelCase)
        output_dir: Directory to save WAV and debug JSON
        filename: Base filename (without extension)
        transform_a: First operator when transformation is the morph
        transform_b: Second operator when transformation is the morph
        seed: Seed for randomized operators (None = unseeded)
        debug: Enable debug outputs (saves resolved.json)
        normalize: Peak-normalize the written WAV
        script_name: Name of calling script (for debug JSON)

    Returns:
        Tuple of (result_buffer, debug_info_dict)
    """
    # Store input params (before any processing)
    input_params = dict(params) if params else {}

    # Step 1: Contract, defaults, bounds
    engine_params = to_engine_params(input_params)
    if seed is not None:
        engine_params["seed"] = seed
    resolved_params = clamp_params(resolve_params(engine_params))

    # Step 2: Load audio
    source = AudioIO.load(source_path)
    target = AudioIO.load(target_path)

    # Step 3: Render
    with TransformEngine() as engine:
        result = engine.transform(
            transformation, source, target, resolved_params,
            transform_a=transform_a, transform_b=transform_b,
        )

    # Step 4: Compute fingerprint
    fingerprint = compute_audio_fingerprint(result)

    # Step 5: Save WAV
    output_dir.mkdir(parents=True, exist_ok=True)
    wav_path = output_dir / f"{filename}.wav"
    AudioIO.save_wav(result, str(wav_path), normalize=normalize)

    # Step 6: Save debug JSON if enabled
    debug_info = {
        "transformation": transformation,
        "transform_a": transform_a,
        "transform_b": transform_b,
        "script_name": script_name,
        "timestamp": datetime.now().isoformat(),
        "git_hash": _get_git_hash(),
        "seed": seed,
        "source": {"path": source_path, "sample_rate": source.sample_rate,
                   "channels": source.num_channels, "frames": source.length},
        "target": {"path": target_path, "sample_rate": target.sample_rate,
                   "channels": target.num_channels, "frames": target.length},
        "input_params": input_params,
        "resolved_params": resolved_params,
        "fingerprint": fingerprint,
        "wav_path": str(wav_path),
    }

    if debug:
        json_path = output_dir / f"{filename}.resolved.json"
        with open(json_path, "w") as f:
            json.dump(debug_info, f, indent=2, default=str)

    return result, debug_info


def get_unique_output_dir(base_name: str) -> Path:
    """
    Generate unique output directory: renders/{base_name}/YYYYMMDD_HHMMSS_{gitshort}/
    """
    now = datetime.now()
    date_str = now.strftime("%Y%m%d")
    time_str = now.strftime("%H%M%S")
    git_hash = _get_git_hash()
    short_hash = git_hash[:8] if git_hash != "unknown" else "unknown"

    return Path("renders") / base_name / f"{date_str}_{time_str}_{short_hash}"
