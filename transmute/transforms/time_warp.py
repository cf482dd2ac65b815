"""
Time Scale Warping: the target's segments between onsets are sped up or slowed
down (tape-style) so each lasts as long as the matching source segment.
"""
import logging
from typing import Optional

from transmute.core.errors import InsufficientFeatureError
from transmute.core.params import get_float
from transmute.core.types import PCMBuffer
from transmute.dsp.fft import FFTCache
from transmute.dsp.render import OfflineRenderer
from transmute.dsp.resample import playback_segment, seconds_to_frames
from transmute.features.onsets import require_transients, transients

logger = logging.getLogger(__name__)

MIN_SEGMENT_S = 0.01


def apply_time_scale_warping(
    source: PCMBuffer,
    target: PCMBuffer,
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
) -> PCMBuffer:
    sensitivity = get_float(params, "transientSensitivity", 1.8)

    try:
        source_onsets = require_transients(transients(source, sensitivity))
        target_onsets = require_transients(transients(target, sensitivity))
    except InsufficientFeatureError as exc:
        logger.info("Time warp skipped, returning target: %s", exc)
        return target

    num_segments = min(len(source_onsets), len(target_onsets)) - 1
    sr = target.sample_rate

    # Context spans every source segment; skipped ones leave silence at the end
    total_duration = (source_onsets[num_segments] - source_onsets[0]) / source.sample_rate

    # (output offset in frames, target start frame, rate, output frames)
    placements = []
    current_time = 0.0
    for i in range(num_segments):
        source_duration = (source_onsets[i + 1] - source_onsets[i]) / source.sample_rate
        target_duration = (target_onsets[i + 1] - target_onsets[i]) / sr
        if source_duration < MIN_SEGMENT_S or target_duration < MIN_SEGMENT_S:
            continue

        rate = target_duration / source_duration
        offset = seconds_to_frames(current_time, sr)
        current_time += source_duration
        out_frames = seconds_to_frames(current_time, sr) - offset
        placements.append((offset, target_onsets[i], rate, out_frames))

    renderer = OfflineRenderer(target.num_channels, seconds_to_frames(total_duration, sr), sr)
    for offset, start, rate, out_frames in placements:
        segment = playback_segment(target.samples, start, rate, out_frames)
        renderer.connect(segment, offset=offset)

    logger.debug("Time warp placed %d/%d segments, %.3fs of %.3fs", len(placements), num_segments, current_time, total_duration)
    return renderer.render()
