import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional, Union

from transmute.core.params import get_float
from transmute.core.types import PCMBuffer, TransformationType
from transmute.dsp.fft import FFTCache
from transmute.dsp.mixer import sum_padded
from transmute.transforms.registry import get_operator

logger = logging.getLogger(__name__)


def apply_transformation_morph(
    source: PCMBuffer,
    target: PCMBuffer,
    transform_a: Union[str, TransformationType],
    transform_b: Union[str, TransformationType],
    params: Optional[dict] = None,
    *,
    fft_cache: Optional[FFTCache] = None,
    executor: Optional[Executor] = None,
) -> PCMBuffer:
    """
    Run two operators on the same inputs and crossfade their outputs:
        out = A * (1 - morphPosition) + B * morphPosition
    Shorter results are zero-padded; the result has the smaller channel count
    of the two and A's sample rate.

    Both operators run on `executor` (a short-lived 2-worker pool when None).
    Errors from either operator propagate.
    """
    # Resolve both names before starting any work
    operator_a = get_operator(transform_a)
    operator_b = get_operator(transform_b)
    position = get_float(params, "morphPosition", 0.5)
    cache = fft_cache if fft_cache is not None else FFTCache()

    if executor is None:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="morph") as pool:
            result_a, result_b = _run_pair(pool, operator_a, operator_b, source, target, params, cache)
    else:
        result_a, result_b = _run_pair(executor, operator_a, operator_b, source, target, params, cache)

    num_channels = min(result_a.num_channels, result_b.num_channels)
    logger.debug(
        "Morph %s -> %s at %.2f (%d / %d frames)",
        transform_a, transform_b, position, result_a.length, result_b.length,
    )
    mixed = sum_padded([result_a.samples, result_b.samples], [1.0 - position, position], num_channels)
    return PCMBuffer(mixed, result_a.sample_rate)


def _run_pair(pool, operator_a, operator_b, source, target, params, cache):
    future_a = pool.submit(operator_a, source, target, params, fft_cache=cache)
    future_b = pool.submit(operator_b, source, target, params, fft_cache=cache)
    return future_a.result(), future_b.result()
