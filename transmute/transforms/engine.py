import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Union

from transmute.core.errors import UnsupportedTransformationError
from transmute.core.types import PCMBuffer, TransformationType
from transmute.dsp.fft import FFTCache
from transmute.transforms.morph import apply_transformation_morph
from transmute.transforms.registry import get_operator, resolve_transformation

logger = logging.getLogger(__name__)


class TransformEngine:
    """
    Entry point for running transformations by name.
    Owns the FFT plan cache and the worker pool used by the morph combinator.
    """

    def __init__(self, fft_cache: Optional[FFTCache] = None, max_workers: int = 2):
        self.fft_cache = fft_cache if fft_cache is not None else FFTCache()
        self._executor = ThreadPoolExecutor(max_workers=max(2, max_workers), thread_name_prefix="morph")

    def transform(
        self,
        name: Union[str, TransformationType],
        source: PCMBuffer,
        target: PCMBuffer,
        params: Optional[dict] = None,
        transform_a: Optional[Union[str, TransformationType]] = None,
        transform_b: Optional[Union[str, TransformationType]] = None,
    ) -> PCMBuffer:
        kind = resolve_transformation(name)
        start = time.perf_counter()

        if kind is TransformationType.TRANSFORMATION_MORPH:
            if transform_a is None or transform_b is None:
                raise UnsupportedTransformationError(name, reason="morph needs transform_a and transform_b")
            result = apply_transformation_morph(
                source, target, transform_a, transform_b, params,
                fft_cache=self.fft_cache, executor=self._executor,
            )
        else:
            result = get_operator(kind)(source, target, params, fft_cache=self.fft_cache)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info(
            "%s: source=%d target=%d -> %d frames in %.1f ms",
            kind.value, source.length, target.length, result.length, elapsed_ms,
        )
        return result

    def close(self):
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
