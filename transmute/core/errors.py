"""
Engine error taxonomy.
Hard errors (InvalidSizeError, UnsupportedTransformationError, RenderFailureError)
propagate to the caller. InsufficientFeatureError is soft: operators catch it and
return the target unchanged.
"""


class TransmuteError(Exception):
    """Base class for all engine errors."""


class InvalidSizeError(TransmuteError, ValueError):
    """FFT size is non-positive or not a power of two, or a frame does not fit its plan."""

    def __init__(self, size, message=None):
        super().__init__(message or f"FFT size must be a positive power of two, got {size}")
        self.size = size


class UnsupportedTransformationError(TransmuteError, ValueError):
    """Transformation name is not registered (or not allowed in this position)."""

    def __init__(self, name, reason: str = "unknown transformation"):
        super().__init__(f"{reason}: {name!r}")
        self.name = name


class InsufficientFeatureError(TransmuteError):
    """A feature extractor found nothing usable in the source."""


class RenderFailureError(TransmuteError, RuntimeError):
    """An offline render stage could not produce a buffer."""
