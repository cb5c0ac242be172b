"""Core module - Fundamental data structures and constants."""

from objdetect.core.constants import (
    DEFAULT_PROBABILITY_THRESHOLD,
    SUPPORTED_MODELS,
    OutputMode,
)
from objdetect.core.models import (
    Detection,
    ImageBounds,
    PixelBox,
    RawDetectionSet,
    ReportRecord,
)

__all__ = [
    # Models
    "Detection",
    "ImageBounds",
    "PixelBox",
    "RawDetectionSet",
    "ReportRecord",
    # Constants
    "DEFAULT_PROBABILITY_THRESHOLD",
    "SUPPORTED_MODELS",
    "OutputMode",
]
