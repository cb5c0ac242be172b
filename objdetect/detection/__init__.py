"""Detection module - Detector interface, filtering and label resolution.

The torchvision adapter lives in ``objdetect.detection.torchvision_detector``
and is not imported here so the rest of the package works without torch.
"""

from objdetect.detection.base import (
    BaseDetector,
    DetectionError,
    Detector,
    ImageDecodeError,
    LabelOutOfRangeError,
    ModelLoadError,
)
from objdetect.detection.filtering import filter_detections, map_box
from objdetect.detection.labels import NAMED_COLORS, LabelCatalog

__all__ = [
    # Detector interface
    "BaseDetector",
    "Detector",
    # Errors
    "DetectionError",
    "ImageDecodeError",
    "LabelOutOfRangeError",
    "ModelLoadError",
    # Post-processing
    "filter_detections",
    "map_box",
    "LabelCatalog",
    "NAMED_COLORS",
]
