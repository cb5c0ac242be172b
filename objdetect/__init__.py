"""objdetect - render object-detector output as an annotated image or JSON report."""

from objdetect.config import DetectorModelConfig, PipelineConfig
from objdetect.core import (
    Detection,
    ImageBounds,
    OutputMode,
    PixelBox,
    RawDetectionSet,
    ReportRecord,
)
from objdetect.detection import (
    DetectionError,
    Detector,
    LabelCatalog,
    LabelOutOfRangeError,
    filter_detections,
    map_box,
)
from objdetect.pipeline import DetectionPipeline, build_detections
from objdetect.render import Annotator, OutputDispatcher, ReportBuilder

__version__ = "0.1.0"

__all__ = [
    "Annotator",
    "Detection",
    "DetectionError",
    "DetectionPipeline",
    "Detector",
    "DetectorModelConfig",
    "ImageBounds",
    "LabelCatalog",
    "LabelOutOfRangeError",
    "OutputDispatcher",
    "OutputMode",
    "PipelineConfig",
    "PixelBox",
    "RawDetectionSet",
    "ReportBuilder",
    "ReportRecord",
    "build_detections",
    "filter_detections",
    "map_box",
]
