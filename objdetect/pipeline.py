"""Single-image detection pipeline shared by the image and JSON modes."""

from __future__ import annotations

import logging

import numpy as np

from objdetect.config import PipelineConfig
from objdetect.core.constants import DEFAULT_PROBABILITY_THRESHOLD
from objdetect.core.models import Detection, ImageBounds, RawDetectionSet
from objdetect.detection.base import Detector, LabelOutOfRangeError
from objdetect.detection.filtering import filter_detections, map_box
from objdetect.detection.labels import LabelCatalog
from objdetect.render.dispatch import Destination, OutputDispatcher

logger = logging.getLogger(__name__)


def build_detections(
    raw: RawDetectionSet,
    bounds: ImageBounds,
    catalog: LabelCatalog,
    threshold: float = DEFAULT_PROBABILITY_THRESHOLD,
    *,
    assume_sorted: bool = True,
    skip_unknown_labels: bool = False,
) -> list[Detection]:
    """Filter raw output and join each kept entry with its label and pixel box.

    An unknown class index raises ``LabelOutOfRangeError`` unless
    ``skip_unknown_labels`` is set, in which case that entry is dropped.
    """
    detections: list[Detection] = []
    for i in filter_detections(raw, threshold, assume_sorted=assume_sorted):
        class_index = raw.class_index(i)
        try:
            label = catalog.resolve(class_index)
        except LabelOutOfRangeError:
            if not skip_unknown_labels:
                raise
            logger.warning(
                "Skipping detection %d with unknown class %d", i, class_index
            )
            continue

        detections.append(
            Detection(
                label=label,
                probability=float(raw.scores[i]),
                box=map_box(raw.boxes[i], bounds),
                class_index=class_index,
            )
        )
    return detections


class DetectionPipeline:
    """Runs an injected detector on one image and writes one output.

    The caller owns the detector's lifetime and must have entered it.
    """

    def __init__(
        self,
        detector: Detector,
        catalog: LabelCatalog,
        config: PipelineConfig | None = None,
        dispatcher: OutputDispatcher | None = None,
    ) -> None:
        self.detector = detector
        self.catalog = catalog
        self.config = config or PipelineConfig()
        self.dispatcher = dispatcher or OutputDispatcher()

    def detect(self, image: np.ndarray) -> list[Detection]:
        """Run inference and post-process the result."""
        raw = self.detector.detect(image)
        detections = build_detections(
            raw,
            ImageBounds.from_image(image),
            self.catalog,
            self.config.probability_threshold,
            assume_sorted=self.config.assume_sorted,
            skip_unknown_labels=self.config.skip_unknown_labels,
        )
        logger.info(
            "Kept %d of %d detections above %.2f",
            len(detections),
            len(raw),
            self.config.probability_threshold,
        )
        return detections

    def run(
        self, image: np.ndarray, destination: Destination = None
    ) -> list[Detection]:
        """Detect objects in ``image`` and write the configured output."""
        detections = self.detect(image)
        if destination is None:
            destination = self.config.destination
        self.dispatcher.dispatch(self.config.mode, detections, image, destination)
        return detections
