"""Integration tests for the detection pipeline."""

from __future__ import annotations

import io
import json
from pathlib import Path

import cv2
import numpy as np
import pytest

from objdetect.config import PipelineConfig
from objdetect.core.constants import OutputMode
from objdetect.core.models import ImageBounds, PixelBox, RawDetectionSet
from objdetect.detection.base import LabelOutOfRangeError
from objdetect.detection.labels import LabelCatalog
from objdetect.pipeline import DetectionPipeline, build_detections
from objdetect.render.annotator import Annotator

BOUNDS = ImageBounds(min_x=0, min_y=0, max_x=200, max_y=100)


class TestBuildDetections:
    """Test joining raw output with labels and pixel boxes."""

    def test_filtered_and_resolved(self, raw_set, catalog):
        """Test kept entries carry label, score, box and class."""
        detections = build_detections(raw_set, BOUNDS, catalog, 0.4)

        assert [d.label for d in detections] == ["person", "car"]
        assert [d.probability for d in detections] == [0.9, 0.5]
        assert [d.class_index for d in detections] == [0, 2]
        assert detections[0].box == PixelBox(x1=40, y1=10, x2=160, y2=90)
        assert detections[1].box == PixelBox(x1=0, y1=0, x2=100, y2=50)

    def test_nothing_passes(self, catalog):
        """Test a single low score yields no detections."""
        raw = RawDetectionSet(scores=[0.2], classes=[0.0], boxes=[[0, 0, 1, 1]])
        assert build_detections(raw, BOUNDS, catalog) == []

    def test_empty_set(self, catalog):
        """Test an empty detector result."""
        assert build_detections(RawDetectionSet.empty(), BOUNDS, catalog) == []

    def test_unknown_label_is_fatal(self, catalog):
        """Test an out-of-range class aborts by default."""
        raw = RawDetectionSet(scores=[0.9], classes=[5.0], boxes=[[0, 0, 1, 1]])
        with pytest.raises(LabelOutOfRangeError):
            build_detections(raw, BOUNDS, catalog)

    def test_unknown_label_can_be_skipped(self, catalog, caplog):
        """Test the hardened mode drops the entry and keeps going."""
        raw = RawDetectionSet(
            scores=[0.9, 0.8, 0.7],
            classes=[0.0, 5.0, 1.0],
            boxes=np.zeros((3, 4)),
        )
        detections = build_detections(
            raw, BOUNDS, catalog, skip_unknown_labels=True
        )

        assert [d.label for d in detections] == ["person", "bicycle"]
        assert "unknown class 5" in caplog.text

    def test_unknown_label_past_threshold_is_ignored(self, catalog):
        """Test entries below the threshold are never resolved."""
        raw = RawDetectionSet(
            scores=[0.9, 0.1], classes=[0.0, 99.0], boxes=np.zeros((2, 4))
        )
        assert len(build_detections(raw, BOUNDS, catalog)) == 1

    def test_non_finite_boxes(self, catalog, blank_image):
        """Test NaN and infinite coordinates map and render without error."""
        nan, inf = float("nan"), float("inf")
        raw = RawDetectionSet(
            scores=[0.9, 0.8],
            classes=[0.0, 1.0],
            boxes=[[nan, 0.1, 0.5, 0.5], [-inf, -inf, inf, inf]],
        )
        detections = build_detections(raw, BOUNDS, catalog)

        assert detections[0].box == PixelBox(x1=20, y1=0, x2=100, y2=50)
        assert detections[1].box.x2 > BOUNDS.max_x
        canvas = Annotator().annotate(blank_image, detections)
        assert canvas.shape == blank_image.shape

    def test_full_scan(self, catalog):
        """Test unsorted input with the full scan."""
        raw = RawDetectionSet(
            scores=[0.9, 0.1, 0.8], classes=[0.0, 1.0, 2.0], boxes=np.zeros((3, 4))
        )
        sorted_scan = build_detections(raw, BOUNDS, catalog)
        full_scan = build_detections(raw, BOUNDS, catalog, assume_sorted=False)

        assert [d.label for d in sorted_scan] == ["person"]
        assert [d.label for d in full_scan] == ["person", "car"]


class TestDetectionPipeline:
    """Test end-to-end runs with an injected detector."""

    def test_json_run(self, fake_detector, catalog, blank_image):
        """Test JSON mode writes the filtered report."""
        config = PipelineConfig(mode=OutputMode.JSON)
        stream = io.StringIO()
        with fake_detector as detector:
            DetectionPipeline(detector, catalog, config).run(blank_image, stream)

        assert json.loads(stream.getvalue()) == [
            {"name": "person", "probability": 0.9},
            {"name": "car", "probability": 0.5},
        ]
        assert fake_detector.seen_shapes == [(100, 200, 3)]

    def test_image_run(self, fake_detector, catalog, blank_image, tmp_path: Path):
        """Test image mode writes an annotated JPEG to the configured path."""
        output = tmp_path / "annotated.jpg"
        config = PipelineConfig(mode=OutputMode.IMAGE, output=output)
        with fake_detector as detector:
            detections = DetectionPipeline(detector, catalog, config).run(blank_image)

        assert len(detections) == 2
        decoded = cv2.imdecode(
            np.frombuffer(output.read_bytes(), np.uint8), cv2.IMREAD_COLOR
        )
        assert decoded.shape == blank_image.shape
        assert decoded.any()
        assert not blank_image.any()

    def test_threshold_from_config(self, fake_detector, catalog, blank_image):
        """Test the configured threshold is applied."""
        config = PipelineConfig(probability_threshold=0.6, mode=OutputMode.JSON)
        detections = DetectionPipeline(fake_detector, catalog, config).detect(
            blank_image
        )
        assert [d.label for d in detections] == ["person"]

    def test_both_modes_share_detections(self, fake_detector, catalog, blank_image):
        """Test image and JSON runs report the same detections."""
        json_run = DetectionPipeline(
            fake_detector, catalog, PipelineConfig(mode=OutputMode.JSON)
        ).detect(blank_image)
        image_run = DetectionPipeline(
            fake_detector, catalog, PipelineConfig(mode=OutputMode.IMAGE)
        ).detect(blank_image)

        assert json_run == image_run

    def test_detector_released_on_error(self, make_detector, blank_image):
        """Test the detector is closed when post-processing fails."""
        detector = make_detector(
            RawDetectionSet(scores=[0.9], classes=[3.0], boxes=[[0, 0, 1, 1]])
        )
        with pytest.raises(LabelOutOfRangeError), detector:
            DetectionPipeline(detector, LabelCatalog(["a"])).detect(blank_image)

        assert detector.opened == 1
        assert detector.closed == 1
        assert not detector.is_open
