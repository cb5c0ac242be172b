"""Shared fixtures for detection rendering tests."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest

from objdetect.core.models import RawDetectionSet
from objdetect.detection.base import BaseDetector
from objdetect.detection.labels import LabelCatalog


class FakeDetector(BaseDetector):
    """Detector returning a canned result and recording its lifecycle."""

    def __init__(self, raw: RawDetectionSet) -> None:
        super().__init__()
        self.raw = raw
        self.opened = 0
        self.closed = 0
        self.seen_shapes: list[tuple[int, ...]] = []

    def open(self) -> None:
        self.opened += 1

    def close(self) -> None:
        self.closed += 1

    def detect(self, image: np.ndarray) -> RawDetectionSet:
        self.seen_shapes.append(image.shape)
        return self.raw


@pytest.fixture
def catalog() -> LabelCatalog:
    """Three-entry label catalog."""
    return LabelCatalog(["person", "bicycle", "car"])


@pytest.fixture
def raw_set() -> RawDetectionSet:
    """Score-sorted raw output where two of three entries pass 0.4."""
    return RawDetectionSet(
        scores=[0.9, 0.5, 0.3],
        classes=[0.0, 2.0, 1.0],
        boxes=[
            [0.1, 0.2, 0.9, 0.8],
            [0.0, 0.0, 0.5, 0.5],
            [0.5, 0.5, 1.0, 1.0],
        ],
    )


@pytest.fixture
def make_detector() -> type[FakeDetector]:
    """Factory for detectors with a custom canned result."""
    return FakeDetector


@pytest.fixture
def fake_detector(raw_set: RawDetectionSet) -> FakeDetector:
    """Detector yielding ``raw_set``."""
    return FakeDetector(raw_set)


@pytest.fixture
def blank_image() -> np.ndarray:
    """Black 100x200 BGR image (height 100, width 200)."""
    return np.zeros((100, 200, 3), dtype=np.uint8)


@pytest.fixture
def png_bytes(blank_image: np.ndarray) -> bytes:
    """``blank_image`` encoded as PNG."""
    success, encoded = cv2.imencode(".png", blank_image)
    assert success
    return encoded.tobytes()


@pytest.fixture
def model_dir(tmp_path: Path, png_bytes: bytes) -> Path:
    """Directory holding a label file and an input image."""
    labels = tmp_path / "coco_labels.txt"
    labels.write_text("person\nbicycle\ncar\n", encoding="utf-8")
    (tmp_path / "input.png").write_bytes(png_bytes)
    return tmp_path
