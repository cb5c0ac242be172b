"""Detector interface and detection-related errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Protocol, Self, runtime_checkable

import numpy as np

from objdetect.core.models import RawDetectionSet

MIN_FRAME_CHANNELS = 1
STANDARD_RGB_CHANNELS = 3
RGBA_CHANNELS = 4
VALID_FRAME_CHANNELS = [MIN_FRAME_CHANNELS, STANDARD_RGB_CHANNELS, RGBA_CHANNELS]


@runtime_checkable
class Detector(Protocol):
    """Inference engine producing raw detections for a single image.

    Implementations must return entries sorted by descending score and be
    usable as a context manager that acquires and releases the model.
    """

    def detect(self, image: np.ndarray) -> RawDetectionSet:
        """Run inference on a BGR image."""
        ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class BaseDetector(ABC):
    """Abstract base class handling the open/close lifecycle."""

    def __init__(self) -> None:
        self.is_open = False

    @abstractmethod
    def open(self) -> None:
        """Acquire model resources."""

    @abstractmethod
    def close(self) -> None:
        """Release model resources."""

    @abstractmethod
    def detect(self, image: np.ndarray) -> RawDetectionSet:
        """Run inference on a BGR image."""

    def __enter__(self) -> Self:
        self.open()
        self.is_open = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.is_open = False
        self.close()

    def _validate_frame(self, frame: np.ndarray) -> None:
        """Validate input frame format."""
        if frame.size == 0:
            msg = "Input frame is empty"
            raise ValueError(msg)

        if frame.ndim not in [2, 3]:
            msg = f"Frame must be 2D or 3D array, got {frame.ndim}D"
            raise ValueError(msg)

        if frame.ndim == 3 and frame.shape[2] not in VALID_FRAME_CHANNELS:
            msg = (
                f"Frame must have {VALID_FRAME_CHANNELS} channels, got {frame.shape[2]}"
            )
            raise ValueError(msg)


class DetectionError(Exception):
    """Base exception for detection-related errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class LabelOutOfRangeError(DetectionError, IndexError):
    """Raised when a class index has no entry in the label catalog."""

    def __init__(self, class_index: int, catalog_size: int) -> None:
        msg = (
            f"Class index {class_index} out of range for label catalog "
            f"of size {catalog_size}"
        )
        super().__init__(msg, "LABEL_OUT_OF_RANGE")
        self.class_index = class_index
        self.catalog_size = catalog_size


class ImageDecodeError(DetectionError):
    """Raised when input bytes cannot be decoded as an image."""


class ModelLoadError(DetectionError):
    """Raised when detector weights cannot be loaded."""
