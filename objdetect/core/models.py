"""Core data models for detection post-processing."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, Field

BOX_COORDINATES = 4

# Infinite coordinates saturate to the int32 range
PIXEL_LIMIT = 2**31 - 1


def to_pixel(origin: int, extent: int, coord: float) -> int:
    """Scale a normalized coordinate and truncate it toward zero.

    NaN maps to ``origin`` and infinities saturate to ``PIXEL_LIMIT``.
    """
    value = origin + extent * coord
    if math.isnan(value):
        return origin
    if math.isinf(value):
        return PIXEL_LIMIT if value > 0 else -PIXEL_LIMIT
    return int(value)


class ImageBounds(BaseModel):
    """Pixel rectangle of a source image."""

    min_x: int = Field(0, description="Left edge (inclusive)")
    min_y: int = Field(0, description="Top edge (inclusive)")
    max_x: int = Field(..., description="Right edge (exclusive)")
    max_y: int = Field(..., description="Bottom edge (exclusive)")

    model_config = {"frozen": True}

    @property
    def width(self) -> int:
        """Horizontal extent in pixels."""
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        """Vertical extent in pixels."""
        return self.max_y - self.min_y

    @classmethod
    def from_image(cls, image: np.ndarray) -> ImageBounds:
        """Create bounds covering a whole image array."""
        height, width = image.shape[:2]
        return cls(min_x=0, min_y=0, max_x=width, max_y=height)


class PixelBox(BaseModel):
    """Integer rectangle in source-image pixel space.

    Corners are stored as produced by the model: nothing guarantees
    ``x1 <= x2`` or that the box lies inside the image.
    """

    x1: int
    y1: int
    x2: int
    y2: int

    model_config = {"frozen": True}

    @classmethod
    def from_normalized(
        cls, box: Sequence[float] | np.ndarray, bounds: ImageBounds
    ) -> PixelBox:
        """Map a normalized ``(y1, x1, y2, x2)`` box into ``bounds``.

        Each coordinate is scaled in double precision and truncated toward
        zero. Out-of-range inputs are kept as-is; non-finite ones are mapped
        by ``to_pixel``.
        """
        y1, x1, y2, x2 = (float(v) for v in box)
        return cls(
            x1=to_pixel(bounds.min_x, bounds.width, x1),
            y1=to_pixel(bounds.min_y, bounds.height, y1),
            x2=to_pixel(bounds.min_x, bounds.width, x2),
            y2=to_pixel(bounds.min_y, bounds.height, y2),
        )

    @property
    def top_left(self) -> tuple[int, int]:
        """Return the ``(x1, y1)`` corner."""
        return (self.x1, self.y1)

    @property
    def bottom_right(self) -> tuple[int, int]:
        """Return the ``(x2, y2)`` corner."""
        return (self.x2, self.y2)

    def __str__(self) -> str:
        """Return string representation."""
        return f"PixelBox(({self.x1}, {self.y1}) -> ({self.x2}, {self.y2}))"


@dataclass
class RawDetectionSet:
    """Index-aligned detector output for one image.

    Entries are expected in descending score order; this is a precondition
    of the detector, not something checked here.
    """

    scores: np.ndarray  # (N,)
    classes: np.ndarray  # (N,) float class indices
    boxes: np.ndarray  # (N, 4) normalized y1, x1, y2, x2

    def __post_init__(self) -> None:
        self.scores = np.asarray(self.scores, dtype=np.float64).reshape(-1)
        self.classes = np.asarray(self.classes, dtype=np.float64).reshape(-1)
        self.boxes = np.asarray(self.boxes, dtype=np.float64)
        if self.boxes.size == 0:
            self.boxes = self.boxes.reshape(0, BOX_COORDINATES)

        if self.boxes.ndim != 2 or self.boxes.shape[1] != BOX_COORDINATES:
            msg = f"Boxes must have shape (N, 4), got {self.boxes.shape}"
            raise ValueError(msg)

        lengths = {len(self.scores), len(self.classes), len(self.boxes)}
        if len(lengths) != 1:
            msg = (
                "Scores, classes and boxes length mismatch: "
                f"{len(self.scores)} / {len(self.classes)} / {len(self.boxes)}"
            )
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.scores)

    def class_index(self, i: int) -> int:
        """Return the class of entry ``i`` as an integer index."""
        return int(self.classes[i])

    @classmethod
    def empty(cls) -> RawDetectionSet:
        """Create a set with no detections."""
        return cls(scores=np.empty(0), classes=np.empty(0), boxes=np.empty((0, 4)))


class Detection(BaseModel):
    """A filtered detection joined with its label and pixel box."""

    label: str
    probability: float = Field(..., description="Raw detector score")
    box: PixelBox
    class_index: int

    model_config = {"frozen": True}

    @property
    def caption(self) -> str:
        """Text drawn next to the box, e.g. ``"dog (87%)"``."""
        return f"{self.label} ({self.probability * 100:.0f}%)"


class ReportRecord(BaseModel):
    """One entry of a structured detection report."""

    name: str
    probability: float
