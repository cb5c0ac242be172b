"""Draw detection outlines and captions onto a copy of an image."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from objdetect.core.constants import BOX_COLOR
from objdetect.core.models import Detection
from objdetect.detection.labels import LabelCatalog

logger = logging.getLogger(__name__)

STROKE_THICKNESS = 1

# Coordinates are clamped to this magnitude before reaching OpenCV, which
# takes int32 points. Canvases are far smaller, so no visible pixel moves.
_COORD_LIMIT = 1 << 20


def _clamp(value: int) -> int:
    return max(-_COORD_LIMIT, min(_COORD_LIMIT, value))


def load_caption_font() -> ImageFont.ImageFont:
    """Return Pillow's built-in fixed-width bitmap font (Courier Bold 8)."""
    return ImageFont.load_default_imagefont()


def baseline_offset(font: ImageFont.ImageFont) -> int:
    """Distance in pixels from the top of a text cell to the glyph baseline."""
    width, height = font.getbbox("M")[2:]
    cell = Image.new("L", (width, height))
    ImageDraw.Draw(cell).text((0, 0), "M", fill=255, font=font)
    bbox = cell.getbbox()
    return bbox[3] if bbox else height


class Annotator:
    """Renders boxes and captions for an ordered list of detections."""

    def __init__(
        self,
        box_color: tuple[int, int, int] = BOX_COLOR,
        font: ImageFont.ImageFont | None = None,
    ) -> None:
        self.box_color = box_color
        self.font = font or load_caption_font()
        self.ascent = baseline_offset(self.font)

    def annotate(
        self, image: np.ndarray, detections: Sequence[Detection]
    ) -> np.ndarray:
        """Return a new BGR canvas with every detection drawn on it.

        Detections are drawn in order, so later ones cover earlier ones where
        they overlap. ``image`` itself is left untouched.
        """
        if image.size == 0:
            msg = "Cannot annotate empty image"
            raise ValueError(msg)

        if image.ndim == 2:
            canvas = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        else:
            canvas = image.copy()

        for detection in detections:
            self.draw_box(canvas, detection)
            self.draw_caption(canvas, detection)

        logger.debug("Annotated %d detections", len(detections))
        return canvas

    def draw_box(self, canvas: np.ndarray, detection: Detection) -> None:
        """Stroke the one-pixel border of the detection's box, corners included."""
        box = detection.box
        cv2.rectangle(
            canvas,
            (_clamp(box.x1), _clamp(box.y1)),
            (_clamp(box.x2), _clamp(box.y2)),
            self.box_color,
            STROKE_THICKNESS,
            cv2.LINE_8,
        )

    def draw_caption(self, canvas: np.ndarray, detection: Detection) -> None:
        """Write the caption with its baseline on the box's top-left corner.

        Pillow writes channels in array order, so the BGR colour lands
        unchanged on the BGR canvas.
        """
        x, y = detection.box.top_left
        layer = Image.fromarray(canvas)
        ImageDraw.Draw(layer).text(
            (_clamp(x), _clamp(y) - self.ascent),
            detection.caption,
            fill=LabelCatalog.color_for(detection.class_index),
            font=self.font,
        )
        canvas[...] = np.asarray(layer)
