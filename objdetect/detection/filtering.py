"""Confidence filtering and box mapping for raw detector output."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from objdetect.core.constants import DEFAULT_PROBABILITY_THRESHOLD
from objdetect.core.models import ImageBounds, PixelBox, RawDetectionSet

logger = logging.getLogger(__name__)


def filter_detections(
    raw: RawDetectionSet,
    threshold: float = DEFAULT_PROBABILITY_THRESHOLD,
    *,
    assume_sorted: bool = True,
) -> list[int]:
    """Return indices of detections scoring strictly above ``threshold``.

    With ``assume_sorted`` (the default) the scan stops at the first score
    that fails, so the result is always a prefix ``[0, k)``. This is only
    correct when the detector emits scores in descending order. Pass
    ``assume_sorted=False`` to check every entry; order is preserved either
    way and the input is never re-sorted.
    """
    if not assume_sorted:
        kept = [i for i, score in enumerate(raw.scores) if score > threshold]
        logger.debug("Full scan kept %d of %d detections", len(kept), len(raw))
        return kept

    k = 0
    while k < len(raw) and raw.scores[k] > threshold:
        k += 1

    logger.debug("Prefix scan kept %d of %d detections", k, len(raw))
    return list(range(k))


def map_box(box: Sequence[float] | np.ndarray, bounds: ImageBounds) -> PixelBox:
    """Convert a normalized ``(y1, x1, y2, x2)`` box into pixel space."""
    return PixelBox.from_normalized(box, bounds)
