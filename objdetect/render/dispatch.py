"""Route filtered detections to an annotated JPEG or a JSON report."""

from __future__ import annotations

import io
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO, TextIO

import numpy as np

from objdetect.core.constants import STDIO_PATH, OutputMode
from objdetect.core.models import Detection
from objdetect.render.annotator import Annotator
from objdetect.render.report import ReportBuilder
from objdetect.utils.image import ImageUtils

logger = logging.getLogger(__name__)

Destination = Path | TextIO | BinaryIO | None


def _binary_stream(stream: TextIO) -> BinaryIO:
    """Return the byte stream underneath a text stream."""
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        msg = f"Image output needs a binary stream, got {type(stream).__name__}"
        raise TypeError(msg)
    return buffer


class OutputDispatcher:
    """Produces exactly one output per run, selected by ``OutputMode``.

    A ``None`` destination or the path ``-`` means standard output.
    """

    def __init__(self, annotator: Annotator | None = None) -> None:
        self.annotator = annotator or Annotator()

    def dispatch(
        self,
        mode: OutputMode,
        detections: Sequence[Detection],
        image: np.ndarray | None,
        destination: Destination = None,
    ) -> None:
        """Write the output for ``mode`` to ``destination``."""
        mode = OutputMode(mode)
        if mode is OutputMode.JSON:
            self.write_json(detections, destination)
            return

        if image is None:
            msg = "Image output requires the source image"
            raise ValueError(msg)
        self.write_image(detections, image, destination)

    def write_json(
        self, detections: Sequence[Detection], destination: Destination = None
    ) -> None:
        """Serialize the report as a single newline-terminated JSON array."""
        document = ReportBuilder.to_json(ReportBuilder.build(detections)) + "\n"

        if isinstance(destination, Path) and str(destination) != STDIO_PATH:
            try:
                destination.write_text(document, encoding="utf-8")
            except OSError as e:
                msg = f"Error writing report to {destination}: {e}"
                logger.exception(msg)
                raise OSError(msg) from e
            logger.info(
                "Wrote report with %d detections to %s", len(detections), destination
            )
            return

        if destination is None or isinstance(destination, Path):
            destination = sys.stdout
        if isinstance(destination, (io.RawIOBase, io.BufferedIOBase)):
            destination.write(document.encode("utf-8"))
        else:
            destination.write(document)
        destination.flush()

    def write_image(
        self,
        detections: Sequence[Detection],
        image: np.ndarray,
        destination: Destination = None,
    ) -> None:
        """Annotate ``image`` and write it as JPEG."""
        canvas = self.annotator.annotate(image, detections)
        data = ImageUtils.encode_jpeg(canvas)

        if destination is None or (
            isinstance(destination, Path) and str(destination) == STDIO_PATH
        ):
            destination = sys.stdout.buffer
        elif isinstance(destination, io.TextIOBase):
            destination = _binary_stream(destination)

        ImageUtils.write_bytes(data, destination)
        logger.info("Wrote annotated image with %d detections", len(detections))
