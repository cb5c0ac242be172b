"""Image utilities for decoding input and encoding annotated output."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import BinaryIO

import cv2
import numpy as np

from objdetect.detection.base import ImageDecodeError

logger = logging.getLogger(__name__)


class ImageUtils:
    """Utilities for reading, decoding, encoding and writing images."""

    @staticmethod
    def read_input(image_path: Path | None = None) -> bytes:
        """Read raw image bytes from a file, or from stdin when no path is given."""
        if image_path is None:
            logger.debug("Reading image from stdin")
            return sys.stdin.buffer.read()

        if not image_path.exists():
            msg = f"Image file not found: {image_path}"
            logger.error(msg)
            raise FileNotFoundError(msg)
        return image_path.read_bytes()

    @staticmethod
    def decode_image(data: bytes) -> np.ndarray:
        """Decode encoded image bytes into a 3-channel BGR array."""
        if not data:
            msg = "Cannot decode empty image data"
            raise ImageDecodeError(msg, "IMAGE_DECODE_FAILED")

        buffer = np.frombuffer(data, dtype=np.uint8)
        try:
            image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        except cv2.error as e:
            msg = f"Error decoding image: {e}"
            logger.exception(msg)
            raise ImageDecodeError(msg, "IMAGE_DECODE_FAILED") from e

        if image is None:
            msg = f"Unrecognized image format ({len(data)} bytes)"
            logger.error(msg)
            raise ImageDecodeError(msg, "IMAGE_DECODE_FAILED")

        logger.debug("Decoded image, shape: %s", image.shape)
        return image

    @staticmethod
    def load_image(image_path: Path | None = None) -> np.ndarray:
        """Load and decode an image from a file path or stdin."""
        return ImageUtils.decode_image(ImageUtils.read_input(image_path))

    @staticmethod
    def encode_jpeg(image: np.ndarray) -> bytes:
        """Encode an image as JPEG using the codec's default quality."""
        if image.size == 0:
            msg = "Cannot encode empty image"
            raise ValueError(msg)

        success, encoded = cv2.imencode(".jpg", image)
        if not success:
            msg = "Failed to encode image as JPEG"
            logger.error(msg)
            raise RuntimeError(msg)
        return encoded.tobytes()

    @staticmethod
    def write_bytes(data: bytes, destination: Path | BinaryIO) -> None:
        """Write bytes to a file path or an open binary stream."""
        if isinstance(destination, Path):
            try:
                with destination.open("wb") as f:
                    f.write(data)
            except OSError as e:
                msg = f"Error writing output to {destination}: {e}"
                logger.exception(msg)
                raise OSError(msg) from e
            logger.debug("Wrote %d bytes to %s", len(data), destination)
            return

        destination.write(data)
        destination.flush()
