"""Label catalog: class index to name and display colour."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from PIL import ImageColor

from objdetect.detection.base import LabelOutOfRangeError

logger = logging.getLogger(__name__)

# CSS colour names in alphabetical order, indexed by class modulo length
NAMED_COLORS: tuple[str, ...] = tuple(sorted(ImageColor.colormap))


class LabelCatalog:
    """Ordered class names loaded once per run.

    Line ``i`` of the label file names class index ``i``.
    """

    def __init__(self, labels: Iterable[str]) -> None:
        self._labels: tuple[str, ...] = tuple(labels)

    @classmethod
    def from_file(cls, path: Path) -> LabelCatalog:
        """Load a newline-delimited UTF-8 label file."""
        if not path.exists():
            msg = f"Label file not found: {path}"
            logger.error(msg)
            raise FileNotFoundError(msg)

        try:
            text = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Error reading label file {path}: {e}"
            logger.exception(msg)
            raise OSError(msg) from e

        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        catalog = cls(line.removesuffix("\r") for line in lines)
        logger.info("Loaded %d labels from %s", len(catalog), path)
        return catalog

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self):
        return iter(self._labels)

    @property
    def labels(self) -> Sequence[str]:
        """All class names in index order."""
        return self._labels

    def resolve(self, class_index: int) -> str:
        """Return the name for ``class_index``.

        Negative indices are rejected rather than counted from the end.
        """
        if not 0 <= class_index < len(self._labels):
            raise LabelOutOfRangeError(class_index, len(self._labels))
        return self._labels[class_index]

    @staticmethod
    def color_name_for(class_index: int) -> str:
        """Return the named colour assigned to ``class_index``."""
        return NAMED_COLORS[class_index % len(NAMED_COLORS)]

    @classmethod
    def color_for(cls, class_index: int) -> tuple[int, int, int]:
        """Return the BGR colour assigned to ``class_index``."""
        r, g, b = ImageColor.getrgb(cls.color_name_for(class_index))[:3]
        return (b, g, r)

    def __repr__(self) -> str:
        return f"LabelCatalog(size={len(self._labels)})"
