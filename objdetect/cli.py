"""objdetect command line interface."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import typer

from objdetect.config import DetectorModelConfig, PipelineConfig
from objdetect.core.constants import (
    DEFAULT_MODEL,
    DEFAULT_PROBABILITY_THRESHOLD,
    LABELS_FILENAME,
    OutputMode,
)
from objdetect.detection.base import BaseDetector, DetectionError
from objdetect.detection.labels import LabelCatalog
from objdetect.pipeline import DetectionPipeline
from objdetect.utils.image import ImageUtils

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Detect objects in an image and draw or report them", no_args_is_help=True
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(*, verbose: bool) -> None:
    """Send logs to stderr so stdout stays free for JSON and image bytes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


TORCH_EXTRA_HINT = "install it with: pip install 'objdetect[torch]'"


def _torchvision_module():
    """Import the torchvision adapter, which needs the optional torch extra."""
    try:
        return importlib.import_module("objdetect.detection.torchvision_detector")
    except ModuleNotFoundError as e:
        msg = f"torch is not available ({e}); {TORCH_EXTRA_HINT}"
        raise DetectionError(msg, "TORCH_UNAVAILABLE") from e


def build_detector(model_cfg: DetectorModelConfig) -> BaseDetector:
    """Create the torchvision detector; torch is imported only here."""
    return _torchvision_module().TorchvisionDetector(model_cfg)


@app.command("detect")
def detect(
    image: Path | None = typer.Argument(
        None, help="Input image; read from stdin when omitted"
    ),
    prob: float = typer.Option(
        DEFAULT_PROBABILITY_THRESHOLD, "--prob", "-p", help="Probability threshold"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output JSON information instead of an image"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file ('-' for stdout)"
    ),
    model_dir: Path = typer.Option(
        Path("."), "--dir", "-d", help="Directory with labels and optional checkpoint"
    ),
    labels: Path | None = typer.Option(
        None, "--labels", help=f"Label file (default: DIR/{LABELS_FILENAME})"
    ),
    model: str = typer.Option(DEFAULT_MODEL, "--model", help="Torchvision model"),
    full_scan: bool = typer.Option(
        False, "--full-scan", help="Check every score instead of stopping early"
    ),
    skip_unknown_labels: bool = typer.Option(
        False, "--skip-unknown-labels", help="Drop detections without a label"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Detect objects and write an annotated JPEG or a JSON report."""
    configure_logging(verbose=verbose)

    try:
        overrides = {
            "probability_threshold": prob,
            "mode": OutputMode.JSON if json_output else OutputMode.IMAGE,
            "output": output,
            "assume_sorted": not full_scan,
            "skip_unknown_labels": skip_unknown_labels,
            "model": DetectorModelConfig(name=model),
        }
        if labels is not None:
            overrides["labels_path"] = labels
        config = PipelineConfig.from_model_dir(model_dir, **overrides)

        catalog = LabelCatalog.from_file(config.labels_path)
        frame = ImageUtils.load_image(image)

        with build_detector(config.model) as detector:
            pipeline = DetectionPipeline(detector, catalog, config)
            pipeline.run(frame)
    except (OSError, DetectionError, ValueError) as e:
        msg = f"Error: {e}"
        logger.exception(msg)
        raise typer.Exit(code=1) from e


@app.command("labels")
def write_labels(
    out: Path = typer.Option(
        Path(LABELS_FILENAME), "--out", help="Label file to write"
    ),
    model: str = typer.Option(DEFAULT_MODEL, "--model", help="Torchvision model"),
) -> None:
    """Write the COCO category names of a model's default weights."""
    configure_logging(verbose=False)

    try:
        count = _torchvision_module().write_label_file(model, out)
    except (OSError, DetectionError, ValueError) as e:
        msg = f"Error: {e}"
        logger.exception(msg)
        raise typer.Exit(code=1) from e
    typer.echo(f"Wrote {count} labels to {out}")


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
