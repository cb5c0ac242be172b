"""Configuration models for a detection run."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from objdetect.core.constants import (
    CHECKPOINT_FILENAME,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_PROBABILITY_THRESHOLD,
    LABELS_FILENAME,
    STDIO_PATH,
    OutputMode,
)


class DetectorModelConfig(BaseModel):
    """Which torchvision detector to build and where its weights come from."""

    name: Literal[
        "ssd300_vgg16",
        "ssdlite320_mobilenet_v3_large",
        "fasterrcnn_resnet50_fpn",
    ] = DEFAULT_MODEL
    pretrained: bool = Field(True, description="Use COCO weights from torchvision")
    checkpoint: Path | None = Field(
        None, description="State dict overriding the pretrained weights"
    )
    device: str | None = Field(None, description="Torch device, e.g. 'cpu'")


class PipelineConfig(BaseModel):
    """Settings shared by the image and JSON output modes."""

    probability_threshold: float = Field(
        DEFAULT_PROBABILITY_THRESHOLD, ge=0.0, le=1.0
    )
    mode: OutputMode = OutputMode.IMAGE
    output: Path | None = Field(
        None, description="Output path; '-' is stdout, unset picks a mode default"
    )
    labels_path: Path = Path(LABELS_FILENAME)
    assume_sorted: bool = Field(
        True, description="Stop scanning at the first score below threshold"
    )
    skip_unknown_labels: bool = Field(
        False, description="Drop detections whose class has no label"
    )
    model: DetectorModelConfig = DetectorModelConfig()

    @field_validator("labels_path")
    @classmethod
    def _to_path(cls, v: Path) -> Path:
        return Path(v)

    @property
    def destination(self) -> Path:
        """Where output goes: ``output.jpg`` for images, stdout for JSON."""
        if self.output is not None:
            return self.output
        if self.mode is OutputMode.JSON:
            return Path(STDIO_PATH)
        return Path(DEFAULT_OUTPUT_PATH)

    @classmethod
    def from_model_dir(cls, model_dir: Path, **overrides: Any) -> PipelineConfig:
        """Build a config whose label file and checkpoint live in ``model_dir``."""
        overrides.setdefault("labels_path", model_dir / LABELS_FILENAME)
        model = overrides.pop("model", None) or DetectorModelConfig()
        checkpoint = model_dir / CHECKPOINT_FILENAME
        if model.checkpoint is None and checkpoint.exists():
            model = model.model_copy(update={"checkpoint": checkpoint})
        return cls(model=model, **overrides)
