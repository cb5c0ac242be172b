"""Torchvision detector adapter producing normalized, score-sorted output."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import torch
import torchvision
from torch import nn
from torchvision.transforms import v2 as T

from objdetect.config import DetectorModelConfig
from objdetect.core.models import RawDetectionSet
from objdetect.detection.base import BaseDetector, DetectionError, ModelLoadError

logger = logging.getLogger(__name__)

_DETECTION = torchvision.models.detection
MODEL_WEIGHTS = {
    "ssd300_vgg16": _DETECTION.SSD300_VGG16_Weights,
    "ssdlite320_mobilenet_v3_large": _DETECTION.SSDLite320_MobileNet_V3_Large_Weights,
    "fasterrcnn_resnet50_fpn": _DETECTION.FasterRCNN_ResNet50_FPN_Weights,
}


def select_device(preferred: str | None = None) -> torch.device:
    """Select an appropriate torch.device."""
    if preferred is not None:
        return torch.device(preferred)
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


def build_model(cfg: DetectorModelConfig) -> nn.Module:
    """Create a torchvision detection model according to config."""
    if cfg.name not in MODEL_WEIGHTS:
        msg = f"Unsupported model name: {cfg.name}"
        raise ValueError(msg)

    builder = getattr(_DETECTION, cfg.name)
    if cfg.pretrained and cfg.checkpoint is None:
        return builder(weights=MODEL_WEIGHTS[cfg.name].DEFAULT)
    # Weights come from the checkpoint; skip the backbone download too
    return builder(weights=None, weights_backbone=None)


def coco_categories(model_name: str) -> list[str]:
    """Return the class names of a model's default COCO weights."""
    if model_name not in MODEL_WEIGHTS:
        msg = f"Unsupported model name: {model_name}"
        raise ValueError(msg)
    return list(MODEL_WEIGHTS[model_name].DEFAULT.meta["categories"])


def write_label_file(model_name: str, path: Path) -> int:
    """Write one category per line for use as a label catalog."""
    categories = coco_categories(model_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(categories) + "\n", encoding="utf-8")
    logger.info("Wrote %d labels to %s", len(categories), path)
    return len(categories)


class TorchvisionDetector(BaseDetector):
    """Run a torchvision detection model on a single BGR image."""

    def __init__(self, model_cfg: DetectorModelConfig) -> None:
        super().__init__()
        self.model_cfg = model_cfg
        self.device = select_device(model_cfg.device)
        self.model: nn.Module | None = None
        self.transforms = T.Compose(
            [
                T.ToImage(),
                T.ToDtype(torch.float32, scale=True),
            ]
        )

    def open(self) -> None:
        """Build the model, load any checkpoint and switch to eval mode."""
        try:
            model = build_model(self.model_cfg)
            if self.model_cfg.checkpoint is not None:
                ckpt = torch.load(self.model_cfg.checkpoint, map_location=self.device)
                state = ckpt.get("model_state", ckpt)
                model.load_state_dict(state)
                logger.info("Loaded checkpoint: %s", self.model_cfg.checkpoint)
        except (OSError, RuntimeError, ValueError) as e:
            msg = f"Failed to load model {self.model_cfg.name}: {e}"
            logger.exception(msg)
            raise ModelLoadError(msg, "MODEL_LOAD_FAILED") from e

        self.model = model.to(self.device)
        self.model.eval()
        logger.debug("Model %s ready on %s", self.model_cfg.name, self.device)

    def close(self) -> None:
        """Drop the model so its memory can be reclaimed."""
        self.model = None

    @torch.no_grad()
    def detect(self, image: np.ndarray) -> RawDetectionSet:
        """Return detections sorted by descending score."""
        if self.model is None:
            msg = "Detector used before it was opened"
            raise DetectionError(msg, "MODEL_NOT_LOADED")
        self._validate_frame(image)

        if image.ndim == 2:
            rgb = np.stack([image] * 3, axis=-1)
        else:
            rgb = np.ascontiguousarray(image[:, :, 2::-1])

        tensor = self.transforms(rgb).to(self.device)
        outputs = self.model([tensor])[0]
        scores = outputs["scores"].detach().cpu().numpy()
        boxes = outputs["boxes"].detach().cpu().numpy().reshape(-1, 4)
        labels = outputs["labels"].detach().cpu().numpy()

        order = np.argsort(-scores, kind="stable")
        height, width = image.shape[:2]
        x1, y1, x2, y2 = (boxes[order, i] for i in range(4))
        normalized = np.stack(
            [y1 / height, x1 / width, y2 / height, x2 / width], axis=1
        )

        logger.debug("Model returned %d raw detections", len(order))
        return RawDetectionSet(
            scores=scores[order],
            classes=labels[order].astype(np.float64),
            boxes=normalized,
        )
