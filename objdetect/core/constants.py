"""System-wide constants for detection rendering."""

from enum import Enum

# Detections scoring at or below this are dropped
DEFAULT_PROBABILITY_THRESHOLD = 0.4

# Files looked up inside a model directory
LABELS_FILENAME = "coco_labels.txt"
CHECKPOINT_FILENAME = "frozen_inference_graph.pt"

DEFAULT_OUTPUT_PATH = "output.jpg"
STDIO_PATH = "-"

# Outline colour in BGR
BOX_COLOR = (0, 0, 255)


class OutputMode(str, Enum):
    """Rendering target for a detection run."""

    IMAGE = "image"
    JSON = "json"


# Supported torchvision detection models
SUPPORTED_MODELS = {
    "ssd300_vgg16": "SSD300 with VGG16 backbone",
    "ssdlite320_mobilenet_v3_large": "SSDlite320 with MobileNetV3-Large backbone",
    "fasterrcnn_resnet50_fpn": "Faster R-CNN with ResNet-50-FPN backbone",
}
DEFAULT_MODEL = "ssdlite320_mobilenet_v3_large"
