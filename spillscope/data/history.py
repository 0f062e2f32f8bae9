"""
Historical training metrics used as the reference series of the charts.

The series is fixed: it documents how the segmentation model converged and is
not derived from any detection result.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

import yaml

from ..utils import DetectionParseError, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TrainingMetricPoint:
    """Validation snapshot at one epoch. ``val_accuracy`` is a percentage."""
    epoch: int
    train_loss: float
    val_iou: float
    val_accuracy: float


@dataclass(frozen=True)
class ModelMetrics:
    best_iou: float
    final_accuracy: float
    train_loss: float
    patience: int
    img_size: int


REFERENCE_TRAINING_HISTORY: List[TrainingMetricPoint] = [
    TrainingMetricPoint(epoch=1, train_loss=0.85, val_iou=0.42, val_accuracy=78.5),
    TrainingMetricPoint(epoch=5, train_loss=0.62, val_iou=0.58, val_accuracy=84.2),
    TrainingMetricPoint(epoch=10, train_loss=0.45, val_iou=0.69, val_accuracy=89.1),
    TrainingMetricPoint(epoch=15, train_loss=0.38, val_iou=0.74, val_accuracy=92.5),
    TrainingMetricPoint(epoch=20, train_loss=0.31, val_iou=0.81, val_accuracy=94.8),
    TrainingMetricPoint(epoch=25, train_loss=0.28, val_iou=0.84, val_accuracy=96.2),
    TrainingMetricPoint(epoch=30, train_loss=0.25, val_iou=0.88, val_accuracy=97.4),
]

REFERENCE_MODEL_METRICS = ModelMetrics(
    best_iou=0.884,
    final_accuracy=97.42,
    train_loss=0.245,
    patience=7,
    img_size=128,
)


def load_training_history(path: Union[str, Path]) -> List[TrainingMetricPoint]:
    """
    Load an alternative reference series from a YAML or JSON file.

    The file holds a list of ``{epoch, trainLoss, valIoU, valAccuracy}``
    records, either at top level or under a ``history`` key.

    Args:
        path: File to read

    Returns:
        Series sorted by epoch
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DetectionParseError(f"Cannot read training history: {e}", context={"path": str(path)}) from e

    if isinstance(raw, dict):
        raw = raw.get("history", [])
    if not isinstance(raw, list) or not raw:
        raise DetectionParseError("Training history must be a non-empty list", context={"path": str(path)})

    try:
        series = [
            TrainingMetricPoint(
                epoch=int(item["epoch"]),
                train_loss=float(item["trainLoss"]),
                val_iou=float(item["valIoU"]),
                val_accuracy=float(item["valAccuracy"]),
            )
            for item in raw
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise DetectionParseError(f"Malformed training history entry: {e}", context={"path": str(path)}) from e

    logger.info(f"Loaded {len(series)} training history points from {path}")
    return sorted(series, key=lambda point: point.epoch)
