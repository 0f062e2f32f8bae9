"""
Data package for the detection visualization engine.
Provides the detection result contract and the reference training series.
"""

from .models import (
    Point,
    BoundingBox,
    Polygon,
    BoxGeometry,
    PolygonGeometry,
    Geometry,
    MetricPoint,
    InferenceStep,
    TechnicalDetails,
    VisualArtifacts,
    DetectionResult,
    load_detection
)
from .history import (
    TrainingMetricPoint,
    ModelMetrics,
    REFERENCE_TRAINING_HISTORY,
    REFERENCE_MODEL_METRICS,
    load_training_history
)

__all__ = [
    'Point',
    'BoundingBox',
    'Polygon',
    'BoxGeometry',
    'PolygonGeometry',
    'Geometry',
    'MetricPoint',
    'InferenceStep',
    'TechnicalDetails',
    'VisualArtifacts',
    'DetectionResult',
    'load_detection',
    'TrainingMetricPoint',
    'ModelMetrics',
    'REFERENCE_TRAINING_HISTORY',
    'REFERENCE_MODEL_METRICS',
    'load_training_history'
]
