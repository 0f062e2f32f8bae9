"""
Data model for detection results and the visual artifacts derived from them.

All geometry is expressed in percentage space (0-100 of the image width and
height). Two geometry representations exist depending on the deployment of
the inference service; they are modelled as a tagged variant so that a
single rasterization entry point can dispatch on them.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..utils import DetectionParseError, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Point:
    """Vertex in percentage space."""
    x: float
    y: float

    @property
    def in_range(self) -> bool:
        return 0.0 <= self.x <= 100.0 and 0.0 <= self.y <= 100.0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in percentage space."""
    x: float
    y: float
    w: float
    h: float

    @property
    def is_degenerate(self) -> bool:
        return self.w <= 0 or self.h <= 0


@dataclass(frozen=True)
class Polygon:
    """Closed region visited in input order."""
    points: List[Point]

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_degenerate(self) -> bool:
        return len(self.points) < 3


@dataclass(frozen=True)
class BoxGeometry:
    """Flat list of bounding boxes (the ``coordinates`` variant)."""
    boxes: List[BoundingBox] = field(default_factory=list)
    kind: str = field(default="boxes", init=False)

    @property
    def predicted(self) -> List[BoundingBox]:
        return list(self.boxes)

    @property
    def has_ground_truth(self) -> bool:
        return False


@dataclass(frozen=True)
class PolygonGeometry:
    """Ground-truth, predicted and land polygon sets."""
    ground_truth: List[Polygon] = field(default_factory=list)
    predicted_polygons: List[Polygon] = field(default_factory=list)
    land: List[Polygon] = field(default_factory=list)
    kind: str = field(default="polygons", init=False)

    @property
    def predicted(self) -> List[Polygon]:
        return list(self.predicted_polygons)

    @property
    def has_ground_truth(self) -> bool:
        return True


Geometry = Union[BoxGeometry, PolygonGeometry]


@dataclass(frozen=True)
class MetricPoint:
    """One axis of the radar signature."""
    subject: str
    value: float
    full_mark: float


@dataclass(frozen=True)
class InferenceStep:
    step: float
    probability: float


@dataclass(frozen=True)
class TechnicalDetails:
    spectral_signature: str = ""
    denoising_status: str = ""
    segmentation_fidelity: float = 0.0


@dataclass(frozen=True)
class VisualArtifacts:
    """
    Raster artifacts derived from one detection result.

    Every raster field is a PNG data URI, or the empty string when the
    artifact could not be produced.
    """
    input: str
    ground_truth_mask: str
    predicted_mask: str
    overlay: str
    annotated_overlay: str = ""

    def as_dict(self) -> Dict[str, str]:
        return {
            "input": self.input,
            "gtMask": self.ground_truth_mask,
            "predictedMask": self.predicted_mask,
            "overlay": self.overlay,
            "annotatedOverlay": self.annotated_overlay,
        }


@dataclass(frozen=True)
class DetectionResult:
    """Unit of work handed over by the inference collaborator."""
    spill_found: bool
    confidence: float
    iou: float
    area_estimate: str
    geometry: Geometry
    description: str = ""
    environmental_impact: str = ""
    technical_details: TechnicalDetails = field(default_factory=TechnicalDetails)
    radar_metrics: List[MetricPoint] = field(default_factory=list)
    inference_path: List[InferenceStep] = field(default_factory=list)
    visuals: Optional[VisualArtifacts] = None

    @property
    def is_critical(self) -> bool:
        return self.environmental_impact.strip().lower() == "critical"

    def with_visuals(self, visuals: VisualArtifacts) -> "DetectionResult":
        """Return a copy owning ``visuals``; the original is left untouched."""
        return DetectionResult(
            spill_found=self.spill_found,
            confidence=self.confidence,
            iou=self.iou,
            area_estimate=self.area_estimate,
            geometry=self.geometry,
            description=self.description,
            environmental_impact=self.environmental_impact,
            technical_details=self.technical_details,
            radar_metrics=self.radar_metrics,
            inference_path=self.inference_path,
            visuals=visuals,
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DetectionResult":
        """
        Build a result from the camelCase JSON contract of the inference service.

        Args:
            payload: Decoded JSON object

        Returns:
            Parsed detection result

        Raises:
            DetectionParseError: If required fields are missing or mistyped
        """
        if not isinstance(payload, dict):
            raise DetectionParseError(
                "Detection payload must be a JSON object",
                context={"type": type(payload).__name__}
            )

        details = payload.get("technicalDetails") or {}
        if not isinstance(details, dict):
            raise DetectionParseError(
                "Field 'technicalDetails' must be an object",
                context={"field": "technicalDetails", "type": type(details).__name__}
            )

        try:
            return cls(
                spill_found=_require_bool(payload, "spillFound"),
                confidence=_require_number(payload, "confidence"),
                iou=_require_number(payload, "iou"),
                area_estimate=str(payload.get("areaEstimate", "")),
                geometry=_parse_geometry(payload),
                description=str(payload.get("description", "")),
                environmental_impact=str(payload.get("environmentalImpact", "")),
                technical_details=TechnicalDetails(
                    spectral_signature=str(details.get("spectralSignature", "")),
                    denoising_status=str(details.get("denoisingStatus", "")),
                    segmentation_fidelity=float(details.get("segmentationFidelity", 0.0)),
                ),
                radar_metrics=[
                    MetricPoint(
                        subject=str(item["subject"]),
                        value=float(item["value"]),
                        full_mark=float(item["fullMark"]),
                    )
                    for item in payload.get("radarMetrics") or []
                ],
                inference_path=[
                    InferenceStep(step=float(item["step"]), probability=float(item["probability"]))
                    for item in payload.get("inferencePath") or []
                ],
            )
        except DetectionParseError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise DetectionParseError(
                f"Malformed detection payload: {e}",
                context={"original_exception": type(e).__name__}
            ) from e

    @classmethod
    def from_json(cls, text: str) -> "DetectionResult":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise DetectionParseError(f"Detection payload is not valid JSON: {e}") from e
        return cls.from_dict(payload)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase contract."""
        payload: Dict[str, Any] = {
            "spillFound": self.spill_found,
            "confidence": self.confidence,
            "iou": self.iou,
            "areaEstimate": self.area_estimate,
            "description": self.description,
            "environmentalImpact": self.environmental_impact,
            "technicalDetails": {
                "spectralSignature": self.technical_details.spectral_signature,
                "denoisingStatus": self.technical_details.denoising_status,
                "segmentationFidelity": self.technical_details.segmentation_fidelity,
            },
            "radarMetrics": [
                {"subject": m.subject, "value": m.value, "fullMark": m.full_mark}
                for m in self.radar_metrics
            ],
            "inferencePath": [
                {"step": s.step, "probability": s.probability} for s in self.inference_path
            ],
        }
        if isinstance(self.geometry, PolygonGeometry):
            payload["groundTruthPolygons"] = _dump_polygons(self.geometry.ground_truth)
            payload["predictedPolygons"] = _dump_polygons(self.geometry.predicted_polygons)
            payload["landPolygons"] = _dump_polygons(self.geometry.land)
        else:
            payload["coordinates"] = [
                {"x": b.x, "y": b.y, "w": b.w, "h": b.h} for b in self.geometry.boxes
            ]
        if self.visuals is not None:
            payload["visuals"] = self.visuals.as_dict()
        return payload


def load_detection(path: Union[str, Path]) -> DetectionResult:
    """Read a detection result from a JSON file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DetectionParseError(f"Cannot read detection file: {e}", context={"path": str(path)}) from e
    result = DetectionResult.from_json(text)
    logger.info(f"Loaded detection result from {path} ({result.geometry.kind} geometry)")
    return result


POLYGON_KEYS = ("groundTruthPolygons", "predictedPolygons", "landPolygons")


def _parse_geometry(payload: Dict[str, Any]) -> Geometry:
    if any(key in payload for key in POLYGON_KEYS):
        return PolygonGeometry(
            ground_truth=_parse_polygons(payload.get("groundTruthPolygons")),
            predicted_polygons=_parse_polygons(payload.get("predictedPolygons")),
            land=_parse_polygons(payload.get("landPolygons")),
        )
    if "coordinates" not in payload:
        logger.warning("Detection payload carries no geometry; treating it as empty")
    return BoxGeometry(boxes=[
        BoundingBox(x=float(c["x"]), y=float(c["y"]), w=float(c["w"]), h=float(c["h"]))
        for c in payload.get("coordinates") or []
    ])


def _parse_polygons(raw: Optional[List[Any]]) -> List[Polygon]:
    polygons = []
    for item in raw or []:
        # Accept both a bare vertex list and a {"points": [...]} wrapper
        vertices = item.get("points", []) if isinstance(item, dict) else item
        polygons.append(Polygon(points=[Point(x=float(v["x"]), y=float(v["y"])) for v in vertices]))
    return polygons


def _dump_polygons(polygons: List[Polygon]) -> List[List[Dict[str, float]]]:
    return [[{"x": p.x, "y": p.y} for p in polygon.points] for polygon in polygons]


def _require_bool(payload: Dict[str, Any], key: str) -> bool:
    if key not in payload:
        raise DetectionParseError(f"Missing required field '{key}'", context={"field": key})
    value = payload[key]
    if not isinstance(value, bool):
        raise DetectionParseError(f"Field '{key}' must be a boolean", context={"field": key, "value": value})
    return value


def _require_number(payload: Dict[str, Any], key: str) -> float:
    if key not in payload:
        raise DetectionParseError(f"Missing required field '{key}'", context={"field": key})
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DetectionParseError(f"Field '{key}' must be a number", context={"field": key, "value": value})
    return float(value)
