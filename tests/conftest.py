from __future__ import annotations

import base64
import json
from pathlib import Path

import cv2
import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from spillscope.utils import ConfigManager, RenderStyle  # noqa: E402


def make_image_uri(width: int = 200, height: int = 200, value: int = 128) -> str:
    image = np.full((height, width, 3), value, dtype=np.uint8)
    ok, encoded = cv2.imencode(".png", image)
    assert ok
    return "data:image/png;base64," + base64.b64encode(encoded.tobytes()).decode("ascii")


def decode_uri(data_uri: str) -> np.ndarray:
    payload = data_uri.split(",", 1)[1]
    buffer = np.frombuffer(base64.b64decode(payload), dtype=np.uint8)
    return cv2.imdecode(buffer, cv2.IMREAD_COLOR)


@pytest.fixture(autouse=True)
def _fresh_config():
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def style() -> RenderStyle:
    return RenderStyle()


@pytest.fixture
def image_uri() -> str:
    return make_image_uri()


@pytest.fixture
def box_payload() -> dict:
    return {
        "spillFound": True,
        "confidence": 0.93,
        "iou": 0.81,
        "areaEstimate": "4.2 km²",
        "description": "Dark elongated slick south of the platform",
        "environmentalImpact": "Critical",
        "technicalDetails": {
            "spectralSignature": "Low backscatter",
            "denoisingStatus": "Lee filter applied",
            "segmentationFidelity": 0.88,
        },
        "radarMetrics": [
            {"subject": "Backscatter", "value": 80, "fullMark": 100},
            {"subject": "Texture", "value": 60, "fullMark": 100},
            {"subject": "Shape", "value": 90, "fullMark": 100},
        ],
        "inferencePath": [
            {"step": 1, "probability": 0.2},
            {"step": 2, "probability": 0.6},
            {"step": 3, "probability": 0.93},
        ],
        "coordinates": [{"x": 10, "y": 10, "w": 20, "h": 20}],
    }


@pytest.fixture
def clear_payload() -> dict:
    return {
        "spillFound": False,
        "confidence": 0.12,
        "iou": 0.0,
        "areaEstimate": "N/A",
        "environmentalImpact": "None",
        "groundTruthPolygons": [],
        "predictedPolygons": [],
        "landPolygons": [],
    }


@pytest.fixture
def detection_file(tmp_path: Path, box_payload: dict) -> Path:
    path = tmp_path / "detection.json"
    path.write_text(json.dumps(box_payload), encoding="utf-8")
    return path


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    path = tmp_path / "scene.png"
    cv2.imwrite(str(path), np.full((120, 160, 3), 90, dtype=np.uint8))
    return path
