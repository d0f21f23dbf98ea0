"""Pytest fixtures for bikegeom tests."""

import json
import os
import tempfile

import cv2
import numpy as np
import pytest

IMAGE_WIDTH = 1000
IMAGE_HEIGHT = 600


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from bikegeom.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def geometry_config():
    """Default reasoning thresholds."""
    from bikegeom.config import GeometryConfig
    return GeometryConfig()


@pytest.fixture
def image_size():
    return IMAGE_WIDTH, IMAGE_HEIGHT


@pytest.fixture
def wheel_pair():
    """Rear and front wheel, level, 500px apart."""
    from bikegeom.models import Circle
    rear = Circle(x=200, y=400, radius=150, confidence=0.9)
    front = Circle(x=700, y=400, radius=150, confidence=0.9)
    return rear, front


@pytest.fixture
def bike_lines():
    """
    Six frame lines of a bicycle on the standard wheel pair, keyed by the
    component each should be classified as.
    """
    from bikegeom.models import line_from_points
    return {
        "seat_tube": line_from_points(350, 200, 350, 400),
        "top_tube": line_from_points(350, 200, 600, 250),
        "down_tube": line_from_points(350, 460, 600, 270),
        "chain_stay_left": line_from_points(200, 400, 350, 460),
        "seat_stay_left": line_from_points(260, 390, 170, 240),
        "fork": line_from_points(720, 290, 820, 400),
    }


@pytest.fixture
def noise_lines():
    """Lines that no frame filter should keep."""
    from bikegeom.models import line_from_points
    return [
        line_from_points(100, 500, 800, 505),  # ground
        line_from_points(400, 300, 420, 320),  # too short
        line_from_points(400, 50, 500, 150),  # above the wheels
    ]


@pytest.fixture
def synthetic_bike_image():
    """Draw a simple bicycle: two tire/rim wheels and a frame."""
    img = np.ones((800, 1200, 3), dtype=np.uint8) * 255

    for cx in (300, 900):
        cv2.circle(img, (cx, 550), 180, (0, 0, 0), 10)
        cv2.circle(img, (cx, 550), 140, (60, 60, 60), 4)

    cv2.line(img, (520, 300), (520, 560), (0, 0, 0), 6)
    cv2.line(img, (520, 300), (820, 330), (0, 0, 0), 6)
    cv2.line(img, (520, 560), (820, 330), (0, 0, 0), 6)
    cv2.line(img, (300, 550), (520, 560), (0, 0, 0), 6)
    cv2.line(img, (300, 550), (520, 300), (0, 0, 0), 6)
    cv2.line(img, (820, 330), (900, 550), (0, 0, 0), 6)
    return img


@pytest.fixture
def synthetic_input_file(temp_dir, synthetic_bike_image):
    """Write the synthetic bicycle to disk for integration tests."""
    path = os.path.join(temp_dir, "bike.png")
    cv2.imwrite(path, cv2.cvtColor(synthetic_bike_image, cv2.COLOR_RGB2BGR))
    return path


@pytest.fixture
def primitives_file(temp_dir, wheel_pair, bike_lines):
    """Primitives JSON for the standard wheel pair and frame lines."""
    rear, front = wheel_pair
    data = {
        "image": {"width": IMAGE_WIDTH, "height": IMAGE_HEIGHT},
        "circles": [
            {"x": c.x, "y": c.y, "radius": c.radius, "confidence": c.confidence}
            for c in (front, rear)
        ],
        "lines": [
            {"x1": l.x1, "y1": l.y1, "x2": l.x2, "y2": l.y2}
            for l in bike_lines.values()
        ],
    }
    path = os.path.join(temp_dir, "primitives.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path
