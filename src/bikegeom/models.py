"""
Pydantic data models for bicycle geometry analysis.

Detected primitives, their classified forms and the result documents all
flow through these validated models. Models are frozen: every stage derives
new instances with ``model_copy`` instead of mutating its inputs.
"""

import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WheelComponent(str, Enum):
    """Role of a circle within one wheel."""
    TIRE = "tire"
    RIM = "rim"
    UNKNOWN = "unknown"


class FrameComponent(str, Enum):
    """Frame tube labels assigned to line segments."""
    SEAT_TUBE = "seat_tube"
    TOP_TUBE = "top_tube"
    DOWN_TUBE = "down_tube"
    HEAD_TUBE = "head_tube"
    FORK = "fork"
    SEAT_STAY_LEFT = "seat_stay_left"
    SEAT_STAY_RIGHT = "seat_stay_right"
    CHAIN_STAY_LEFT = "chain_stay_left"
    CHAIN_STAY_RIGHT = "chain_stay_right"
    SEATPOST = "seatpost"
    UNKNOWN = "unknown"


SEAT_STAYS = (FrameComponent.SEAT_STAY_LEFT, FrameComponent.SEAT_STAY_RIGHT)
CHAIN_STAYS = (FrameComponent.CHAIN_STAY_LEFT, FrameComponent.CHAIN_STAY_RIGHT)
MAIN_TRIANGLE = (FrameComponent.SEAT_TUBE, FrameComponent.TOP_TUBE, FrameComponent.DOWN_TUBE)


class Circle(BaseModel):
    """
    A circle hypothesis for a wheel boundary.

    ``circle_id`` is the index of the circle in the batch it was detected in;
    ``partner_id`` refers to the concentric partner by that index.
    """
    x: float
    y: float
    radius: float = Field(..., gt=0.0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    component: WheelComponent = WheelComponent.UNKNOWN
    circle_id: Optional[int] = None
    partner_id: Optional[int] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class WheelGroup(BaseModel):
    """One wheel: a tire/rim pair or a single unclassified circle."""
    members: List[Circle] = Field(..., min_length=1, max_length=2)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def representative(self):
        """The tire if present, otherwise the largest circle."""
        for circle in self.members:
            if circle.component == WheelComponent.TIRE:
                return circle
        return max(self.members, key=lambda c: c.radius)

    @property
    def is_concentric(self):
        return len(self.members) == 2


class WheelPairSelection(BaseModel):
    """
    Wheel groups chosen as the bicycle's wheels.

    Groups are ordered left to right: the first is the rear wheel and the
    second, when present, the front wheel.
    """
    groups: List[WheelGroup] = Field(default_factory=list, max_length=2)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def circles(self):
        """All circles of the selected groups."""
        return [c for group in self.groups for c in group.members]

    @property
    def is_complete(self):
        """True when both a rear and a front wheel are available."""
        return len(self.groups) == 2

    @property
    def rear(self):
        return self.groups[0].representative if self.groups else None

    @property
    def front(self):
        return self.groups[1].representative if self.is_complete else None


class LineSegment(BaseModel):
    """A line segment hypothesis for a frame tube."""
    x1: float
    y1: float
    x2: float
    y2: float
    length: float = Field(..., ge=0.0)
    angle: float  # degrees, atan2 convention
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    component: FrameComponent = FrameComponent.UNKNOWN
    geometry_score: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def midpoint(self):
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def endpoints(self):
        return ((self.x1, self.y1), (self.x2, self.y2))


class ImageMeta(BaseModel):
    """Metadata for an input image."""
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    source_path: str = ""

    model_config = ConfigDict(extra="forbid")

    @property
    def diagonal(self):
        return math.hypot(self.width, self.height)


class FrameAnalysis(BaseModel):
    """Result of one analysis call over an image's primitives."""
    classified_wheels: List[Circle] = Field(default_factory=list)
    classified_lines: List[LineSegment] = Field(default_factory=list)
    rear_wheel: Optional[Circle] = None
    front_wheel: Optional[Circle] = None
    used_fallback: bool = False

    model_config = ConfigDict(extra="forbid")


class GeometryMeasurements(BaseModel):
    """Pixel measurements derived from the selected wheels."""
    wheelbase_pixels: float = 0.0
    average_wheel_diameter_pixels: float = 0.0
    perspective_correction_factor: float = 1.0

    model_config = ConfigDict(extra="forbid")


class ConfidenceScores(BaseModel):
    """Overall confidence of the wheel and frame detections."""
    wheel_detection: float = 0.0
    frame_detection: float = 0.0

    model_config = ConfigDict(extra="forbid")


class DetectionResults(BaseModel):
    """Root document for one processed image."""
    image_meta: ImageMeta
    analysis: FrameAnalysis = Field(default_factory=FrameAnalysis)
    measurements: GeometryMeasurements = Field(default_factory=GeometryMeasurements)
    confidence_scores: ConfidenceScores = Field(default_factory=ConfidenceScores)

    model_config = ConfigDict(extra="forbid")

    @property
    def wheels_found(self):
        return sum(1 for w in (self.analysis.rear_wheel, self.analysis.front_wheel) if w is not None)

    @property
    def frame_tubes_found(self):
        return len(self.analysis.classified_lines)


# Geometry helpers

def distance(x1, y1, x2, y2):
    """Euclidean distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def fold_angle(angle):
    """
    Absolute value of ``angle`` modulo 180, keeping the dividend's sign
    before taking the magnitude. Result is in [0, 180).
    """
    return abs(math.fmod(angle, 180.0))


def angle_difference(a, b):
    """
    Wrap-aware difference between two undirected line angles in degrees.

    Returns min(|a - b|, 180 - |a - b|) with |a - b| reduced modulo 180,
    always in [0, 90].
    """
    diff = abs(a - b) % 180.0
    return min(diff, 180.0 - diff)


def line_from_points(x1, y1, x2, y2, confidence=1.0):
    """Build a LineSegment, deriving length and angle from its endpoints."""
    return LineSegment(
        x1=x1,
        y1=y1,
        x2=x2,
        y2=y2,
        length=distance(x1, y1, x2, y2),
        angle=math.degrees(math.atan2(y2 - y1, x2 - x1)),
        confidence=confidence,
    )
