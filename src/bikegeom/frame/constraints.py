"""
Frame constraint filtering.

Discards line segments that cannot plausibly be frame tubes, either
relative to the detected wheels or, when fewer than two wheels are
available, by length and angle alone.
"""

import math

from shapely.geometry import Point, box

from bikegeom.models import FrameComponent, fold_angle
from bikegeom.tracer import get_tracer, trace

MIN_FRAME_ANGLE = 10.0
MAX_FRAME_ANGLE = 170.0
MIN_FALLBACK_CONFIDENCE = 0.3
MAX_WHEELBASE_RATIO = 1.5


def min_component_length(image_width, image_height, config):
    """Shortest acceptable frame line in pixels."""
    return math.hypot(image_width, image_height) * config.frame_min_component_length


def passes_basic_geometry(line, min_length):
    """
    Length and angle check shared by both filters.

    Rejects short lines and lines within 10 degrees of horizontal in
    either direction (ground, kerbs).
    """
    folded = fold_angle(line.angle)
    return line.length >= min_length and MIN_FRAME_ANGLE < folded < MAX_FRAME_ANGLE


def bike_area(rear_wheel, front_wheel):
    """
    Expanded bounding box around both wheels.

    Spans from the rear wheel's left edge to the front wheel's right edge,
    and from 1.5 radii above the higher axle to half a radius below the
    lower one.
    """
    max_radius = max(rear_wheel.radius, front_wheel.radius)
    return box(
        rear_wheel.x - rear_wheel.radius,
        min(rear_wheel.y, front_wheel.y) - max_radius * 1.5,
        front_wheel.x + front_wheel.radius,
        max(rear_wheel.y, front_wheel.y) + max_radius * 0.5,
    )


def is_line_in_bike_area(line, area):
    """True when the line's midpoint lies inside or on the area boundary."""
    return area.covers(Point(*line.midpoint))


@trace(label="filter_by_frame_constraints")
def filter_by_frame_constraints(lines, rear_wheel, front_wheel, image_width, image_height, config):
    """
    Keep lines that could be frame tubes given the wheel geometry.

    Applying the filter to its own output returns the same lines.
    """
    tracer = get_tracer()

    min_length = min_component_length(image_width, image_height, config)
    max_length = abs(front_wheel.x - rear_wheel.x) * MAX_WHEELBASE_RATIO
    area = bike_area(rear_wheel, front_wheel)

    candidates = [
        line for line in lines
        if passes_basic_geometry(line, min_length)
        and is_line_in_bike_area(line, area)
        and line.length <= max_length
    ]

    tracer.event(f"Frame constraints kept {len(candidates)} of {len(lines)} lines",
                 min_length=min_length, max_length=max_length)
    return candidates


@trace(label="filter_basic_geometry")
def filter_basic_geometry(lines, image_width, image_height, config):
    """
    Degraded filter used without a wheel pair.

    Keeps long, non-axis-aligned, reasonably confident lines, sorted by
    confidence descending. Every kept line is labelled UNKNOWN with no
    geometry score.
    """
    min_length = min_component_length(image_width, image_height, config)

    kept = [
        line.model_copy(update={"component": FrameComponent.UNKNOWN, "geometry_score": 0.0})
        for line in lines
        if passes_basic_geometry(line, min_length) and line.confidence > MIN_FALLBACK_CONFIDENCE
    ]
    kept.sort(key=lambda line: line.confidence, reverse=True)

    get_tracer().event(f"Basic geometry kept {len(kept)} of {len(lines)} lines")
    return kept
