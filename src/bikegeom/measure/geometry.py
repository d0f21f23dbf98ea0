"""
Geometry measurements and overall detection confidence.
"""

import math

from bikegeom.models import ConfidenceScores, GeometryMeasurements, angle_difference, distance
from bikegeom.tracer import get_tracer, trace

TRIANGLE_MIN_ANGLE_SPREAD = 15.0
ANGLE_BUCKET = 30


@trace(label="calculate_measurements")
def calculate_measurements(rear_wheel, front_wheel):
    """
    Measure wheelbase, average wheel diameter and perspective correction.

    Either wheel may be None; missing measurements fall back to neutral
    values.
    """
    tracer = get_tracer()
    wheels = [w for w in (rear_wheel, front_wheel) if w is not None]

    if len(wheels) < 2:
        tracer.warn("Cannot calculate wheelbase with fewer than 2 wheels")
        wheelbase = 0.0
        perspective = 1.0
    else:
        wheelbase = distance(rear_wheel.x, rear_wheel.y, front_wheel.x, front_wheel.y)
        perspective = perspective_correction_factor(rear_wheel, front_wheel)

    if wheels:
        avg_diameter = sum(w.radius * 2 for w in wheels) / len(wheels)
    else:
        tracer.warn("Cannot calculate wheel diameter with no wheels detected")
        avg_diameter = 0.0

    tracer.event(f"Wheelbase: {wheelbase:.1f}px, average wheel diameter: {avg_diameter:.1f}px, "
                 f"perspective factor: {perspective:.3f}")

    return GeometryMeasurements(
        wheelbase_pixels=wheelbase,
        average_wheel_diameter_pixels=avg_diameter,
        perspective_correction_factor=perspective,
    )


def perspective_correction_factor(rear_wheel, front_wheel):
    """cos of the tilt of the axle-to-axle line; 1.0 for level wheels."""
    dx = abs(front_wheel.x - rear_wheel.x)
    if dx == 0:
        return 1.0
    dy = abs(front_wheel.y - rear_wheel.y)
    return math.cos(math.atan(dy / dx))


@trace(label="calculate_confidence_scores")
def calculate_confidence_scores(selection, lines, image_width, image_height):
    scores = ConfidenceScores(
        wheel_detection=wheel_detection_confidence(selection),
        frame_detection=frame_detection_confidence(lines, image_width, image_height),
    )
    get_tracer().event(f"Confidence scores - wheels: {scores.wheel_detection:.2f}, "
                       f"frame: {scores.frame_detection:.2f}")
    return scores


def wheel_detection_confidence(selection):
    wheels = [w for w in (selection.rear, selection.front) if w is not None]

    if not wheels:
        return 0.0
    if len(wheels) == 1:
        return 0.5

    avg_confidence = sum(w.confidence for w in wheels) / 2
    return (avg_confidence + radius_consistency(wheels)) / 2


def radius_consistency(wheels):
    """1 minus the largest relative deviation from the mean radius."""
    radii = [w.radius for w in wheels]
    avg_radius = sum(radii) / len(radii)
    max_deviation = max(abs(r - avg_radius) for r in radii)
    return max(1.0 - max_deviation / avg_radius, 0.0)


def frame_detection_confidence(lines, image_width, image_height):
    if not lines:
        return 0.0

    avg_confidence = sum(line.confidence for line in lines) / len(lines)

    diagonal = math.hypot(image_width, image_height)
    avg_length = sum(line.length for line in lines) / len(lines)
    length_score = min(avg_length / (diagonal * 0.3), 1.0)

    return (avg_confidence + length_score + angle_variety_score(lines)) / 3


def angle_variety_score(lines):
    """Share of distinct 30 degree angle buckets, saturating at three."""
    if len(lines) < 2:
        return 0.5
    buckets = {int(line.angle % 180) // ANGLE_BUCKET for line in lines}
    return min(len(buckets) / 3.0, 1.0)


def identify_frame_triangle(lines):
    """
    Pick the three longest lines as the main frame triangle candidates.

    Warns when they are all near-parallel; they are returned regardless.
    """
    tracer = get_tracer()

    if len(lines) < 3:
        tracer.warn(f"Not enough frame lines to identify triangle (need at least 3, have {len(lines)})")
        return list(lines)

    top_three = sorted(lines, key=lambda line: line.length, reverse=True)[:3]

    spreads = [
        angle_difference(a.angle, b.angle)
        for i, a in enumerate(top_three)
        for b in top_three[i + 1:]
    ]
    if any(spread > TRIANGLE_MIN_ANGLE_SPREAD for spread in spreads):
        tracer.debug("Triangle validation passed: varied angles found")
    else:
        tracer.warn("Triangle validation failed: all lines appear parallel")

    return top_three
