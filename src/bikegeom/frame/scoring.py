"""
Geometry scoring for classified frame components.

Each classified line earns a score in [0, 1] from its label, how well its
length and angle agree with structurally related tubes, and whether it
attaches to the axle it should attach to.
"""

import math

from bikegeom.models import (
    CHAIN_STAYS, MAIN_TRIANGLE, SEAT_STAYS, FrameComponent, angle_difference, distance,
)
from bikegeom.tracer import get_tracer, trace

BASE_SCORES = {
    **{tube: 0.3 for tube in MAIN_TRIANGLE},
    **{stay: 0.25 for stay in SEAT_STAYS + CHAIN_STAYS},
    FrameComponent.HEAD_TUBE: 0.2,
    FrameComponent.FORK: 0.15,
}

LENGTH_MATCH_BONUS = 0.2
ANGLE_MATCH_BONUS = 0.15
AXLE_CONNECTION_BONUS = 0.1
POSITION_BONUS = 0.05
CONNECTION_RADIUS_FACTOR = 1.2

# Tubes whose lengths should be comparable
LENGTH_RELATED = {
    **{stay: (FrameComponent.TOP_TUBE, FrameComponent.DOWN_TUBE) for stay in SEAT_STAYS},
    FrameComponent.TOP_TUBE: SEAT_STAYS,
    FrameComponent.DOWN_TUBE: SEAT_STAYS,
}

# Tubes that should run roughly parallel
ANGLE_RELATED = {
    **{stay: (FrameComponent.DOWN_TUBE,) for stay in SEAT_STAYS},
    **{stay: (FrameComponent.TOP_TUBE,) for stay in CHAIN_STAYS},
    FrameComponent.SEAT_TUBE: (FrameComponent.HEAD_TUBE, FrameComponent.FORK),
}


def length_matching_score(line, lines, config):
    """Bonus when the line's length is close to the mean of related tubes."""
    related = LENGTH_RELATED.get(line.component, ())
    lengths = [other.length for other in lines if other.component in related]
    if not lengths:
        return 0.0

    avg_length = sum(lengths) / len(lengths)
    if avg_length == 0:
        return 0.0

    relative_diff = abs(line.length - avg_length) / avg_length
    return LENGTH_MATCH_BONUS if relative_diff <= config.frame_component_length_threshold else 0.0


def angle_matching_score(line, lines, config):
    """Bonus when any related tube runs within the angle threshold."""
    related = ANGLE_RELATED.get(line.component, ())
    threshold = math.degrees(config.frame_component_angle_threshold)

    for other in lines:
        if other.component in related and angle_difference(line.angle, other.angle) <= threshold:
            return ANGLE_MATCH_BONUS
    return 0.0


def connection_score(line, rear_wheel, front_wheel):
    """
    Bonus for stays reaching the rear axle and forks reaching the front
    axle. Every other line gets a small flat bonus.
    """
    reach = max(rear_wheel.radius, front_wheel.radius) * CONNECTION_RADIUS_FACTOR

    if line.component in SEAT_STAYS or line.component in CHAIN_STAYS:
        axle = rear_wheel
    elif line.component == FrameComponent.FORK:
        axle = front_wheel
    else:
        return POSITION_BONUS

    near = any(distance(x, y, axle.x, axle.y) <= reach for x, y in line.endpoints)
    return AXLE_CONNECTION_BONUS if near else 0.0


def geometry_score(line, lines, rear_wheel, front_wheel, config):
    score = BASE_SCORES.get(line.component, 0.0)
    score += length_matching_score(line, lines, config)
    score += angle_matching_score(line, lines, config)
    score += connection_score(line, rear_wheel, front_wheel)
    return min(score, 1.0)


@trace(label="score_frame_components")
def score_frame_components(lines, rear_wheel, front_wheel, config):
    """
    Attach a geometry score to every classified line.

    Returns new lines sorted by confidence + geometry score, descending.
    """
    scored = [
        line.model_copy(update={
            "geometry_score": geometry_score(line, lines, rear_wheel, front_wheel, config),
        })
        for line in lines
    ]
    scored.sort(key=lambda line: line.confidence + line.geometry_score, reverse=True)

    if scored:
        best = scored[0]
        get_tracer().event(f"Scored {len(scored)} lines, best {best.component.value} "
                           f"geometry_score={best.geometry_score:.2f}")
    return scored
