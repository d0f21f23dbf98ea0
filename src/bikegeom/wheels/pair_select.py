"""
Front/rear wheel pair selection.

Chooses, among the wheel groups produced by concentric pairing, the two
groups that best represent the bicycle's wheels.
"""

from bikegeom.models import WheelPairSelection, distance
from bikegeom.tracer import get_tracer, trace


@trace(label="select_wheel_pair")
def select_wheel_pair(groups, image_width):
    """
    Select the rear and front wheel groups.

    - no groups: empty selection
    - one group: returned alone; callers must treat it as insufficient
    - two groups: plausibility is checked and logged, never enforced
    - more: the best-scoring unordered pair wins, falling back to the
      first two groups when no pair scores above zero

    The selected groups are ordered left to right (rear, front).
    """
    tracer = get_tracer()

    if not groups:
        tracer.warn("No wheel groups detected")
        return WheelPairSelection()

    if len(groups) == 1:
        tracer.warn("Only one wheel group detected, expected two wheels")
        return WheelPairSelection(groups=list(groups))

    if len(groups) == 2:
        tracer.event("Exactly two wheel groups detected, validating as wheel pair")
        validate_wheel_pair(groups[0], groups[1], image_width)
        chosen = list(groups)
    else:
        tracer.event(f"Multiple wheel groups detected ({len(groups)}), finding best wheel pair")
        chosen = find_best_wheel_pair(groups, image_width)

    chosen.sort(key=lambda g: g.representative.x)
    return WheelPairSelection(groups=chosen)


def validate_wheel_pair(group1, group2, image_width):
    """
    Check that two wheel groups form a plausible wheel pair.

    Problems are reported as warnings. Returns True when both checks pass.
    """
    tracer = get_tracer()

    circle1 = group1.representative
    circle2 = group2.representative

    center_distance = distance(circle1.x, circle1.y, circle2.x, circle2.y)
    avg_radius = (circle1.radius + circle2.radius) / 2
    plausible = True

    vertical_difference = abs(circle1.y - circle2.y)
    if vertical_difference > avg_radius * 0.5:
        tracer.warn(f"Wheels not at similar vertical level (diff: {vertical_difference:.1f})")
        plausible = False

    min_wheelbase = image_width * 0.3
    max_wheelbase = image_width * 0.8
    if center_distance < min_wheelbase or center_distance > max_wheelbase:
        tracer.warn(
            f"Wheelbase distance ({center_distance:.1f}) outside expected range "
            f"({min_wheelbase:.1f}-{max_wheelbase:.1f})"
        )
        plausible = False

    return plausible


def find_best_wheel_pair(groups, image_width):
    """Exhaustive pairwise search; first pair wins ties."""
    best_pair = None
    best_score = 0.0

    for i in range(len(groups)):
        for j in range(i + 1, len(groups)):
            score = wheel_pair_score(groups[i].representative, groups[j].representative, image_width)
            if score > best_score:
                best_score = score
                best_pair = [groups[i], groups[j]]

    if best_pair is None:
        get_tracer().warn("No wheel pair scored above zero, using the first two groups")
        return list(groups[:2])

    get_tracer().event(f"Best wheel pair score={best_score:.3f}")
    return best_pair


def wheel_pair_score(circle1, circle2, image_width):
    """
    Score how likely two circles are a bicycle's two wheels.

    Favours confident, equally sized, level wheels about half the image
    width apart.
    """
    center_distance = distance(circle1.x, circle1.y, circle2.x, circle2.y)
    avg_radius = (circle1.radius + circle2.radius) / 2

    score = (circle1.confidence + circle2.confidence) / 2
    score *= 1.0 - abs(circle1.radius - circle2.radius) / avg_radius
    score *= 1.0 - abs(circle1.y - circle2.y) / avg_radius

    expected_wheelbase = image_width * 0.5
    wheelbase_score = 1.0 - abs(center_distance - expected_wheelbase) / expected_wheelbase
    score *= max(wheelbase_score, 0.1)

    return score
