"""
Concentric circle pairing for wheel detection.

Groups raw circle hypotheses into wheels. Two circles sharing a center with
a meaningfully different radius are read as the tire (outer) and rim
(inner) of one wheel; circles without a partner form a wheel on their own.
"""

import networkx as nx

from bikegeom.models import Circle, WheelComponent, WheelGroup, distance
from bikegeom.tracer import get_tracer, trace

MIN_CONCENTRIC_SCORE = 0.7


@trace(label="pair_concentric_circles")
def pair_concentric_circles(circles, image_height, config):
    """
    Pair concentric circles into wheel groups.

    Circles are visited in descending confidence order. Each unprocessed
    circle takes the best-scoring unprocessed partner found later in that
    order; the match is greedy, not a global assignment.

    Identity is by position in ``circles``: the returned circles carry that
    index as ``circle_id`` and their partner's index as ``partner_id``.

    Returns a list of WheelGroup sorted by representative confidence,
    descending.
    """
    tracer = get_tracer()

    if not circles:
        tracer.event("No circles to pair")
        return []

    # Stable sort keeps input order among equal confidences
    order = sorted(range(len(circles)), key=lambda i: circles[i].confidence, reverse=True)

    partner_graph = nx.Graph()
    partner_graph.add_nodes_from(order)
    processed = set()

    for pos, i in enumerate(order):
        if i in processed:
            continue

        best_j = None
        best_score = 0.0

        for j in order[pos + 1:]:
            if j in processed:
                continue

            score = concentric_score(circles[i], circles[j], image_height, config)
            if score > best_score and score > MIN_CONCENTRIC_SCORE:
                best_score = score
                best_j = j

        processed.add(i)
        if best_j is not None:
            processed.add(best_j)
            partner_graph.add_edge(i, best_j, score=best_score)
            tracer.debug(
                f"Concentric pair {i}<->{best_j} score={best_score:.3f}",
                first=circles[i], second=circles[best_j],
            )

    groups = [
        _build_group(circles, sorted(component, key=order.index))
        for component in nx.connected_components(partner_graph)
    ]
    groups.sort(key=lambda g: g.representative.confidence, reverse=True)

    paired = partner_graph.number_of_edges()
    tracer.event(f"Formed {len(groups)} wheel groups ({paired} concentric pairs) from {len(circles)} circles")

    return groups


def concentric_score(circle1, circle2, image_height, config):
    """
    Score how likely two circles are the tire and rim of one wheel.

    Returns 0.0 when the centers are too far apart or the radius difference
    is outside the allowed band.
    """
    center_distance = distance(circle1.x, circle1.y, circle2.x, circle2.y)
    avg_radius = (circle1.radius + circle2.radius) / 2

    max_center_distance = avg_radius * config.concentric_circle_tolerance_ratio
    if center_distance > max_center_distance:
        return 0.0

    radius_diff = abs(circle1.radius - circle2.radius)
    min_radius_diff = image_height * config.min_concentric_radius_diff
    max_radius_diff = avg_radius * config.max_concentric_radius_diff_ratio

    if radius_diff < min_radius_diff or radius_diff > max_radius_diff:
        return 0.0

    center_score = 1.0 - center_distance / max_center_distance
    radius_score = 1.0 - radius_diff / max_radius_diff
    confidence_score = (circle1.confidence + circle2.confidence) / 2

    return center_score * 0.4 + radius_score * 0.3 + confidence_score * 0.3


def _build_group(circles, indices):
    """Create a WheelGroup from one connected component of the partner graph."""
    if len(indices) == 1:
        i = indices[0]
        return WheelGroup(members=[_tag(circles[i], i, WheelComponent.UNKNOWN, None)])

    a, b = indices
    outer, inner = (a, b) if circles[a].radius > circles[b].radius else (b, a)

    return WheelGroup(members=[
        _tag(circles[outer], outer, WheelComponent.TIRE, inner),
        _tag(circles[inner], inner, WheelComponent.RIM, outer),
    ])


def _tag(circle, index, component, partner_index):
    return Circle(
        x=circle.x,
        y=circle.y,
        radius=circle.radius,
        confidence=circle.confidence,
        component=component,
        circle_id=index,
        partner_id=partner_index,
    )
