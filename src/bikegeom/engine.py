"""
Bicycle geometry reasoning engine.

Turns detected circles and line segments into an interpretation: which
circles form the front and rear wheels and which lines are which frame
tubes. Every call is a pure function of its inputs.
"""

from bikegeom.config import GeometryConfig
from bikegeom.frame.classify import classify_frame_components
from bikegeom.frame.constraints import filter_basic_geometry, filter_by_frame_constraints
from bikegeom.frame.scoring import score_frame_components
from bikegeom.models import FrameAnalysis
from bikegeom.tracer import get_tracer, trace
from bikegeom.wheels.concentric import pair_concentric_circles
from bikegeom.wheels.pair_select import select_wheel_pair


@trace(label="analyze_wheels")
def analyze_wheels(circles, image_width, image_height, config=None):
    """
    Pair concentric circles and select the rear/front wheel groups.

    Returns a WheelPairSelection.
    """
    config = config or GeometryConfig()

    groups = pair_concentric_circles(circles, image_height, config)
    return select_wheel_pair(groups, image_width)


@trace(label="identify_frame_components")
def identify_frame_components(lines, selection, image_width, image_height, config=None):
    """
    Classify and score frame lines against a wheel selection.

    Without a complete wheel pair the basic geometry filter is used
    instead and every returned line stays UNKNOWN.

    Returns (lines, used_fallback).
    """
    tracer = get_tracer()
    config = config or GeometryConfig()

    if not lines:
        tracer.event("No lines detected to analyze for frame components")
        return [], not selection.is_complete

    if not selection.is_complete:
        tracer.warn("Cannot identify frame components without at least 2 wheels detected")
        return filter_basic_geometry(lines, image_width, image_height, config), True

    rear, front = selection.rear, selection.front
    tracer.event(f"Analyzing {len(lines)} lines for bicycle frame components")

    candidates = filter_by_frame_constraints(lines, rear, front, image_width, image_height, config)
    classified = classify_frame_components(candidates, rear, front, config)
    scored = score_frame_components(classified, rear, front, config)

    tracer.event(f"Identified {len(scored)} frame components with bicycle geometry validation")
    return scored, False


@trace(label="analyze_primitives")
def analyze_primitives(circles, lines, image_width, image_height, config=None):
    """
    Run the full reasoning chain over one image's primitives.

    circles and lines are detector output; neither list is modified.
    Returns a FrameAnalysis.
    """
    config = config or GeometryConfig()

    selection = analyze_wheels(circles, image_width, image_height, config)
    classified_lines, used_fallback = identify_frame_components(
        lines, selection, image_width, image_height, config,
    )

    return FrameAnalysis(
        classified_wheels=selection.circles,
        classified_lines=classified_lines,
        rear_wheel=selection.rear,
        front_wheel=selection.front,
        used_fallback=used_fallback,
    )
