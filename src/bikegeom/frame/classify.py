"""
Frame component classification.

Assigns a frame tube label to each candidate line from its angle and its
position relative to the wheel axles. Rules live in an ordered table and
the first rule that matches decides the label.
"""

from dataclasses import dataclass
from typing import Tuple

from bikegeom.models import FrameComponent, distance, fold_angle
from bikegeom.tracer import get_tracer, trace

AXLE_PROXIMITY_PX = 100.0
DOWN_TUBE_RISE_PX = 50.0


@dataclass(frozen=True)
class ClassificationContext:
    """Reference geometry shared by all lines of one image."""
    rear_axle: Tuple[float, float]
    front_axle: Tuple[float, float]
    avg_wheel_y: float
    avg_line_length: float
    max_head_tube_ratio: float

    @property
    def center_x(self):
        return (self.rear_axle[0] + self.front_axle[0]) / 2

    @classmethod
    def build(cls, lines, rear_wheel, front_wheel, config):
        lengths = [line.length for line in lines]
        return cls(
            rear_axle=(rear_wheel.x, rear_wheel.y),
            front_axle=(front_wheel.x, front_wheel.y),
            avg_wheel_y=(rear_wheel.y + front_wheel.y) / 2,
            avg_line_length=sum(lengths) / len(lengths) if lengths else 0.0,
            max_head_tube_ratio=config.frame_max_head_tube_ratio,
        )


# Angle classes (degrees, image coordinates)

def is_near_vertical(angle):
    return abs(fold_angle(angle) - 90.0) <= 30.0


def is_near_horizontal(angle):
    folded = fold_angle(angle)
    return folded <= 30.0 or folded >= 150.0


def is_diagonal_down_forward(angle):
    return -60.0 <= angle <= -10.0 or 120.0 <= angle <= 170.0


def is_diagonal_up_back(angle):
    return 10.0 <= angle <= 60.0 or -170.0 <= angle <= -120.0


def is_diagonal_forward(angle):
    return 20.0 <= fold_angle(angle) <= 70.0


def touches_rear_axle(line, ctx):
    """Either endpoint lies within AXLE_PROXIMITY_PX of the rear axle."""
    ax, ay = ctx.rear_axle
    return any(distance(x, y, ax, ay) < AXLE_PROXIMITY_PX for x, y in line.endpoints)


# Rule predicates

def _seat_tube(line, ctx):
    return is_near_vertical(line.angle) and line.midpoint[0] < ctx.center_x


def _head_tube(line, ctx):
    return (
        is_near_vertical(line.angle)
        and line.midpoint[0] > ctx.center_x
        and line.length < ctx.avg_line_length * ctx.max_head_tube_ratio
    )


def _top_tube(line, ctx):
    return is_near_horizontal(line.angle) and line.midpoint[1] < ctx.avg_wheel_y


def _down_tube(line, ctx):
    return is_diagonal_down_forward(line.angle) and line.midpoint[1] > ctx.avg_wheel_y - DOWN_TUBE_RISE_PX


def _chain_stay(line, ctx):
    return (
        is_near_horizontal(line.angle)
        and line.midpoint[1] >= ctx.avg_wheel_y
        and touches_rear_axle(line, ctx)
    )


def _seat_stay(line, ctx):
    return is_diagonal_up_back(line.angle) and touches_rear_axle(line, ctx)


def _fork(line, ctx):
    return is_diagonal_forward(line.angle) and line.midpoint[0] > ctx.front_axle[0]


# Side resolvers. Sides follow height relative to axle level.

def _chain_stay_side(line, ctx):
    if line.midpoint[1] > ctx.avg_wheel_y:
        return FrameComponent.CHAIN_STAY_LEFT
    return FrameComponent.CHAIN_STAY_RIGHT


def _seat_stay_side(line, ctx):
    if line.midpoint[1] < ctx.avg_wheel_y:
        return FrameComponent.SEAT_STAY_LEFT
    return FrameComponent.SEAT_STAY_RIGHT


# Evaluated top to bottom; the first matching predicate wins.
FRAME_RULES = [
    (_seat_tube, FrameComponent.SEAT_TUBE),
    (_head_tube, FrameComponent.HEAD_TUBE),
    (_top_tube, FrameComponent.TOP_TUBE),
    (_down_tube, FrameComponent.DOWN_TUBE),
    (_chain_stay, _chain_stay_side),
    (_seat_stay, _seat_stay_side),
    (_fork, FrameComponent.FORK),
]


def classify_line(line, ctx, rules=FRAME_RULES):
    """Return the frame component label for one line."""
    for predicate, label in rules:
        if predicate(line, ctx):
            return label if isinstance(label, FrameComponent) else label(line, ctx)
    return FrameComponent.UNKNOWN


@trace(label="classify_frame_components")
def classify_frame_components(lines, rear_wheel, front_wheel, config):
    """
    Label every candidate line with a frame component.

    Lines that match no rule are kept with the UNKNOWN label. The average
    line length used by the head tube rule is taken over ``lines``.
    """
    tracer = get_tracer()

    ctx = ClassificationContext.build(lines, rear_wheel, front_wheel, config)

    classified = [
        line.model_copy(update={"component": classify_line(line, ctx)})
        for line in lines
    ]

    identified = sum(1 for line in classified if line.component != FrameComponent.UNKNOWN)
    tracer.event(f"Classified {identified} of {len(classified)} lines as frame components",
                 lines=classified)
    return classified
