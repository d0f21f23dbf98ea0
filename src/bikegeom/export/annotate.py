"""
Annotated overlay rendering.

Draws the interpreted wheels and frame tubes over the input photograph,
with a measurement banner and confidence bars. Images are RGB throughout.
"""

import os

import cv2

from bikegeom.io.save_artifacts import versioned_path
from bikegeom.models import FrameComponent, WheelComponent
from bikegeom.tracer import get_tracer, trace

GREEN = (0, 255, 0)
YELLOW = (255, 255, 0)
RED = (255, 0, 0)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
DARK_GRAY = (50, 50, 50)

COMPONENT_COLORS = {
    FrameComponent.SEAT_TUBE: (255, 140, 0),
    FrameComponent.TOP_TUBE: (0, 170, 255),
    FrameComponent.DOWN_TUBE: (0, 90, 255),
    FrameComponent.HEAD_TUBE: (200, 0, 255),
    FrameComponent.FORK: (255, 0, 200),
    FrameComponent.SEAT_STAY_LEFT: (0, 200, 120),
    FrameComponent.SEAT_STAY_RIGHT: (0, 200, 120),
    FrameComponent.CHAIN_STAY_LEFT: (120, 200, 0),
    FrameComponent.CHAIN_STAY_RIGHT: (120, 200, 0),
    FrameComponent.SEATPOST: (255, 200, 0),
    FrameComponent.UNKNOWN: (160, 160, 160),
}

WHEEL_MARKS = {
    WheelComponent.TIRE: "T",
    WheelComponent.RIM: "R",
    WheelComponent.UNKNOWN: "?",
}

FONT = cv2.FONT_HERSHEY_SIMPLEX


def confidence_color(confidence):
    """Green for high, yellow for medium, red for low confidence."""
    if confidence >= 0.8:
        return GREEN
    if confidence >= 0.5:
        return YELLOW
    return RED


@trace(label="create_annotated_image")
def create_annotated_image(rgb_img, results):
    """Return a copy of ``rgb_img`` with the detection results drawn on it."""
    annotated = rgb_img.copy()

    draw_wheels(annotated, results.analysis.classified_wheels)
    draw_frame_lines(annotated, results.analysis.classified_lines)
    draw_measurement_labels(annotated, results)
    draw_confidence_bars(annotated, results.confidence_scores)

    return annotated


def draw_wheels(img, wheels):
    for index, wheel in enumerate(wheels):
        center = (int(wheel.x), int(wheel.y))
        radius = int(wheel.radius)
        color = confidence_color(wheel.confidence)

        cv2.circle(img, center, radius, color, 3)
        cv2.circle(img, center, 5, color, -1)

        label = f"W{index + 1}{WHEEL_MARKS[wheel.component]}"
        cv2.putText(img, label, (int(wheel.x) - 15, int(wheel.y) - radius - 10), FONT, 0.7, color, 2)


def draw_frame_lines(img, lines):
    for rank, line in enumerate(lines, start=1):
        color = COMPONENT_COLORS[line.component]
        cv2.line(img, (int(line.x1), int(line.y1)), (int(line.x2), int(line.y2)), color, 2)

        mid_x, mid_y = line.midpoint
        cv2.putText(img, f"{rank}:{line.component.value}", (int(mid_x), int(mid_y)), FONT, 0.5, color, 1)


def draw_measurement_labels(img, results):
    m = results.measurements
    labels = [
        f"Wheelbase: {int(m.wheelbase_pixels)} px",
        f"Avg Wheel Diameter: {int(m.average_wheel_diameter_pixels)} px",
        f"Wheels Found: {results.wheels_found}",
        f"Frame Tubes Found: {results.frame_tubes_found}",
        f"Perspective Factor: {m.perspective_correction_factor:.2f}",
    ]

    start_y, line_height, padding = 30, 25, 5
    for index, label in enumerate(labels):
        y = start_y + index * line_height
        (text_w, text_h), _ = cv2.getTextSize(label, FONT, 0.6, 1)
        cv2.rectangle(img, (5, y - text_h - padding), (15 + text_w, y + padding), BLACK, -1)
        cv2.putText(img, label, (10, y), FONT, 0.6, WHITE, 1)


def draw_confidence_bars(img, scores):
    height, width = img.shape[:2]
    bar_w, bar_h = 150, 20
    x = width - bar_w - 20
    y = height - 80

    bars = [("Wheel Detection", scores.wheel_detection), ("Frame Detection", scores.frame_detection)]
    for offset, (label, confidence) in enumerate(bars):
        top = y + offset * 30
        cv2.rectangle(img, (x, top), (x + bar_w, top + bar_h), DARK_GRAY, -1)
        cv2.rectangle(img, (x, top), (x + int(bar_w * confidence), top + bar_h), confidence_color(confidence), -1)
        cv2.rectangle(img, (x, top), (x + bar_w, top + bar_h), WHITE, 1)
        cv2.putText(img, f"{label}: {confidence * 100:.1f}%", (x, top - 5), FONT, 0.4, WHITE, 1)


def annotated_filename(input_path, out_dir, overwrite=False):
    """
    ``<out_dir>/<input name>_annotated.jpg``, or the next free
    ``_annotated-<n>.jpg`` when that exists and overwrite is off.
    """
    base = os.path.splitext(os.path.basename(input_path))[0]
    path = versioned_path(out_dir, f"{base}_annotated", "jpg", overwrite)
    get_tracer().debug(f"Annotated output path: {path}")
    return path
