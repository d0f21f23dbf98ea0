"""
Primitive extraction with OpenCV Hough transforms.

Produces raw circle hypotheses (wheel boundaries) and raw line segments
(frame tubes) with heuristic confidences. These feed the reasoning engine;
no interpretation happens here.
"""

import math

import cv2
import numpy as np

from bikegeom.models import Circle, LineSegment, distance
from bikegeom.tracer import get_tracer, trace

EDGE_MARGIN_PX = 50


@trace(label="detect_circles")
def detect_circles(blurred, image_width, image_height, config, debug_writer=None):
    """
    Detect wheel circle hypotheses with cv2.HoughCircles.

    Radius and spacing limits scale with the image: with the height for
    ordinary images, with sqrt(width * height) for wide ones.

    Returns circles sorted by confidence, descending.
    """
    tracer = get_tracer()
    c = config.hough_circles

    aspect_ratio = image_width / image_height
    wide = aspect_ratio > c.wide_aspect_ratio
    scaling = int(math.sqrt(image_width * image_height)) if wide else image_height
    param2 = c.param2 * c.wide_param2_factor if wide else c.param2

    min_dist = int(scaling * c.min_dist)
    min_radius = int(scaling * c.min_radius)
    max_radius = int(scaling * c.max_radius)

    tracer.debug(f"HoughCircles dp={c.dp} minDist={min_dist} param1={c.param1} param2={param2} "
                 f"minRadius={min_radius} maxRadius={max_radius} aspect={aspect_ratio:.2f}")

    found = cv2.HoughCircles(
        blurred, cv2.HOUGH_GRADIENT, c.dp, max(min_dist, 1),
        param1=c.param1, param2=param2,
        minRadius=min_radius, maxRadius=max_radius,
    )

    circles = []
    if found is not None:
        for x, y, r in found.reshape(-1, 3):
            if r <= 0:
                continue
            x, y, r = float(x), float(y), float(r)
            circles.append(Circle(
                x=x, y=y, radius=r,
                confidence=circle_confidence(x, y, r, image_width, image_height),
            ))

    circles.sort(key=lambda circle: circle.confidence, reverse=True)
    tracer.event(f"Detected {len(circles)} circles")

    if debug_writer:
        debug_writer.save_json([circle.model_dump(mode="json") for circle in circles],
                               "wheels", "01_raw_circles.json")

    return circles


def circle_confidence(x, y, radius, image_width, image_height):
    """
    Heuristic confidence for a circle hypothesis.

    Penalises circles near the image border, favours circles in the lower
    part of the frame and radii typical of wheels.
    """
    confidence = 1.0

    if (x < EDGE_MARGIN_PX or y < EDGE_MARGIN_PX
            or x > image_width - EDGE_MARGIN_PX or y > image_height - EDGE_MARGIN_PX):
        confidence *= 0.7

    confidence *= 1.2 if y / image_height > 0.4 else 0.8

    if image_height * 0.1 <= radius <= image_height * 0.25:
        confidence *= 1.1
    else:
        confidence *= 0.9

    return min(confidence, 1.0)


@trace(label="detect_lines")
def detect_lines(blurred, image_width, image_height, wheels, config, debug_writer=None):
    """
    Detect frame line hypotheses with Canny + cv2.HoughLinesP.

    ``wheels`` are the selected wheel circles (possibly empty); they only
    influence confidence.
    """
    tracer = get_tracer()
    c = config.hough_lines

    edges = cv2.Canny(blurred, c.canny_low, c.canny_high)
    found = cv2.HoughLinesP(
        edges, 1.0, np.pi / 180, c.threshold,
        minLineLength=c.min_line_length, maxLineGap=c.max_line_gap,
    )

    lines = []
    if found is not None:
        for x1, y1, x2, y2 in found.reshape(-1, 4):
            x1, y1, x2, y2 = float(x1), float(y1), float(x2), float(y2)
            length = distance(x1, y1, x2, y2)
            if length < c.min_line_length:
                continue
            angle = math.degrees(math.atan2(y2 - y1, x2 - x1))
            lines.append(LineSegment(
                x1=x1, y1=y1, x2=x2, y2=y2, length=length, angle=angle,
                confidence=line_confidence(x1, y1, x2, y2, length, angle,
                                           image_width, image_height, wheels),
            ))

    tracer.event(f"Detected {len(lines)} line segments")

    if debug_writer:
        debug_writer.save_image(edges, "frame", "01_edges.png")
        debug_writer.save_json([line.model_dump(mode="json") for line in lines],
                               "frame", "02_raw_lines.json")

    return lines


def line_confidence(x1, y1, x2, y2, length, angle, image_width, image_height, wheels):
    """
    Heuristic confidence for a line hypothesis.

    Favours long lines, typical frame tube angles and lines between the
    wheels, above axle level.
    """
    confidence = 0.5

    diagonal = math.hypot(image_width, image_height)
    confidence += length / diagonal * 0.3

    folded = abs(math.fmod(angle, 180.0))
    deviation = min(folded, 180.0 - folded)
    if 15.0 <= deviation <= 75.0:
        confidence += 0.2

    if len(wheels) >= 2:
        left = min(wheels, key=lambda w: w.x)
        right = max(wheels, key=lambda w: w.x)
        mid_x = (x1 + x2) / 2
        mid_y = (y1 + y2) / 2

        if left.x <= mid_x <= right.x:
            confidence += 0.3
            if mid_y <= (left.y + right.y) / 2:
                confidence += 0.2

    return min(confidence, 1.0)
