"""
Result report generation for bikegeom.

Writes the machine-readable detection results, the full frame analysis
and a human-readable summary.
"""

import os

from bikegeom.io.save_artifacts import save_json, save_text
from bikegeom.models import FrameComponent
from bikegeom.tracer import get_tracer, trace

MIN_EXPECTED_WHEELS = 2
MIN_EXPECTED_TUBES = 3


def detection_results_dict(results):
    """Compact JSON structure with rounded positions and 2-decimal scores."""
    analysis = results.analysis
    wheels = [w for w in (analysis.rear_wheel, analysis.front_wheel) if w is not None]

    return {
        "detection_results": {
            "wheels_found": results.wheels_found,
            "wheel_positions": [
                {"x": int(w.x), "y": int(w.y), "radius": int(w.radius)} for w in wheels
            ],
            "frame_tubes_found": results.frame_tubes_found,
            "frame_components": [
                {
                    "component": line.component.value,
                    "start": [int(line.x1), int(line.y1)],
                    "end": [int(line.x2), int(line.y2)],
                    "confidence": round(line.confidence, 3),
                    "geometry_score": round(line.geometry_score, 3),
                }
                for line in analysis.classified_lines
            ],
            "measurements": {
                "wheelbase_pixels": int(results.measurements.wheelbase_pixels),
                "average_wheel_diameter_pixels": int(results.measurements.average_wheel_diameter_pixels),
            },
            "confidence_scores": {
                "wheel_detection": f"{results.confidence_scores.wheel_detection:.2f}",
                "frame_detection": f"{results.confidence_scores.frame_detection:.2f}",
            },
        }
    }


def format_summary(results):
    analysis = results.analysis
    m = results.measurements
    scores = results.confidence_scores

    lines = ["=" * 50, "BIKE GEOMETRY DETECTION SUMMARY", "=" * 50]
    lines.append(f"Wheels detected: {results.wheels_found}")
    lines.append(f"Frame tubes detected: {results.frame_tubes_found}")
    lines.append(f"Wheelbase: {int(m.wheelbase_pixels)} pixels")
    lines.append(f"Average wheel diameter: {int(m.average_wheel_diameter_pixels)} pixels")
    lines.append(f"Wheel detection confidence: {scores.wheel_detection * 100:.1f}%")
    lines.append(f"Frame detection confidence: {scores.frame_detection * 100:.1f}%")

    identified = [l for l in analysis.classified_lines if l.component != FrameComponent.UNKNOWN]
    if identified:
        lines.append("")
        lines.append("Frame components:")
        for line in identified:
            lines.append(f"  {line.component.value:<18} len={line.length:.1f} "
                         f"angle={line.angle:.1f} score={line.geometry_score:.2f}")

    if analysis.used_fallback:
        lines.append("")
        lines.append("NOTE: frame lines filtered without wheel geometry (no wheel pair)")

    if results.wheels_found < MIN_EXPECTED_WHEELS:
        lines.append("")
        lines.append(f"WARNING: Expected 2 wheels, but only {results.wheels_found} detected")

    if results.frame_tubes_found < MIN_EXPECTED_TUBES:
        lines.append(f"WARNING: Expected at least 3 frame tubes, but only {results.frame_tubes_found} detected")

    lines.append("=" * 50)
    return "\n".join(lines)


@trace(label="write_detection_results")
def write_detection_results(results, out_dir):
    """
    Write result files to ``out_dir``.

    Creates:
    - detection_results.json: compact results
    - frame_analysis.json: full classified wheels and lines
    - detection_summary.txt: human-readable summary

    Returns the list of written paths.
    """
    paths = [
        os.path.join(out_dir, "detection_results.json"),
        os.path.join(out_dir, "frame_analysis.json"),
        os.path.join(out_dir, "detection_summary.txt"),
    ]

    save_json(detection_results_dict(results), paths[0])
    save_json(results.analysis, paths[1])
    save_text(format_summary(results), paths[2])

    get_tracer().event(f"Results saved: {results.wheels_found} wheels, {results.frame_tubes_found} frame lines")
    return paths
