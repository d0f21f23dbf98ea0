"""
Main pipeline orchestrator for bikegeom.

Runs primitive extraction, geometric reasoning, measurement and output
generation for a single bicycle photograph, or the reasoning stages alone
for a file of pre-detected primitives.
"""

import json
import os

from bikegeom.config import load_config
from bikegeom.detect.hough import detect_circles, detect_lines
from bikegeom.engine import analyze_wheels, identify_frame_components
from bikegeom.export.annotate import annotated_filename, create_annotated_image
from bikegeom.export.report import write_detection_results
from bikegeom.io.load_image import load_image, validate_image_inputs
from bikegeom.io.save_artifacts import DebugArtifactWriter, ensure_dir, save_image
from bikegeom.measure.geometry import (
    calculate_confidence_scores, calculate_measurements, identify_frame_triangle,
)
from bikegeom.models import (
    Circle, DetectionResults, FrameAnalysis, ImageMeta, LineSegment, line_from_points,
)
from bikegeom.preprocess.grayscale import preprocess_image
from bikegeom.tracer import get_tracer, trace


@trace(label="run_pipeline")
def run_pipeline(image_path, out_dir, config=None, config_path=None, debug=False, overwrite=False):
    """
    Run the full pipeline on one photograph.

    Args:
        image_path: input image file path
        out_dir: output directory
        config: PipelineConfig object (optional)
        config_path: path to YAML config file (optional)
        debug: enable debug artifact generation
        overwrite: replace images from an earlier run instead of writing
            numbered copies

    Returns:
        DetectionResults for the image
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)

    config.debug.enabled = debug

    errors = validate_image_inputs([image_path])
    if errors:
        for error in errors:
            tracer.event(error, level="ERROR")
        raise ValueError(f"Input validation failed: {errors}")

    ensure_dir(out_dir)

    debug_writer = DebugArtifactWriter(
        out_dir,
        enabled=config.debug.enabled,
        max_edge=config.debug.max_edge_scale,
        overwrite=overwrite,
    ) if config.debug.enabled else None

    with tracer.span("load", module="pipeline"):
        rgb_img, metadata = load_image(image_path, config)
        image_meta = ImageMeta(**metadata)
        width, height = image_meta.width, image_meta.height

    with tracer.span("preprocess", module="pipeline"):
        _, blurred = preprocess_image(rgb_img, config, debug_writer)

    with tracer.span("wheels", module="pipeline"):
        circles = detect_circles(blurred, width, height, config, debug_writer)
        selection = analyze_wheels(circles, width, height, config.geometry)

        if debug_writer:
            debug_writer.save_json(selection, "wheels", "02_selection.json")

    with tracer.span("frame", module="pipeline"):
        lines = detect_lines(blurred, width, height, selection.circles, config, debug_writer)
        classified_lines, used_fallback = identify_frame_components(
            lines, selection, width, height, config.geometry,
        )
        if debug_writer:
            triangle = identify_frame_triangle(classified_lines)
            debug_writer.save_json([line.model_dump(mode="json") for line in classified_lines],
                                   "frame", "03_classified_lines.json")
            debug_writer.save_json([line.model_dump(mode="json") for line in triangle],
                                   "frame", "04_frame_triangle.json")

    analysis = FrameAnalysis(
        classified_wheels=selection.circles,
        classified_lines=classified_lines,
        rear_wheel=selection.rear,
        front_wheel=selection.front,
        used_fallback=used_fallback,
    )

    with tracer.span("measure", module="pipeline"):
        results = DetectionResults(
            image_meta=image_meta,
            analysis=analysis,
            measurements=calculate_measurements(selection.rear, selection.front),
            confidence_scores=calculate_confidence_scores(selection, classified_lines, width, height),
        )

    with tracer.span("output", module="pipeline"):
        annotated = create_annotated_image(rgb_img, results)
        save_image(annotated, annotated_filename(image_path, out_dir, overwrite))
        write_detection_results(results, out_dir)

    return results


@trace(label="run_primitives")
def run_primitives(primitives_path, out_dir, config=None, config_path=None):
    """
    Run the reasoning stages on a JSON file of detected primitives.

    The file holds ``{"image": {"width", "height"}, "circles": [...],
    "lines": [...]}``. Writes the result files (no annotated image) and
    returns DetectionResults.
    """
    if config is None:
        config = load_config(config_path)

    image_meta, circles, lines = load_primitives(primitives_path)
    width, height = image_meta.width, image_meta.height

    selection = analyze_wheels(circles, width, height, config.geometry)
    classified_lines, used_fallback = identify_frame_components(
        lines, selection, width, height, config.geometry,
    )

    results = DetectionResults(
        image_meta=image_meta,
        analysis=FrameAnalysis(
            classified_wheels=selection.circles,
            classified_lines=classified_lines,
            rear_wheel=selection.rear,
            front_wheel=selection.front,
            used_fallback=used_fallback,
        ),
        measurements=calculate_measurements(selection.rear, selection.front),
        confidence_scores=calculate_confidence_scores(selection, classified_lines, width, height),
    )

    ensure_dir(out_dir)
    write_detection_results(results, out_dir)

    return results


def load_primitives(path):
    """
    Read a primitives JSON file.

    Returns (ImageMeta, circles, lines).

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the image section is missing.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Primitives file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if "image" not in data:
        raise ValueError(f"Primitives file has no image section: {path}")

    image_meta = ImageMeta(
        width=data["image"]["width"],
        height=data["image"]["height"],
        source_path=os.path.abspath(path),
    )
    circles = [Circle(**c) for c in data.get("circles", [])]
    lines = [_parse_line(entry) for entry in data.get("lines", [])]

    get_tracer().event(f"Loaded primitives: {len(circles)} circles, {len(lines)} lines")
    return image_meta, circles, lines


def _parse_line(entry):
    if "length" in entry and "angle" in entry:
        return LineSegment(**entry)
    return line_from_points(
        entry["x1"], entry["y1"], entry["x2"], entry["y2"],
        confidence=entry.get("confidence", 1.0),
    )
