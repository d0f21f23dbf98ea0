"""
Artifact saving utilities for bikegeom.

Handles writing result JSON, annotated images and per-stage debug
artifacts.
"""

import json
import os

import cv2

from bikegeom.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def save_image(img, path, max_edge=None):
    """
    Save an image to disk.

    Optionally downscales to max_edge while preserving aspect ratio.
    Three-channel images are assumed RGB and converted to BGR for OpenCV.
    """
    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (int(img.shape[1] * scale), int(img.shape[0] * scale))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

    if img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)

    ensure_dir(os.path.dirname(path))
    if not cv2.imwrite(path, img):
        raise RuntimeError(f"Failed to save image to: {path}")
    get_tracer().event(f"Saved image: {path}")


def save_json(data, path, indent=2):
    """Save a dictionary, list or Pydantic model to JSON."""
    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    get_tracer().event(f"Saved JSON: {path}")


def versioned_path(out_dir, base, ext, overwrite=False):
    """
    Path for ``<base>.<ext>`` in out_dir that does not clobber earlier output.

    When the file exists and overwrite is off, the first free
    ``<base>-1.<ext>``, ``<base>-2.<ext>``, ... is returned instead.
    """
    path = os.path.join(out_dir, f"{base}.{ext}")
    if overwrite or not os.path.exists(path):
        return path

    counter = 1
    while os.path.exists(os.path.join(out_dir, f"{base}-{counter}.{ext}")):
        counter += 1
    return os.path.join(out_dir, f"{base}-{counter}.{ext}")


def save_text(text, path):
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    get_tracer().event(f"Saved text: {path}")


class DebugArtifactWriter:
    """
    Writes debug artifacts for one image under ``out_dir/debug/<stage>/``.

    Every method is a no-op when the writer is disabled. Images from an
    earlier run are kept unless overwrite is set.
    """

    def __init__(self, out_dir, enabled=True, max_edge=1600, overwrite=False):
        self.out_dir = out_dir
        self.enabled = enabled
        self.max_edge = max_edge
        self.overwrite = overwrite

    def get_stage_dir(self, stage_name):
        stage_dir = os.path.join(self.out_dir, "debug", stage_name)
        ensure_dir(stage_dir)
        return stage_dir

    def save_image(self, img, stage_name, filename):
        if not self.enabled:
            return
        base, ext = os.path.splitext(filename)
        path = versioned_path(self.get_stage_dir(stage_name), base, ext.lstrip("."), self.overwrite)
        save_image(img, path, max_edge=self.max_edge)

    def save_json(self, data, stage_name, filename):
        if not self.enabled:
            return
        save_json(data, os.path.join(self.get_stage_dir(stage_name), filename))
