"""
Image loading utilities for bikegeom.
"""

import os

import cv2

from bikegeom.tracer import get_tracer, trace

SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp")


@trace(label="load_image")
def load_image(path, config=None):
    """
    Load a bicycle photograph from disk.

    Returns a tuple of (image, metadata) where:
    - image: RGB numpy array (H, W, 3)
    - metadata: dict with width, height, source_path

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if image cannot be loaded.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    img_bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if img_bgr is None:
        raise ValueError(f"Failed to load image: {path}")

    img_rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
    height, width = img_rgb.shape[:2]

    tracer.event(f"Loaded image: {width}x{height}")
    if config is not None:
        check_resolution(width, height, config.preprocess)

    metadata = {
        "width": width,
        "height": height,
        "source_path": os.path.abspath(path),
    }

    return img_rgb, metadata


def check_resolution(width, height, preprocess_config):
    """
    Warn when the image is outside the recommended resolution range.

    Returns True when within range.
    """
    tracer = get_tracer()
    c = preprocess_config

    if width < c.min_width or height < c.min_height:
        tracer.warn(f"Image resolution ({width}x{height}) is below recommended minimum "
                    f"({c.min_width}x{c.min_height})")
        return False
    if width > c.max_width or height > c.max_height:
        tracer.warn(f"Image resolution ({width}x{height}) is above recommended maximum "
                    f"({c.max_width}x{c.max_height})")
        return False
    return True


def validate_image_inputs(paths):
    """
    Validate that all input paths exist and are readable images.

    Returns a list of error messages (empty if all valid).
    """
    errors = []

    for path in paths:
        if not os.path.exists(path):
            errors.append(f"File not found: {path}")
            continue

        ext = os.path.splitext(path)[1].lower()
        if ext not in SUPPORTED_EXTENSIONS:
            errors.append(f"Unsupported image format: {path}")
            continue

        if cv2.imread(path, cv2.IMREAD_COLOR) is None:
            errors.append(f"Cannot read image: {path}")

    return errors
