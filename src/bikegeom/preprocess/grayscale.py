"""
Image preprocessing for primitive extraction.

Converts the RGB photograph to grayscale and smooths it so the Hough
detectors see fewer spurious edges.
"""

import cv2

from bikegeom.tracer import get_tracer, trace


@trace(label="preprocess_image")
def preprocess_image(rgb_img, config, debug_writer=None):
    """
    Convert to grayscale and apply a Gaussian blur.

    Returns (gray, blurred), both uint8 single-channel images.
    """
    tracer = get_tracer()

    with tracer.span("grayscale", module="grayscale"):
        gray = cv2.cvtColor(rgb_img, cv2.COLOR_RGB2GRAY)

    with tracer.span("blur", module="grayscale"):
        kernel = config.preprocess.blur_kernel
        if kernel > 1:
            blurred = cv2.GaussianBlur(gray, (kernel, kernel), 0)
        else:
            blurred = gray
        tracer.event(f"Gaussian blur kernel={kernel}")

    if debug_writer:
        debug_writer.save_image(gray, "preprocess", "01_gray.png")
        debug_writer.save_image(blurred, "preprocess", "02_blurred.png")
        debug_writer.save_json({
            "blur_kernel": kernel,
            "image_width": rgb_img.shape[1],
            "image_height": rgb_img.shape[0],
        }, "preprocess", "preprocess_metrics.json")

    return gray, blurred
