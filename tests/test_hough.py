"""Tests for OpenCV primitive extraction."""

import cv2
import numpy as np
import pytest


@pytest.fixture
def blurred_line_image():
    """A single thick diagonal stroke on white, grayscale and blurred."""
    img = np.full((200, 300, 3), 255, dtype=np.uint8)
    cv2.line(img, (20, 20), (280, 180), (0, 0, 0), 3)
    gray = cv2.cvtColor(img, cv2.COLOR_RGB2GRAY)
    return cv2.GaussianBlur(gray, (5, 5), 0)


class TestDetectLines:
    """Tests for Canny + HoughLinesP line extraction."""

    def test_detects_drawn_stroke(self, blurred_line_image):
        """Segments are unpacked whatever shape HoughLinesP returns."""
        from bikegeom.config import PipelineConfig
        from bikegeom.detect.hough import detect_lines
        from bikegeom.models import LineSegment

        lines = detect_lines(blurred_line_image, 300, 200, [], PipelineConfig())

        assert lines
        for line in lines:
            assert isinstance(line, LineSegment)
            assert line.length >= 20
            assert 0.0 <= line.confidence <= 1.0

    def test_blank_image_has_no_lines(self):
        from bikegeom.config import PipelineConfig
        from bikegeom.detect.hough import detect_lines

        blank = np.full((200, 300), 255, dtype=np.uint8)

        assert detect_lines(blank, 300, 200, [], PipelineConfig()) == []


class TestDetectCircles:
    """Tests for HoughCircles wheel extraction."""

    def test_sorted_by_confidence(self, synthetic_bike_image):
        from bikegeom.config import PipelineConfig
        from bikegeom.detect.hough import detect_circles

        gray = cv2.cvtColor(synthetic_bike_image, cv2.COLOR_RGB2GRAY)
        blurred = cv2.GaussianBlur(gray, (9, 9), 2)

        circles = detect_circles(blurred, 1200, 800, PipelineConfig())

        confidences = [circle.confidence for circle in circles]
        assert confidences == sorted(confidences, reverse=True)
        assert all(circle.radius > 0 for circle in circles)

    def test_blank_image_has_no_circles(self):
        from bikegeom.config import PipelineConfig
        from bikegeom.detect.hough import detect_circles

        blank = np.full((800, 1200), 255, dtype=np.uint8)

        assert detect_circles(blank, 1200, 800, PipelineConfig()) == []
