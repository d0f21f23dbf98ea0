"""Tests for measurements and detection confidence."""

import pytest


class TestMeasurements:
    """Tests for wheelbase and diameter measurement."""

    def test_level_wheels(self, wheel_pair):
        from bikegeom.measure.geometry import calculate_measurements

        m = calculate_measurements(*wheel_pair)

        assert m.wheelbase_pixels == pytest.approx(500)
        assert m.average_wheel_diameter_pixels == pytest.approx(300)
        assert m.perspective_correction_factor == pytest.approx(1.0)

    def test_tilted_wheels(self):
        """Perspective factor is the cosine of the axle line tilt."""
        from bikegeom.measure.geometry import calculate_measurements
        from bikegeom.models import Circle

        m = calculate_measurements(Circle(x=0, y=0, radius=100), Circle(x=400, y=300, radius=120))

        assert m.wheelbase_pixels == pytest.approx(500)
        assert m.average_wheel_diameter_pixels == pytest.approx(220)
        assert m.perspective_correction_factor == pytest.approx(0.8)

    def test_single_wheel(self, wheel_pair):
        from bikegeom.measure.geometry import calculate_measurements

        m = calculate_measurements(wheel_pair[0], None)

        assert m.wheelbase_pixels == 0.0
        assert m.average_wheel_diameter_pixels == pytest.approx(300)
        assert m.perspective_correction_factor == 1.0

    def test_no_wheels(self):
        from bikegeom.measure.geometry import calculate_measurements

        m = calculate_measurements(None, None)

        assert m.wheelbase_pixels == 0.0
        assert m.average_wheel_diameter_pixels == 0.0


class TestConfidenceScores:
    """Tests for overall detection confidence."""

    def test_wheel_confidence_by_count(self, wheel_pair):
        from bikegeom.measure.geometry import wheel_detection_confidence
        from bikegeom.models import WheelGroup, WheelPairSelection

        rear, front = wheel_pair
        pair = WheelPairSelection(groups=[WheelGroup(members=[rear]), WheelGroup(members=[front])])

        assert wheel_detection_confidence(WheelPairSelection()) == 0.0
        assert wheel_detection_confidence(WheelPairSelection(groups=pair.groups[:1])) == 0.5
        assert wheel_detection_confidence(pair) == pytest.approx((0.9 + 1.0) / 2)

    def test_radius_consistency(self):
        from bikegeom.measure.geometry import radius_consistency
        from bikegeom.models import Circle

        wheels = [Circle(x=0, y=0, radius=100), Circle(x=0, y=0, radius=150)]
        assert radius_consistency(wheels) == pytest.approx(0.8)

    def test_frame_confidence_empty(self):
        from bikegeom.measure.geometry import frame_detection_confidence

        assert frame_detection_confidence([], 1000, 600) == 0.0

    def test_frame_confidence_bounded(self, bike_lines, image_size):
        from bikegeom.measure.geometry import frame_detection_confidence

        score = frame_detection_confidence(list(bike_lines.values()), *image_size)
        assert 0.0 < score <= 1.0

    def test_angle_variety(self):
        from bikegeom.measure.geometry import angle_variety_score
        from bikegeom.models import LineSegment

        def at(angle):
            return LineSegment(x1=0, y1=0, x2=1, y2=1, length=1, angle=angle)

        assert angle_variety_score([at(45)]) == 0.5
        assert angle_variety_score([at(0), at(5)]) == pytest.approx(1 / 3)
        assert angle_variety_score([at(0), at(45), at(100)]) == 1.0


class TestFrameTriangle:
    """Tests for main triangle candidate selection."""

    def test_three_longest(self, bike_lines):
        from bikegeom.measure.geometry import identify_frame_triangle

        triangle = identify_frame_triangle(list(bike_lines.values()))

        assert len(triangle) == 3
        assert triangle[0] == bike_lines["down_tube"]
        assert triangle[1] == bike_lines["top_tube"]
        assert triangle[2] == bike_lines["seat_tube"]

    def test_too_few_lines(self, bike_lines):
        from bikegeom.measure.geometry import identify_frame_triangle

        lines = [bike_lines["fork"]]
        assert identify_frame_triangle(lines) == lines
