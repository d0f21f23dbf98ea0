"""Tests for the reasoning engine entry points."""


class TestAnalyzeWheels:
    """Tests for wheel analysis."""

    def test_standard_pair(self, wheel_pair, image_size):
        from bikegeom.engine import analyze_wheels

        rear, front = wheel_pair
        selection = analyze_wheels([front, rear], *image_size)

        assert selection.is_complete
        assert selection.rear.x == 200
        assert selection.front.x == 700
        assert sorted(c.circle_id for c in selection.circles) == [0, 1]

    def test_tire_and_rim_collapse_to_one_wheel(self, image_size):
        """A concentric pair is one wheel, so a second wheel is still needed."""
        from bikegeom.engine import analyze_wheels
        from bikegeom.models import Circle

        circles = [
            Circle(x=200, y=400, radius=150, confidence=0.9),
            Circle(x=200, y=400, radius=120, confidence=0.9),
        ]
        selection = analyze_wheels(circles, *image_size)

        assert len(selection.groups) == 1
        assert selection.groups[0].is_concentric
        assert not selection.is_complete


class TestIdentifyFrameComponents:
    """Tests for frame identification and its fallback."""

    def test_no_lines(self, wheel_pair, image_size):
        from bikegeom.engine import analyze_wheels, identify_frame_components

        selection = analyze_wheels(list(wheel_pair), *image_size)
        lines, used_fallback = identify_frame_components([], selection, *image_size)

        assert lines == []
        assert not used_fallback

    def test_fallback_without_wheel_pair(self, wheel_pair, bike_lines, image_size):
        """One wheel: lines pass only the basic filter and stay UNKNOWN."""
        from bikegeom.engine import analyze_wheels, identify_frame_components
        from bikegeom.models import FrameComponent

        selection = analyze_wheels([wheel_pair[0]], *image_size)
        lines, used_fallback = identify_frame_components(list(bike_lines.values()), selection, *image_size)

        assert used_fallback
        assert len(lines) == 6
        assert all(line.component == FrameComponent.UNKNOWN for line in lines)
        assert all(line.geometry_score == 0.0 for line in lines)


class TestAnalyzePrimitives:
    """End-to-end tests over detected primitives."""

    def test_synthetic_bike(self, wheel_pair, bike_lines, noise_lines, image_size):
        """Noise is dropped and every frame tube is labelled and scored."""
        from bikegeom.engine import analyze_primitives

        circles = list(wheel_pair)
        lines = noise_lines + list(bike_lines.values())
        analysis = analyze_primitives(circles, lines, *image_size)

        assert not analysis.used_fallback
        assert analysis.rear_wheel.x == 200
        assert analysis.front_wheel.x == 700
        assert sorted(l.component.value for l in analysis.classified_lines) == sorted(bike_lines)
        assert all(0.0 < l.geometry_score <= 1.0 for l in analysis.classified_lines)

    def test_vertical_line_between_wheels_is_seat_tube(self, image_size):
        """A vertical line on the rear half between two wheels is a seat tube."""
        from bikegeom.engine import analyze_primitives
        from bikegeom.models import Circle, FrameComponent, line_from_points

        circles = [Circle(x=200, y=400, radius=150), Circle(x=700, y=400, radius=150)]
        analysis = analyze_primitives(circles, [line_from_points(350, 200, 350, 400)], *image_size)

        assert [l.component for l in analysis.classified_lines] == [FrameComponent.SEAT_TUBE]

    def test_no_wheels(self, bike_lines, image_size):
        from bikegeom.engine import analyze_primitives

        analysis = analyze_primitives([], list(bike_lines.values()), *image_size)

        assert analysis.used_fallback
        assert analysis.rear_wheel is None
        assert analysis.classified_wheels == []

    def test_deterministic(self, wheel_pair, bike_lines, image_size):
        """Same input, same output."""
        from bikegeom.engine import analyze_primitives

        first = analyze_primitives(list(wheel_pair), list(bike_lines.values()), *image_size)
        second = analyze_primitives(list(wheel_pair), list(bike_lines.values()), *image_size)

        assert first == second

    def test_custom_config(self, wheel_pair, bike_lines, image_size):
        """A larger minimum length removes the shorter tubes."""
        from bikegeom.config import GeometryConfig
        from bikegeom.engine import analyze_primitives

        config = GeometryConfig(frame_min_component_length=0.2)
        analysis = analyze_primitives(list(wheel_pair), list(bike_lines.values()), *image_size, config)

        assert {l.component.value for l in analysis.classified_lines} == {"top_tube", "down_tube"}
        assert all(l.length > 233 for l in analysis.classified_lines)
