"""Tests for front/rear wheel pair selection."""

import pytest


def make_group(x, y, radius, confidence=0.9):
    from bikegeom.models import Circle, WheelGroup
    return WheelGroup(members=[Circle(x=x, y=y, radius=radius, confidence=confidence)])


class TestSelectWheelPair:
    """Tests for select_wheel_pair."""

    def test_no_groups(self):
        """No groups yields an empty, incomplete selection."""
        from bikegeom.wheels.pair_select import select_wheel_pair

        selection = select_wheel_pair([], 1000)

        assert selection.groups == []
        assert not selection.is_complete
        assert selection.rear is None
        assert selection.front is None

    def test_single_group_is_incomplete(self):
        from bikegeom.wheels.pair_select import select_wheel_pair

        selection = select_wheel_pair([make_group(200, 400, 150)], 1000)

        assert len(selection.groups) == 1
        assert not selection.is_complete
        assert selection.rear.x == 200
        assert selection.front is None

    def test_two_groups_ordered_left_to_right(self):
        """Rear wheel is the one with the smaller x."""
        from bikegeom.wheels.pair_select import select_wheel_pair

        selection = select_wheel_pair([make_group(700, 400, 150), make_group(200, 400, 150)], 1000)

        assert selection.is_complete
        assert selection.rear.x == 200
        assert selection.front.x == 700

    def test_implausible_pair_still_returned(self):
        """Validation of exactly two groups only warns."""
        from bikegeom.wheels.pair_select import select_wheel_pair, validate_wheel_pair

        g1, g2 = make_group(100, 100, 50), make_group(150, 500, 50)
        assert not validate_wheel_pair(g1, g2, 1000)

        selection = select_wheel_pair([g1, g2], 1000)
        assert selection.is_complete
        assert [g.representative.x for g in selection.groups] == [100, 150]

    def test_best_pair_among_many(self):
        """Level, equal wheels half the image apart beat a stray circle."""
        from bikegeom.wheels.pair_select import select_wheel_pair

        groups = [
            make_group(450, 100, 60, confidence=0.95),
            make_group(200, 400, 150),
            make_group(700, 400, 150),
        ]
        selection = select_wheel_pair(groups, 1000)

        assert [g.representative.x for g in selection.groups] == [200, 700]

    def test_falls_back_to_first_two_groups(self):
        """When no pair scores above zero the first two groups are used."""
        from bikegeom.wheels.pair_select import select_wheel_pair

        groups = [
            make_group(300, 200, 50),
            make_group(100, 0, 50),
            make_group(500, 400, 50),
        ]
        selection = select_wheel_pair(groups, 1000)

        assert [g.representative.x for g in selection.groups] == [100, 300]

    def test_concentric_group_represented_by_tire(self):
        """rear/front come from each group's tire."""
        from bikegeom.models import Circle, WheelComponent, WheelGroup
        from bikegeom.wheels.pair_select import select_wheel_pair

        tire = Circle(x=200, y=400, radius=150, component=WheelComponent.TIRE, circle_id=0, partner_id=1)
        rim = Circle(x=200, y=400, radius=120, component=WheelComponent.RIM, circle_id=1, partner_id=0)
        selection = select_wheel_pair([WheelGroup(members=[tire, rim]), make_group(700, 400, 150)], 1000)

        assert selection.rear == tire
        assert len(selection.circles) == 3


class TestWheelPairScore:
    """Tests for the pairwise wheel score."""

    def test_ideal_pair_scores_average_confidence(self):
        from bikegeom.models import Circle
        from bikegeom.wheels.pair_select import wheel_pair_score

        a = Circle(x=200, y=400, radius=150, confidence=0.8)
        b = Circle(x=700, y=400, radius=150, confidence=0.6)

        assert wheel_pair_score(a, b, 1000) == pytest.approx(0.7)

    def test_wheelbase_factor_floored(self):
        """A wheelbase far from half the width still keeps 10% of the score."""
        from bikegeom.models import Circle
        from bikegeom.wheels.pair_select import wheel_pair_score

        a = Circle(x=0, y=400, radius=150, confidence=1.0)
        b = Circle(x=5000, y=400, radius=150, confidence=1.0)

        assert wheel_pair_score(a, b, 1000) == pytest.approx(0.1)
