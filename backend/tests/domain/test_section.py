"""Tests for the Section value type."""

import dataclasses

import pytest
from subway.domain import InvalidDistanceError, Section

LINE = 1


class TestSectionConstruction:
    """Tests for building sections."""

    @pytest.mark.parametrize("distance", [0, -1, -100])
    def test_rejects_distance_below_one(self, distance: int) -> None:
        with pytest.raises(InvalidDistanceError) as exc_info:
            Section(LINE, "A", "B", distance)

        assert exc_info.value.distance == distance
        assert exc_info.value.code == "invalid_distance"

    def test_accepts_minimum_distance(self) -> None:
        assert Section(LINE, "A", "B", 1).distance == 1

    def test_is_immutable(self) -> None:
        section = Section(LINE, "A", "B", 5)

        with pytest.raises(dataclasses.FrozenInstanceError):
            section.distance = 3  # type: ignore[misc]

    def test_equality_ignores_persisted_id(self) -> None:
        """A section loaded from storage equals the same edge built in memory."""
        assert Section(LINE, "A", "B", 5, id="row-1") == Section(LINE, "A", "B", 5)
        assert Section(LINE, "A", "B", 5) != Section(LINE, "A", "B", 6)


class TestSectionQueries:
    """Tests for the pure query methods."""

    def test_is_over_distance(self) -> None:
        section = Section(LINE, "A", "B", 10)

        assert section.is_over_distance(10)
        assert section.is_over_distance(11)
        assert not section.is_over_distance(9)

    def test_station_matching(self) -> None:
        section = Section(LINE, "A", "B", 10)

        assert section.matches_up_station("A")
        assert not section.matches_up_station("B")
        assert section.matches_down_station("B")
        assert section.has_station("A")
        assert section.has_station("B")
        assert not section.has_station("C")

    def test_shares_endpoint(self) -> None:
        section = Section(LINE, "A", "B", 10)

        assert section.shares_endpoint(Section(LINE, "B", "C", 3))
        assert section.shares_endpoint(Section(LINE, "X", "A", 3))
        assert not section.shares_endpoint(Section(LINE, "X", "Y", 3))

    def test_connects_in_either_direction(self) -> None:
        section = Section(LINE, "A", "B", 10)

        assert section.connects("A", "B")
        assert section.connects("B", "A")
        assert not section.connects("A", "C")

    def test_is_self_loop(self) -> None:
        assert Section(LINE, "A", "A", 1).is_self_loop
        assert not Section(LINE, "A", "B", 1).is_self_loop
