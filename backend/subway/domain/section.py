"""Section value type: one directed edge of a subway line."""

from collections.abc import Hashable
from dataclasses import dataclass, field

from subway.domain.errors import InvalidDistanceError

MINIMUM_DISTANCE = 1

# Station and line ids are opaque to the topology engine
StationId = Hashable
LineId = Hashable


@dataclass(frozen=True)
class Section:
    """
    Immutable edge from an up-station to a down-station on one line.

    Equality ignores the persisted ``id`` so that a value loaded from storage
    compares equal to the same edge built in memory.

    Raises:
        InvalidDistanceError: If distance is below MINIMUM_DISTANCE
    """

    line_id: LineId
    up_station_id: StationId
    down_station_id: StationId
    distance: int
    id: Hashable | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.distance < MINIMUM_DISTANCE:
            raise InvalidDistanceError(self.distance, MINIMUM_DISTANCE)

    def is_over_distance(self, other_distance: int) -> bool:
        """Return True if a section of ``other_distance`` cannot fit inside this one."""
        return other_distance >= self.distance

    def matches_up_station(self, station_id: StationId) -> bool:
        return self.up_station_id == station_id

    def matches_down_station(self, station_id: StationId) -> bool:
        return self.down_station_id == station_id

    def has_station(self, station_id: StationId) -> bool:
        return self.matches_up_station(station_id) or self.matches_down_station(station_id)

    def shares_endpoint(self, other: "Section") -> bool:
        """Return True if either endpoint of ``other`` is an endpoint of this section."""
        return self.has_station(other.up_station_id) or self.has_station(other.down_station_id)

    def connects(self, station_a: StationId, station_b: StationId) -> bool:
        """Return True if this section joins the two stations, in either direction."""
        return {self.up_station_id, self.down_station_id} == {station_a, station_b}

    @property
    def is_self_loop(self) -> bool:
        return self.up_station_id == self.down_station_id
