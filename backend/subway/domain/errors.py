"""Domain exceptions for subway line topology and records.

Every error carries a stable ``code`` and the HTTP ``status_code`` the API
layer responds with. All of them describe caller/input problems detected
before any mutation is attempted, so none are retried.
"""

from collections.abc import Hashable
from typing import ClassVar


class SubwayError(Exception):
    """Base exception for subway domain errors."""

    code: ClassVar[str] = "subway_error"
    status_code: ClassVar[int] = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidDistanceError(SubwayError):
    """Raised when a section distance is below the minimum of 1."""

    code = "invalid_distance"

    def __init__(self, distance: int, minimum: int = 1) -> None:
        self.distance = distance
        self.minimum = minimum
        super().__init__(f"Section distance must be at least {minimum}, got {distance}.")


class InvalidSectionError(SubwayError):
    """
    Raised when a candidate section cannot be placed on the line.

    Covers self-loops, duplicate edges, cycles, forks and candidates that
    share no station with the line.
    """

    code = "invalid_section"


class ExcessiveDistanceError(SubwayError):
    """Raised when a splitting section is not shorter than the section it splits."""

    code = "excessive_distance"

    def __init__(self, candidate_distance: int, existing_distance: int) -> None:
        self.candidate_distance = candidate_distance
        self.existing_distance = existing_distance
        super().__init__(
            f"New section distance {candidate_distance} must be shorter than "
            f"the existing section distance {existing_distance}."
        )


class MinimumSectionCountError(SubwayError):
    """Raised when removing a station would leave a line without sections."""

    code = "minimum_section_count"

    def __init__(self, minimum: int = 1) -> None:
        self.minimum = minimum
        super().__init__(f"A line must keep at least {minimum} section(s). Delete the line instead.")


class StationNotInLineError(SubwayError):
    """Raised when the station to remove is not part of the line."""

    code = "station_not_in_line"

    def __init__(self, station_id: Hashable) -> None:
        self.station_id = station_id
        super().__init__(f"Station '{station_id}' is not part of this line.")


class DuplicateLineError(SubwayError):
    """Raised when a line name or color is already taken."""

    code = "duplicate_line"
    status_code = 409

    def __init__(self, name: str, color: str) -> None:
        self.name = name
        self.color = color
        super().__init__(f"A line named '{name}' or colored '{color}' already exists.")


class DuplicateStationError(SubwayError):
    """Raised when a station name is already taken."""

    code = "duplicate_station"
    status_code = 409

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A station named '{name}' already exists.")


class StationInUseError(SubwayError):
    """Raised when deleting a station that sections still reference."""

    code = "station_in_use"
    status_code = 409

    def __init__(self, station_id: Hashable) -> None:
        self.station_id = station_id
        super().__init__(f"Station '{station_id}' is still used by a line section.")


class NotFoundError(SubwayError):
    """Raised when a line, station or section id is unknown."""

    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Hashable) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found.")
