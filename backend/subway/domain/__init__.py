"""Pure topology engine for subway lines (no I/O)."""

from subway.domain.errors import (
    DuplicateLineError,
    DuplicateStationError,
    ExcessiveDistanceError,
    InvalidDistanceError,
    InvalidSectionError,
    MinimumSectionCountError,
    NotFoundError,
    StationInUseError,
    StationNotInLineError,
    SubwayError,
)
from subway.domain.section import MINIMUM_DISTANCE, Section
from subway.domain.sections import MINIMUM_SECTION_COUNT, SectionDelta, Sections, StationSequence

__all__ = [
    # Values
    "Section",
    "Sections",
    "SectionDelta",
    "StationSequence",
    "MINIMUM_DISTANCE",
    "MINIMUM_SECTION_COUNT",
    # Errors
    "SubwayError",
    "InvalidDistanceError",
    "InvalidSectionError",
    "ExcessiveDistanceError",
    "MinimumSectionCountError",
    "StationNotInLineError",
    "DuplicateLineError",
    "DuplicateStationError",
    "StationInUseError",
    "NotFoundError",
]
