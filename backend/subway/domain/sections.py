"""
Sections aggregate: the topology engine for one subway line.

A line's sections must always form exactly one simple path: no station is
the up-station of two sections or the down-station of two sections, there
are no cycles and no duplicate edges. The aggregate refuses to be built from
sections that break this, and every structural change is expressed as a
SectionDelta (sections to remove, sections to add) computed against the
current snapshot. Callers persist the delta; the aggregate itself never
mutates.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from subway.domain.errors import (
    ExcessiveDistanceError,
    InvalidSectionError,
    MinimumSectionCountError,
    StationNotInLineError,
)
from subway.domain.section import LineId, Section, StationId

MINIMUM_SECTION_COUNT = 1


@dataclass(frozen=True)
class SectionDelta:
    """Structural change to a line: sections to delete, then sections to insert."""

    removed: tuple[Section, ...] = ()
    added: tuple[Section, ...] = ()


class StationSequence:
    """Lazy, restartable walk over the stations of a path from head to tail."""

    def __init__(self, head: StationId | None, by_up: Mapping[StationId, Section], length: int) -> None:
        self._head = head
        self._by_up = by_up
        self._length = length

    def __iter__(self) -> Iterator[StationId]:
        if self._head is None:
            return
        station = self._head
        yield station
        while (section := self._by_up.get(station)) is not None:
            station = section.down_station_id
            yield station

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"StationSequence({list(self)!r})"


class Sections:
    """
    All sections of one line at a point in time.

    Lookups by up-station and down-station are built once on construction,
    so neighbour queries are O(1).

    Raises:
        InvalidSectionError: If the given sections do not form a single path
    """

    def __init__(self, sections: Iterable[Section]) -> None:
        self._sections = tuple(sections)
        self._by_up: dict[StationId, Section] = {}
        self._by_down: dict[StationId, Section] = {}

        line_ids = {section.line_id for section in self._sections}
        if len(line_ids) > 1:
            msg = "Sections belong to more than one line."
            raise InvalidSectionError(msg)

        for section in self._sections:
            if section.is_self_loop:
                msg = f"Section starts and ends at the same station '{section.up_station_id}'."
                raise InvalidSectionError(msg)
            if section.up_station_id in self._by_up or section.down_station_id in self._by_down:
                msg = (
                    f"Section {section.up_station_id}->{section.down_station_id} "
                    "would give a station two neighbours in the same direction."
                )
                raise InvalidSectionError(msg)
            self._by_up[section.up_station_id] = section
            self._by_down[section.down_station_id] = section

        self._head = self._find_head()
        self._ordered = tuple(self._walk())
        if len(self._ordered) != len(self._sections):
            msg = "Sections do not form a single connected path."
            raise InvalidSectionError(msg)

    @classmethod
    def empty(cls) -> "Sections":
        """Seed aggregate for a line that has no sections yet."""
        return cls(())

    def _find_head(self) -> StationId | None:
        if not self._sections:
            return None
        heads = [station for station in self._by_up if station not in self._by_down]
        if len(heads) != 1:
            msg = "Sections do not form a single path with one starting station."
            raise InvalidSectionError(msg)
        return heads[0]

    def _walk(self) -> Iterator[Section]:
        station = self._head
        while (section := self._by_up.get(station)) is not None:
            yield section
            station = section.down_station_id

    # ==================== Queries ====================

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[Section]:
        """Iterate sections in path order, head to tail."""
        return iter(self._ordered)

    def __repr__(self) -> str:
        return f"Sections({list(self._ordered)!r})"

    @property
    def is_empty(self) -> bool:
        return not self._sections

    @property
    def line_id(self) -> LineId | None:
        return self._sections[0].line_id if self._sections else None

    @property
    def head(self) -> StationId | None:
        return self._head

    @property
    def tail(self) -> StationId | None:
        return self._ordered[-1].down_station_id if self._ordered else None

    @property
    def stations(self) -> frozenset[StationId]:
        return frozenset(self._by_up) | frozenset(self._by_down)

    def contains_station(self, station_id: StationId) -> bool:
        return station_id in self._by_up or station_id in self._by_down

    def find_section_starting_at(self, station_id: StationId) -> Section | None:
        """Return the section whose up-station is ``station_id``."""
        return self._by_up.get(station_id)

    def find_section_ending_at(self, station_id: StationId) -> Section | None:
        """Return the section whose down-station is ``station_id``."""
        return self._by_down.get(station_id)

    def is_connected(self, station_a: StationId, station_b: StationId) -> bool:
        """Return True if a single section joins the two stations in either direction."""
        forward = self._by_up.get(station_a)
        backward = self._by_up.get(station_b)
        return (forward is not None and forward.matches_down_station(station_b)) or (
            backward is not None and backward.matches_down_station(station_a)
        )

    def station_ids(self) -> StationSequence:
        """Ordered station ids from head to tail; ``len(sections) + 1`` long for a non-empty line."""
        length = len(self._sections) + 1 if self._sections else 0
        return StationSequence(self._head, self._by_up, length)

    # ==================== Insertion ====================

    def add(self, candidate: Section) -> SectionDelta:
        """
        Compute the delta that inserts ``candidate`` into the line.

        A candidate that attaches at a terminal simply extends the path. A
        candidate that leaves a station which already has an outgoing section
        (or enters one which already has an incoming section) is spliced into
        that section: the existing section is removed and replaced by the
        shortened remainder, and the candidate is added.

        Args:
            candidate: Section to insert

        Returns:
            SectionDelta with the split section (if any) in ``removed`` and the
            remainder plus the candidate in ``added``

        Raises:
            InvalidSectionError: Self-loop, duplicate edge, disjoint candidate,
                or a candidate that would fork or close the path
            ExcessiveDistanceError: Candidate is not shorter than the section it splits
        """
        self._validate_same_stations(candidate)
        if self.is_empty:
            return SectionDelta(added=(candidate,))

        self._validate_same_line(candidate)
        self._validate_not_connected(candidate)
        self._validate_linked(candidate)

        removed: list[Section] = []
        added: list[Section] = []

        if (existing := self._by_up.get(candidate.up_station_id)) is not None:
            self._validate_split_distance(existing, candidate)
            removed.append(existing)
            added.append(
                Section(
                    existing.line_id,
                    candidate.down_station_id,
                    existing.down_station_id,
                    existing.distance - candidate.distance,
                )
            )

        if (existing := self._by_down.get(candidate.down_station_id)) is not None:
            self._validate_split_distance(existing, candidate)
            removed.append(existing)
            added.append(
                Section(
                    existing.line_id,
                    existing.up_station_id,
                    candidate.up_station_id,
                    existing.distance - candidate.distance,
                )
            )

        added.append(candidate)
        delta = SectionDelta(removed=tuple(removed), added=tuple(added))

        try:
            self.apply(delta)
        except InvalidSectionError:
            msg = (
                f"Section {candidate.up_station_id}->{candidate.down_station_id} "
                "would fork the line or close a cycle."
            )
            raise InvalidSectionError(msg) from None

        return delta

    def _validate_same_stations(self, candidate: Section) -> None:
        if candidate.is_self_loop:
            msg = f"Up and down station must differ, got '{candidate.up_station_id}' for both."
            raise InvalidSectionError(msg)

    def _validate_same_line(self, candidate: Section) -> None:
        if candidate.line_id != self.line_id:
            msg = f"Section belongs to line '{candidate.line_id}', not '{self.line_id}'."
            raise InvalidSectionError(msg)

    def _validate_not_connected(self, candidate: Section) -> None:
        if self.is_connected(candidate.up_station_id, candidate.down_station_id):
            msg = (
                f"Stations '{candidate.up_station_id}' and '{candidate.down_station_id}' "
                "are already connected on this line."
            )
            raise InvalidSectionError(msg)

    def _validate_linked(self, candidate: Section) -> None:
        if not (
            self.contains_station(candidate.up_station_id) or self.contains_station(candidate.down_station_id)
        ):
            msg = (
                f"Neither '{candidate.up_station_id}' nor '{candidate.down_station_id}' "
                "is on this line; a new section must attach to an existing station."
            )
            raise InvalidSectionError(msg)

    @staticmethod
    def _validate_split_distance(existing: Section, candidate: Section) -> None:
        if existing.is_over_distance(candidate.distance):
            raise ExcessiveDistanceError(candidate.distance, existing.distance)

    # ==================== Removal ====================

    def remove_station(self, station_id: StationId) -> SectionDelta:
        """
        Compute the delta that removes ``station_id`` from the line.

        An interior station's two sections are merged into one whose distance
        is their sum. A terminal station's single section is dropped.

        Raises:
            MinimumSectionCountError: The line has only one section left
            StationNotInLineError: The station is not on this line
        """
        if len(self._sections) <= MINIMUM_SECTION_COUNT:
            raise MinimumSectionCountError(MINIMUM_SECTION_COUNT)

        upper = self._by_down.get(station_id)
        lower = self._by_up.get(station_id)
        if upper is None and lower is None:
            raise StationNotInLineError(station_id)

        removed = tuple(section for section in (upper, lower) if section is not None)
        if upper is not None and lower is not None:
            merged = Section(
                upper.line_id,
                upper.up_station_id,
                lower.down_station_id,
                upper.distance + lower.distance,
            )
            return SectionDelta(removed=removed, added=(merged,))

        return SectionDelta(removed=removed)

    # ==================== Deltas ====================

    def apply(self, delta: SectionDelta) -> "Sections":
        """
        Return the aggregate that results from applying ``delta``.

        Raises:
            InvalidSectionError: If the delta removes an unknown section or the
                result is not a single path
        """
        remaining = [section for section in self._sections if section not in delta.removed]
        if len(remaining) != len(self._sections) - len(delta.removed):
            msg = "Delta removes a section that is not on this line."
            raise InvalidSectionError(msg)
        return Sections([*remaining, *delta.added])
