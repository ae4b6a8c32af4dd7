"""Section persistence keyed by line id."""

import uuid
from dataclasses import replace

import structlog
from sqlalchemy import delete as sql_delete
from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from subway.domain.section import Section
from subway.domain.sections import SectionDelta
from subway.models.subway import LineSection

logger = structlog.get_logger(__name__)


class SectionRepository:
    """
    CRUD over the sections of subway lines.

    Reads return immutable domain Section values; rows are never updated in
    place. Writes only flush; committing is the caller's unit of work.
    """

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the repository.

        Args:
            db: Database session
        """
        self.db = db

    async def find_all_by_line(self, line_id: uuid.UUID) -> list[Section]:
        """Return every section of a line, in no particular order."""
        result = await self.db.execute(select(LineSection).where(LineSection.line_id == line_id))
        return [record.to_domain() for record in result.scalars().all()]

    async def save(self, section: Section) -> Section:
        """
        Insert a section and return it with its assigned id.

        Args:
            section: Domain section to persist

        Returns:
            The same section value carrying the new row id
        """
        record = LineSection.from_domain(section)
        self.db.add(record)
        await self.db.flush()
        return replace(section, id=record.id)

    async def delete_by_id(self, section_id: uuid.UUID) -> None:
        await self.db.execute(sql_delete(LineSection).where(LineSection.id == section_id))

    async def delete_by_line_and_station(self, line_id: uuid.UUID, station_id: uuid.UUID) -> int:
        """
        Delete every section of a line that touches a station.

        Returns:
            Number of deleted rows
        """
        result = await self.db.execute(
            sql_delete(LineSection).where(
                LineSection.line_id == line_id,
                or_(LineSection.up_station_id == station_id, LineSection.down_station_id == station_id),
            )
        )
        return result.rowcount

    async def delete_all_by_line(self, line_id: uuid.UUID) -> None:
        await self.db.execute(sql_delete(LineSection).where(LineSection.line_id == line_id))

    async def is_station_referenced(self, station_id: uuid.UUID) -> bool:
        """Return True if any section of any line starts or ends at the station."""
        result = await self.db.execute(
            select(
                exists().where(
                    or_(LineSection.up_station_id == station_id, LineSection.down_station_id == station_id)
                )
            )
        )
        return bool(result.scalar())

    async def apply(self, delta: SectionDelta) -> list[Section]:
        """
        Persist a structural delta: delete superseded sections, then insert new ones.

        The deletes are flushed before any insert so the per-line unique
        constraints never see two sections leaving (or entering) the same
        station at once.

        Args:
            delta: Sections to remove and sections to add

        Returns:
            The added sections with their assigned ids
        """
        for section in delta.removed:
            if section.id is None:
                msg = f"Cannot delete unsaved section {section.up_station_id}->{section.down_station_id}"
                raise ValueError(msg)
            await self.delete_by_id(section.id)
        await self.db.flush()

        saved = [await self.save(section) for section in delta.added]

        logger.debug(
            "section_delta_applied",
            removed=[str(section.id) for section in delta.removed],
            added=[str(section.id) for section in saved],
        )
        return saved
