"""Line management service: line records plus section topology changes."""

import uuid
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.locks import line_locks
from subway.core.telemetry import service_span
from subway.domain.errors import DuplicateLineError, NotFoundError
from subway.domain.section import Section
from subway.domain.sections import Sections
from subway.models.subway import Line, LineSection, Station
from subway.repositories.section_repository import SectionRepository
from subway.schemas.subway import CreateLineRequest, SectionRequest, UpdateLineRequest
from subway.services.station_service import StationService

logger = structlog.get_logger(__name__)

SERVICE_NAME = "line-service"


@dataclass
class LineDetail:
    """A line record together with its stations in path order."""

    line: Line
    stations: list[Station] = field(default_factory=list)

    @property
    def id(self) -> uuid.UUID:
        return self.line.id

    @property
    def name(self) -> str:
        return self.line.name

    @property
    def color(self) -> str:
        return self.line.color


class LineService:
    """Service for managing subway lines and their sections."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the line service.

        Args:
            db: Database session
        """
        self.db = db
        self.sections = SectionRepository(db)
        self.station_service = StationService(db)

    # ==================== Line records ====================

    async def create_line(self, request: CreateLineRequest) -> LineDetail:
        """
        Create a line with its first section.

        Args:
            request: Line name, color and the first section

        Returns:
            The new line with its two stations

        Raises:
            DuplicateLineError: If the name or color is taken
            InvalidDistanceError: If the distance is below 1
            InvalidSectionError: If up and down station are the same
            NotFoundError: If either station does not exist
        """
        await self._ensure_unique(request.name, request.color)

        line_id = uuid.uuid4()
        first = Section(line_id, request.up_station_id, request.down_station_id, request.distance)
        delta = Sections.empty().add(first)
        await self.station_service.get_stations([request.up_station_id, request.down_station_id])

        with service_span("create_line", SERVICE_NAME, **{"line.id": str(line_id)}):
            try:
                line = Line(id=line_id, name=request.name, color=request.color)
                self.db.add(line)
                await self.db.flush()
                await self.sections.apply(delta)
                await self.db.commit()
            except IntegrityError:
                # Another request took the name or color after the check above
                await self.db.rollback()
                raise DuplicateLineError(request.name, request.color) from None
            except Exception:
                await self.db.rollback()
                raise

        logger.info("line_created", line_id=str(line_id), name=request.name, color=request.color)
        return await self.get_line(line_id)

    async def list_lines(self) -> list[LineDetail]:
        """Return every line with its ordered stations."""
        lines = (await self.db.execute(select(Line).order_by(Line.created_at, Line.name))).scalars().all()
        if not lines:
            return []

        records = await self.db.execute(
            select(LineSection).where(LineSection.line_id.in_([line.id for line in lines]))
        )
        by_line: dict[uuid.UUID, list[Section]] = defaultdict(list)
        for record in records.scalars().all():
            by_line[record.line_id].append(record.to_domain())

        orders = {line.id: list(Sections(by_line[line.id]).station_ids()) for line in lines}
        station_ids = {station_id for order in orders.values() for station_id in order}
        stations = await self._stations_by_id(station_ids)

        return [
            LineDetail(line=line, stations=[stations[station_id] for station_id in orders[line.id]])
            for line in lines
        ]

    async def get_line(self, line_id: uuid.UUID) -> LineDetail:
        """
        Get a line with its stations ordered from head to tail.

        Raises:
            NotFoundError: If the line does not exist
        """
        line = await self._get_line_record(line_id)
        sections = Sections(await self.sections.find_all_by_line(line_id))
        stations = await self.station_service.get_stations(sections.station_ids())
        return LineDetail(line=line, stations=stations)

    async def update_line(self, line_id: uuid.UUID, request: UpdateLineRequest) -> LineDetail:
        """
        Rename or recolor a line.

        Raises:
            NotFoundError: If the line does not exist
            DuplicateLineError: If another line already uses the name or color
        """
        line = await self._get_line_record(line_id)
        await self._ensure_unique(request.name, request.color, exclude_id=line_id)

        line.name = request.name
        line.color = request.color
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateLineError(request.name, request.color) from None

        logger.info("line_updated", line_id=str(line_id), name=request.name, color=request.color)
        return await self.get_line(line_id)

    async def delete_line(self, line_id: uuid.UUID) -> None:
        """
        Delete a line and all of its sections.

        Raises:
            NotFoundError: If the line does not exist
        """
        async with line_locks.hold(line_id):
            try:
                line = await self._lock_line(line_id)
                await self.sections.delete_all_by_line(line_id)
                await self.db.delete(line)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info("line_deleted", line_id=str(line_id))

    # ==================== Sections ====================

    async def list_sections(self, line_id: uuid.UUID) -> list[Section]:
        """
        Return the sections of a line in path order.

        Raises:
            NotFoundError: If the line does not exist
        """
        await self._get_line_record(line_id)
        return list(Sections(await self.sections.find_all_by_line(line_id)))

    async def add_section(self, line_id: uuid.UUID, request: SectionRequest) -> LineDetail:
        """
        Insert a section into a line, splitting an existing section when needed.

        Args:
            line_id: Line UUID
            request: Section endpoints and distance

        Returns:
            The line with its updated station order

        Raises:
            NotFoundError: If the line or either station does not exist
            InvalidDistanceError: If the distance is below 1
            InvalidSectionError: If the section cannot be placed on the line
            ExcessiveDistanceError: If the section is not shorter than the one it splits
        """
        async with line_locks.hold(line_id):
            with service_span("add_section", SERVICE_NAME, **{"line.id": str(line_id)}) as span:
                try:
                    await self._lock_line(line_id)
                    candidate = Section(line_id, request.up_station_id, request.down_station_id, request.distance)
                    await self.station_service.get_stations([candidate.up_station_id, candidate.down_station_id])

                    sections = Sections(await self.sections.find_all_by_line(line_id))
                    delta = sections.add(candidate)
                    await self.sections.apply(delta)
                    await self.db.commit()
                except Exception:
                    await self.db.rollback()
                    raise

                span.set_attribute("section.removed_count", len(delta.removed))
                span.set_attribute("section.added_count", len(delta.added))

        logger.info(
            "section_added",
            line_id=str(line_id),
            up_station_id=str(candidate.up_station_id),
            down_station_id=str(candidate.down_station_id),
            distance=candidate.distance,
            split=bool(delta.removed),
        )
        return await self.get_line(line_id)

    async def remove_station(self, line_id: uuid.UUID, station_id: uuid.UUID) -> None:
        """
        Remove a station from a line, merging its two sections when it is interior.

        Raises:
            NotFoundError: If the line does not exist
            MinimumSectionCountError: If the line has a single section
            StationNotInLineError: If the station is not on the line
        """
        async with line_locks.hold(line_id):
            with service_span(
                "remove_station", SERVICE_NAME, **{"line.id": str(line_id), "station.id": str(station_id)}
            ) as span:
                try:
                    await self._lock_line(line_id)

                    sections = Sections(await self.sections.find_all_by_line(line_id))
                    delta = sections.remove_station(station_id)
                    await self.sections.apply(delta)
                    await self.db.commit()
                except Exception:
                    await self.db.rollback()
                    raise

                span.set_attribute("section.merged", bool(delta.added))

        logger.info(
            "station_removed_from_line",
            line_id=str(line_id),
            station_id=str(station_id),
            merged=bool(delta.added),
        )

    # ==================== Helpers ====================

    async def _get_line_record(self, line_id: uuid.UUID) -> Line:
        if (line := await self.db.get(Line, line_id)) is None:
            raise NotFoundError("Line", line_id)
        return line

    async def _lock_line(self, line_id: uuid.UUID) -> Line:
        """Take the row lock on the line for the rest of the transaction."""
        result = await self.db.execute(select(Line).where(Line.id == line_id).with_for_update())
        if (line := result.scalar_one_or_none()) is None:
            raise NotFoundError("Line", line_id)
        return line

    async def _ensure_unique(self, name: str, color: str, *, exclude_id: uuid.UUID | None = None) -> None:
        query = select(Line.id).where(or_(Line.name == name, Line.color == color))
        if exclude_id is not None:
            query = query.where(Line.id != exclude_id)
        if (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise DuplicateLineError(name, color)

    async def _stations_by_id(self, station_ids: Sequence[uuid.UUID] | set[uuid.UUID]) -> dict[uuid.UUID, Station]:
        if not station_ids:
            return {}
        result = await self.db.execute(select(Station).where(Station.id.in_(list(station_ids))))
        return {station.id: station for station in result.scalars().all()}
