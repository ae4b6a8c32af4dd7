"""Station registration and lookup service."""

import uuid
from collections.abc import Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from subway.domain.errors import DuplicateStationError, NotFoundError, StationInUseError
from subway.models.subway import Station
from subway.repositories.section_repository import SectionRepository
from subway.schemas.subway import CreateStationRequest

logger = structlog.get_logger(__name__)


class StationService:
    """Service for managing stations."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the station service.

        Args:
            db: Database session
        """
        self.db = db
        self.sections = SectionRepository(db)

    async def create_station(self, request: CreateStationRequest) -> Station:
        """
        Register a new station.

        Args:
            request: Station creation request

        Returns:
            Created station

        Raises:
            DuplicateStationError: If a station with the same name exists
        """
        await self._ensure_unique_name(request.name)

        station = Station(name=request.name)
        self.db.add(station)
        try:
            await self.db.commit()
        except IntegrityError:
            # Race condition: same name registered between check and insert
            await self.db.rollback()
            raise DuplicateStationError(request.name) from None
        await self.db.refresh(station)

        logger.info("station_created", station_id=str(station.id), name=station.name)
        return station

    async def list_stations(self) -> list[Station]:
        result = await self.db.execute(select(Station).order_by(Station.created_at, Station.name))
        return list(result.scalars().all())

    async def get_station(self, station_id: uuid.UUID) -> Station:
        """
        Resolve a station by id.

        Raises:
            NotFoundError: If the station does not exist
        """
        if (station := await self.db.get(Station, station_id)) is None:
            raise NotFoundError("Station", station_id)
        return station

    async def get_stations(self, station_ids: Iterable[uuid.UUID]) -> list[Station]:
        """
        Resolve several stations, keeping the order of ``station_ids``.

        Raises:
            NotFoundError: If any station does not exist
        """
        ids = list(station_ids)
        if not ids:
            return []
        result = await self.db.execute(select(Station).where(Station.id.in_(ids)))
        by_id = {station.id: station for station in result.scalars().all()}
        for station_id in ids:
            if station_id not in by_id:
                raise NotFoundError("Station", station_id)
        return [by_id[station_id] for station_id in ids]

    async def delete_station(self, station_id: uuid.UUID) -> None:
        """
        Delete a station no section references.

        Raises:
            NotFoundError: If the station does not exist
            StationInUseError: If any line still uses the station
        """
        station = await self.get_station(station_id)
        if await self.sections.is_station_referenced(station_id):
            raise StationInUseError(station_id)

        await self.db.delete(station)
        await self.db.commit()

        logger.info("station_deleted", station_id=str(station_id))

    async def _ensure_unique_name(self, name: str) -> None:
        existing = await self.db.execute(select(Station.id).where(Station.name == name))
        if existing.scalar_one_or_none() is not None:
            raise DuplicateStationError(name)
