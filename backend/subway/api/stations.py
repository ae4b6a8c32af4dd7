"""Stations API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.config import settings
from subway.core.database import get_db
from subway.models.subway import Station
from subway.schemas.subway import CreateStationRequest, ErrorResponse, StationResponse
from subway.services.station_service import StationService

router = APIRouter(prefix="/stations", tags=["stations"])


@router.post(
    "",
    response_model=StationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_station(
    request: CreateStationRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Station:
    """
    Register a new station.

    Args:
        request: Station creation request
        response: Outgoing response, used to set the Location header
        db: Database session

    Returns:
        Created station
    """
    station = await StationService(db).create_station(request)
    response.headers["Location"] = f"{settings.API_V1_PREFIX}/stations/{station.id}"
    return station


@router.get("", response_model=list[StationResponse])
async def list_stations(db: AsyncSession = Depends(get_db)) -> list[Station]:
    """List all stations."""
    return await StationService(db).list_stations()


@router.get("/{station_id}", response_model=StationResponse, responses={404: {"model": ErrorResponse}})
async def get_station(station_id: UUID, db: AsyncSession = Depends(get_db)) -> Station:
    return await StationService(db).get_station(station_id)


@router.delete(
    "/{station_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_station(station_id: UUID, db: AsyncSession = Depends(get_db)) -> None:
    """
    Delete a station.

    Stations still used by a line section cannot be deleted; remove them
    from their lines first.
    """
    await StationService(db).delete_station(station_id)
