"""Lines API endpoints, including section insertion and station removal."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.config import settings
from subway.core.database import get_db
from subway.schemas.subway import (
    CreateLineRequest,
    ErrorResponse,
    LineResponse,
    SectionRequest,
    SectionResponse,
    UpdateLineRequest,
)
from subway.services.line_service import LineDetail, LineService

router = APIRouter(prefix="/lines", tags=["lines"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _to_response(line: LineDetail) -> LineResponse:
    return LineResponse.model_validate(line)


# ==================== Line Endpoints ====================


@router.post(
    "",
    response_model=LineResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERRORS, 409: {"model": ErrorResponse}},
)
async def create_line(
    request: CreateLineRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Create a line with its first section.

    Args:
        request: Line name, color and first section
        response: Outgoing response, used to set the Location header
        db: Database session

    Returns:
        Created line with its two stations
    """
    line = await LineService(db).create_line(request)
    response.headers["Location"] = f"{settings.API_V1_PREFIX}/lines/{line.id}"
    return _to_response(line)


@router.get("", response_model=list[LineResponse])
async def list_lines(db: AsyncSession = Depends(get_db)) -> list[LineResponse]:
    """List all lines, each with its stations in path order."""
    return [_to_response(line) for line in await LineService(db).list_lines()]


@router.get("/{line_id}", response_model=LineResponse, responses=_ERRORS)
async def get_line(line_id: UUID, db: AsyncSession = Depends(get_db)) -> LineResponse:
    return _to_response(await LineService(db).get_line(line_id))


@router.put("/{line_id}", response_model=LineResponse, responses={**_ERRORS, 409: {"model": ErrorResponse}})
async def update_line(
    line_id: UUID,
    request: UpdateLineRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """Rename or recolor a line."""
    return _to_response(await LineService(db).update_line(line_id, request))


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_ERRORS)
async def delete_line(line_id: UUID, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a line together with all of its sections."""
    await LineService(db).delete_line(line_id)


# ==================== Section Endpoints ====================


@router.get("/{line_id}/sections", response_model=list[SectionResponse], responses=_ERRORS)
async def list_sections(line_id: UUID, db: AsyncSession = Depends(get_db)) -> list[SectionResponse]:
    """List the sections of a line from head to tail."""
    sections = await LineService(db).list_sections(line_id)
    return [SectionResponse.model_validate(section) for section in sections]


@router.post(
    "/{line_id}/sections",
    response_model=LineResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def add_section(
    line_id: UUID,
    request: SectionRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Add a section to a line.

    A section attached at either end extends the line. A section that starts
    where an existing section starts (or ends where one ends) is spliced into
    it, and must be strictly shorter than the section it splits.

    Args:
        line_id: Line UUID
        request: Section endpoints and distance
        db: Database session

    Returns:
        Line with its updated station order
    """
    return _to_response(await LineService(db).add_section(line_id, request))


@router.delete("/{line_id}/sections", status_code=status.HTTP_204_NO_CONTENT, responses=_ERRORS)
async def remove_station(
    line_id: UUID,
    station_id: UUID = Query(..., description="Station to remove from the line"),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Remove a station from a line.

    The two sections around an interior station are merged into one; a
    terminal station's section is dropped. The last section of a line
    cannot be removed.
    """
    await LineService(db).remove_station(line_id, station_id)
