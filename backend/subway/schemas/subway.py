"""Pydantic schemas for stations, lines and sections."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ==================== Helper Functions ====================


def _validate_not_blank(value: str) -> str:
    """
    Strip surrounding whitespace and reject blank strings - reusable helper.

    Raises:
        ValueError: If the value is empty after stripping
    """
    stripped = value.strip()
    if not stripped:
        msg = "Value must not be blank"
        raise ValueError(msg)
    return stripped


# ==================== Request Schemas ====================


class CreateStationRequest(BaseModel):
    """Request to register a new station."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique station name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, name: str) -> str:
        """Reject whitespace-only names."""
        return _validate_not_blank(name)


class SectionRequest(BaseModel):
    """Request to add a section to a line."""

    up_station_id: UUID = Field(..., description="Station the section starts at")
    down_station_id: UUID = Field(..., description="Station the section ends at")
    # Distance and distinct-station rules are enforced by the topology engine so
    # that they surface as invalid_distance / invalid_section errors
    distance: int = Field(..., description="Distance between the two stations (at least 1)")


class CreateLineRequest(SectionRequest):
    """Request to create a line together with its first section."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique line name")
    color: str = Field(..., min_length=1, max_length=50, description="Unique line color (e.g., 'bg-red-600')")

    @field_validator("name", "color")
    @classmethod
    def validate_text(cls, value: str) -> str:
        """Reject whitespace-only names and colors."""
        return _validate_not_blank(value)


class UpdateLineRequest(BaseModel):
    """Request to rename or recolor a line."""

    name: str = Field(..., min_length=1, max_length=255)
    color: str = Field(..., min_length=1, max_length=50)

    @field_validator("name", "color")
    @classmethod
    def validate_text(cls, value: str) -> str:
        """Reject whitespace-only names and colors."""
        return _validate_not_blank(value)


# ==================== Response Schemas ====================


class StationResponse(BaseModel):
    """Station details."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class SectionResponse(BaseModel):
    """One section of a line."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    up_station_id: UUID
    down_station_id: UUID
    distance: int


class LineResponse(BaseModel):
    """Line with its stations in path order, head to tail."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    color: str
    stations: list[StationResponse] = Field(default_factory=list, description="Stations from head to tail")


class ErrorResponse(BaseModel):
    """Body returned for domain errors."""

    detail: str
    code: str
