"""Subway data models: stations, lines and the sections joining them."""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from subway.domain.section import Section
from subway.models.base import BaseModel


class Station(BaseModel):
    """Subway station. Immutable after registration."""

    __tablename__ = "stations"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation of the station."""
        return f"<Station(id={self.id}, name={self.name})>"


class Line(BaseModel):
    """Subway line. Its ordered stations are derived from its sections, never stored."""

    __tablename__ = "lines"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    color: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of the line."""
        return f"<Line(id={self.id}, name={self.name}, color={self.color})>"


class LineSection(BaseModel):
    """
    Persisted directed edge between two stations on a line.

    Rows are never updated in place: a structural change deletes the old
    rows and inserts new ones. The unique constraints forbid forks at the
    database level, which is why deletes must be flushed before inserts.
    """

    __tablename__ = "sections"

    line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("lines.id", ondelete="CASCADE"),
        nullable=False,
    )
    up_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    down_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    distance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("distance >= 1", name="ck_sections_distance_positive"),
        CheckConstraint("up_station_id <> down_station_id", name="ck_sections_distinct_stations"),
        UniqueConstraint("line_id", "up_station_id", name="uq_sections_line_up_station"),
        UniqueConstraint("line_id", "down_station_id", name="uq_sections_line_down_station"),
        Index("ix_sections_line", "line_id"),
        Index("ix_sections_up_station", "up_station_id"),
        Index("ix_sections_down_station", "down_station_id"),
    )

    def to_domain(self) -> Section:
        """Convert to the immutable domain value."""
        return Section(
            line_id=self.line_id,
            up_station_id=self.up_station_id,
            down_station_id=self.down_station_id,
            distance=self.distance,
            id=self.id,
        )

    @classmethod
    def from_domain(cls, section: Section) -> "LineSection":
        """Build a new row from a domain value."""
        return cls(
            line_id=section.line_id,
            up_station_id=section.up_station_id,
            down_station_id=section.down_station_id,
            distance=section.distance,
        )

    def __repr__(self) -> str:
        """String representation of the section."""
        return (
            f"<LineSection(id={self.id}, line={self.line_id}, "
            f"up={self.up_station_id}, down={self.down_station_id}, distance={self.distance})>"
        )
