"""Meter database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yardops.core.database import Base
from yardops.models.enums import ReadingFrequency

if TYPE_CHECKING:
    from yardops.models.location import Location
    from yardops.models.meter_assignment import MeterAssignment
    from yardops.models.meter_type import MeterType
    from yardops.models.reading import Reading
    from yardops.models.scheduled_reading import ScheduledReading


class Meter(Base):
    """Meter entity - a device that readers are assigned to read."""

    __tablename__ = "meters"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    meter_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    frequency: Mapped[ReadingFrequency] = mapped_column(Enum(ReadingFrequency), index=True)

    # Foreign keys
    meter_type_id: Mapped[int] = mapped_column(ForeignKey("meter_types.id"), index=True)
    location_id: Mapped[int] = mapped_column(ForeignKey("locations.id"), index=True)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    meter_type: Mapped["MeterType"] = relationship(back_populates="meters")
    location: Mapped["Location"] = relationship(back_populates="meters")
    readings: Mapped[list["Reading"]] = relationship(
        back_populates="meter",
        cascade="all, delete-orphan",
    )
    assignments: Mapped[list["MeterAssignment"]] = relationship(
        back_populates="meter",
        cascade="all, delete-orphan",
    )
    scheduled_readings: Mapped[list["ScheduledReading"]] = relationship(
        back_populates="meter",
        cascade="all, delete-orphan",
    )
