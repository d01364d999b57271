"""ScheduledReading database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yardops.core.database import Base

if TYPE_CHECKING:
    from yardops.models.meter import Meter


class ScheduledReading(Base):
    """Administrator-created expectation that a meter is read by a due date."""

    __tablename__ = "scheduled_readings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    meter_id: Mapped[int] = mapped_column(ForeignKey("meters.id"), index=True)
    scheduled_date: Mapped[datetime] = mapped_column()
    due_date: Mapped[datetime] = mapped_column(index=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    meter: Mapped["Meter"] = relationship(back_populates="scheduled_readings")
