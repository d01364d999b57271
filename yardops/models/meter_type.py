"""MeterType database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yardops.core.database import Base

if TYPE_CHECKING:
    from yardops.models.meter import Meter


class MeterType(Base):
    """Administrator-defined kind of meter, e.g. WATER or ELECTRIC."""

    __tablename__ = "meter_types"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    meters: Mapped[list["Meter"]] = relationship(back_populates="meter_type")
