"""Reading database model - one value recorded by a reader."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yardops.core.database import Base

if TYPE_CHECKING:
    from yardops.models.meter import Meter
    from yardops.models.user import User


class Reading(Base):
    """Meter reading entry."""

    __tablename__ = "readings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # The actual reading value (using Decimal for precision)
    value: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))
    reading_date: Mapped[datetime] = mapped_column(index=True)  # When reading was taken
    comment: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Foreign keys
    meter_id: Mapped[int] = mapped_column(ForeignKey("meters.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    meter: Mapped["Meter"] = relationship(back_populates="readings")
    user: Mapped["User"] = relationship()
