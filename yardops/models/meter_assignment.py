"""MeterAssignment database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yardops.core.database import Base

if TYPE_CHECKING:
    from yardops.models.meter import Meter
    from yardops.models.user import User


class MeterAssignment(Base):
    """Link between a meter and a reader responsible for it."""

    __tablename__ = "meter_assignments"
    __table_args__ = (UniqueConstraint("meter_id", "user_id", name="uq_meter_assignment"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    meter_id: Mapped[int] = mapped_column(ForeignKey("meters.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    assigned_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    assigned_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )  # Optional: admin who made the assignment

    # Relationships
    meter: Mapped["Meter"] = relationship(back_populates="assignments")
    user: Mapped["User"] = relationship(back_populates="assignments", foreign_keys=[user_id])
    assigned_by: Mapped["User | None"] = relationship(foreign_keys=[assigned_by_id])
