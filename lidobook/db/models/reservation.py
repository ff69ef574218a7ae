# lidobook/db/models/reservation.py
import uuid

from sqlalchemy import (
    Column, String, Date, Numeric, Text, ForeignKey, CheckConstraint,
    UniqueConstraint, Index, Uuid,
)

from lidobook.db.base import BaseModel


class Reservation(BaseModel):
    """
    Reservation of one umbrella for an inclusive date range.

    Status must be one of: pending, confirmed, paid, completed, cancelled, refunded.
    ``notes`` is an append-only audit trail.
    """
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="reservations_date_range_check"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'paid', 'completed', 'cancelled', 'refunded')",
            name="reservations_status_check",
        ),
        CheckConstraint(
            "reservation_type IN ('daily', 'weekly', 'monthly', 'yearly')",
            name="reservations_type_check",
        ),
        Index("ix_reservations_resource_dates", "resource_id", "start_date", "end_date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    user_id = Column(Uuid, nullable=False, index=True)
    resource_id = Column(Uuid, ForeignKey("resources.id"), nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reservation_type = Column(String(20), nullable=False, default="daily")
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)

    notes = Column(Text, nullable=True)
    booking_code = Column(String(40), nullable=False, unique=True, index=True)

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


class ResourceOccupancy(BaseModel):
    """
    One row per umbrella-day held by a non-terminal reservation.

    The unique (resource_id, day) pair is the store-level guarantee that two
    live reservations never overlap, even when created concurrently.
    """
    __tablename__ = "resource_occupancy"
    __table_args__ = (
        UniqueConstraint("resource_id", "day", name="uq_resource_occupancy_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    resource_id = Column(Uuid, ForeignKey("resources.id"), nullable=False)
    reservation_id = Column(
        Uuid, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day = Column(Date, nullable=False)
