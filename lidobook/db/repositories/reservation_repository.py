# lidobook/db/repositories/reservation_repository.py
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, List, Dict
from uuid import UUID
from sqlalchemy import select, func, and_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.core.constants import (
    TERMINAL_RESERVATION_STATUSES,
    REVENUE_RESERVATION_STATUSES,
    ACTIVE_TODAY_STATUSES,
)
from lidobook.db.models.reservation import Reservation, ResourceOccupancy
from lidobook.db.repositories.base import BaseRepository


def overlapping(start: date, end: date):
    """Inclusive overlap: [s1, e1] and [s2, e2] share a day iff s1 <= e2 and s2 <= e1"""
    return and_(Reservation.start_date <= end, Reservation.end_date >= start)


class ReservationRepository(BaseRepository[Reservation]):
    """Repository for Reservation operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Reservation, session)

    async def get_with_tenant_check(self, reservation_id: UUID, tenant_id: UUID) -> Optional[Reservation]:
        """Get reservation with tenant verification"""
        result = await self.session.execute(
            select(Reservation).where(
                and_(
                    Reservation.id == reservation_id,
                    Reservation.tenant_id == tenant_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_by_booking_code(self, booking_code: str, tenant_id: UUID) -> Optional[Reservation]:
        result = await self.session.execute(
            select(Reservation).where(
                and_(
                    Reservation.booking_code == booking_code,
                    Reservation.tenant_id == tenant_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def booking_code_exists(self, booking_code: str) -> bool:
        result = await self.session.execute(
            select(func.count(Reservation.id)).where(Reservation.booking_code == booking_code)
        )
        return (result.scalar() or 0) > 0

    async def get_by_tenant(
        self,
        tenant_id: UUID,
        user_id: Optional[UUID] = None,
        status: Optional[str] = None,
        resource_id: Optional[UUID] = None,
    ) -> List[Reservation]:
        """Get reservations for a tenant, newest first"""
        query = select(Reservation).where(Reservation.tenant_id == tenant_id)
        if user_id is not None:
            query = query.where(Reservation.user_id == user_id)
        if status is not None:
            query = query.where(Reservation.status == status)
        if resource_id is not None:
            query = query.where(Reservation.resource_id == resource_id)

        result = await self.session.execute(
            query.order_by(Reservation.created_at.desc(), Reservation.id)
        )
        return list(result.scalars().all())

    async def get_overlapping(self, tenant_id: UUID, start: date, end: date) -> List[Reservation]:
        """All reservations of the tenant touching [start, end], by start date"""
        result = await self.session.execute(
            select(Reservation)
            .where(Reservation.tenant_id == tenant_id)
            .where(overlapping(start, end))
            .order_by(Reservation.start_date.asc(), Reservation.id)
        )
        return list(result.scalars().all())

    async def has_live_overlap(
        self,
        tenant_id: UUID,
        resource_id: UUID,
        start: date,
        end: date,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> bool:
        query = (
            select(func.count(Reservation.id))
            .where(Reservation.tenant_id == tenant_id)
            .where(Reservation.resource_id == resource_id)
            .where(Reservation.status.not_in(sorted(TERMINAL_RESERVATION_STATUSES)))
            .where(overlapping(start, end))
        )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)
        result = await self.session.execute(query)
        return (result.scalar() or 0) > 0

    async def get_active_on(self, tenant_id: UUID, day: date) -> List[Reservation]:
        """Confirmed or paid reservations running on ``day``"""
        result = await self.session.execute(
            select(Reservation)
            .where(Reservation.tenant_id == tenant_id)
            .where(Reservation.status.in_(sorted(ACTIVE_TODAY_STATUSES)))
            .where(Reservation.start_date <= day)
            .where(Reservation.end_date >= day)
            .order_by(Reservation.start_date.asc(), Reservation.id)
        )
        return list(result.scalars().all())

    async def count_by_status(self, tenant_id: UUID, status: str) -> int:
        result = await self.session.execute(
            select(func.count(Reservation.id))
            .where(Reservation.tenant_id == tenant_id)
            .where(Reservation.status == status)
        )
        return result.scalar() or 0

    async def status_breakdown(self, tenant_id: UUID) -> Dict[str, int]:
        result = await self.session.execute(
            select(Reservation.status, func.count(Reservation.id))
            .where(Reservation.tenant_id == tenant_id)
            .group_by(Reservation.status)
        )
        return {status: count for status, count in result.all()}

    async def total_revenue(self, tenant_id: UUID) -> Decimal:
        """Sum of prices of paid and completed reservations"""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Reservation.total_price), 0))
            .where(Reservation.tenant_id == tenant_id)
            .where(Reservation.status.in_(sorted(REVENUE_RESERVATION_STATUSES)))
        )
        return Decimal(str(result.scalar() or 0)).quantize(Decimal("0.01"))

    # ==================== OCCUPANCY ====================

    async def claim_days(self, reservation: Reservation) -> None:
        """Write one occupancy row per day; a concurrent overlap fails the flush"""
        day = reservation.start_date
        claims = []
        while day <= reservation.end_date:
            claims.append(
                ResourceOccupancy(
                    tenant_id=reservation.tenant_id,
                    resource_id=reservation.resource_id,
                    reservation_id=reservation.id,
                    day=day,
                )
            )
            day += timedelta(days=1)
        self.session.add_all(claims)
        await self.session.flush()

    async def release_days(self, reservation_id: UUID) -> int:
        result = await self.session.execute(
            delete(ResourceOccupancy).where(ResourceOccupancy.reservation_id == reservation_id)
        )
        return result.rowcount
