# lidobook/db/repositories/resource_repository.py
from datetime import date
from typing import Optional, List, Iterable
from uuid import UUID
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.core.constants import TERMINAL_RESERVATION_STATUSES
from lidobook.db.models.resource import Resource
from lidobook.db.models.reservation import Reservation
from lidobook.db.repositories.base import BaseRepository
from lidobook.db.repositories.reservation_repository import overlapping


class ResourceRepository(BaseRepository[Resource]):
    """Repository for umbrella operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Resource, session)

    async def get_with_tenant_check(self, resource_id: UUID, tenant_id: UUID) -> Optional[Resource]:
        """Get umbrella with tenant verification"""
        result = await self.session.execute(
            select(Resource).where(
                and_(
                    Resource.id == resource_id,
                    Resource.tenant_id == tenant_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def lock_with_tenant_check(self, resource_id: UUID, tenant_id: UUID) -> Optional[Resource]:
        """Same as get_with_tenant_check, holding a row lock until the transaction ends"""
        result = await self.session.execute(
            select(Resource)
            .where(
                and_(
                    Resource.id == resource_id,
                    Resource.tenant_id == tenant_id
                )
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def get_by_tenant(
        self,
        tenant_id: UUID,
        active_only: bool = False,
        row_label: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Resource]:
        """Get umbrellas for a tenant ordered by number"""
        query = select(Resource).where(Resource.tenant_id == tenant_id)
        if active_only:
            query = query.where(Resource.is_active.is_(True))
        if row_label is not None:
            query = query.where(Resource.row_label == row_label)
        if category is not None:
            query = query.where(Resource.category == category)

        result = await self.session.execute(query.order_by(Resource.number))
        return list(result.scalars().all())

    async def count_by_tenant(self, tenant_id: UUID, active_only: bool = False) -> int:
        query = select(func.count(Resource.id)).where(Resource.tenant_id == tenant_id)
        if active_only:
            query = query.where(Resource.is_active.is_(True))
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def existing_numbers(self, tenant_id: UUID, numbers: Iterable[int]) -> List[int]:
        """Which of ``numbers`` are already taken in the tenant"""
        result = await self.session.execute(
            select(Resource.number)
            .where(Resource.tenant_id == tenant_id)
            .where(Resource.number.in_(list(numbers)))
        )
        return list(result.scalars().all())

    async def find_available(self, tenant_id: UUID, start: date, end: date) -> List[Resource]:
        """Active umbrellas with no live reservation overlapping [start, end]"""
        booked = (
            select(Reservation.resource_id)
            .where(Reservation.tenant_id == tenant_id)
            .where(Reservation.status.not_in(sorted(TERMINAL_RESERVATION_STATUSES)))
            .where(overlapping(start, end))
        )
        result = await self.session.execute(
            select(Resource)
            .where(Resource.tenant_id == tenant_id)
            .where(Resource.is_active.is_(True))
            .where(Resource.id.not_in(booked))
            .order_by(Resource.id)
        )
        return list(result.scalars().all())

    async def count_reservations(self, resource_id: UUID, live_only: bool = False) -> int:
        """Reservations referencing the umbrella, optionally only non-terminal ones"""
        query = select(func.count(Reservation.id)).where(Reservation.resource_id == resource_id)
        if live_only:
            query = query.where(Reservation.status.not_in(sorted(TERMINAL_RESERVATION_STATUSES)))
        result = await self.session.execute(query)
        return result.scalar() or 0
