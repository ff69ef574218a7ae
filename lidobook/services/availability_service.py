# lidobook/services/availability_service.py
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.core.exceptions import InvalidDateRange
from lidobook.db.database import reading
from lidobook.db.models.resource import Resource
from lidobook.db.repositories.reservation_repository import ReservationRepository
from lidobook.db.repositories.resource_repository import ResourceRepository


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive-date overlap: a range ending on day D conflicts with one starting on D"""
    return start_a <= end_b and start_b <= end_a


def validate_range(start: date, end: date) -> None:
    if end < start:
        raise InvalidDateRange(f"End date {end} is before start date {start}")


class AvailabilityService:
    """
    Availability index over live reservations.

    A reservation holds its umbrella unless it is cancelled or refunded. Both
    queries run on the caller's session, so inside a unit of work they see the
    same snapshot as the insert that follows them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.reservations = ReservationRepository(session)
        self.resources = ResourceRepository(session)

    async def is_available(
        self,
        tenant_id: UUID,
        resource_id: UUID,
        start: date,
        end: date,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> bool:
        validate_range(start, end)
        async with reading(self.session):
            return not await self.reservations.has_live_overlap(
                tenant_id, resource_id, start, end, exclude_reservation_id
            )

    async def find_available_resources(self, tenant_id: UUID, start: date, end: date) -> List[Resource]:
        """Active umbrellas of the tenant free for the whole range, ordered by id"""
        validate_range(start, end)
        async with reading(self.session):
            return await self.resources.find_available(tenant_id, start, end)
