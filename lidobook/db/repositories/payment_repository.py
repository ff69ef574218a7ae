# lidobook/db/repositories/payment_repository.py
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from lidobook.core.constants import PaymentStatus
from lidobook.db.models.payment import Payment
from lidobook.db.models.reservation import Reservation
from lidobook.db.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment operations.

    Payments carry no tenant column; every query joins the owning reservation.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Payment, session)

    def _for_tenant(self, tenant_id: UUID) -> Select:
        return (
            select(Payment)
            .join(Reservation, Payment.reservation_id == Reservation.id)
            .where(Reservation.tenant_id == tenant_id)
        )

    async def get_with_tenant_check(self, payment_id: UUID, tenant_id: UUID) -> Optional[Payment]:
        result = await self.session.execute(
            self._for_tenant(tenant_id).where(Payment.id == payment_id)
        )
        return result.scalar_one_or_none()

    async def get_by_reservation(self, reservation_id: UUID, tenant_id: UUID) -> Optional[Payment]:
        result = await self.session.execute(
            self._for_tenant(tenant_id).where(Payment.reservation_id == reservation_id)
        )
        return result.scalar_one_or_none()

    async def exists_for_reservation(self, reservation_id: UUID) -> bool:
        result = await self.session.execute(
            select(func.count(Payment.id)).where(Payment.reservation_id == reservation_id)
        )
        return (result.scalar() or 0) > 0

    async def get_by_external_reference(self, reference: str, tenant_id: UUID) -> Optional[Payment]:
        result = await self.session.execute(
            self._for_tenant(tenant_id)
            .where(Payment.external_reference == reference)
            .order_by(Payment.created_at.desc())
        )
        return result.scalars().first()

    async def get_by_tenant(
        self,
        tenant_id: UUID,
        status: Optional[str] = None,
        method: Optional[str] = None,
    ) -> List[Payment]:
        query = self._for_tenant(tenant_id)
        if status is not None:
            query = query.where(Payment.status == status)
        if method is not None:
            query = query.where(Payment.method == method)

        result = await self.session.execute(
            query.order_by(Payment.created_at.desc(), Payment.id)
        )
        return list(result.scalars().all())

    async def total_paid(self, tenant_id: UUID) -> Decimal:
        """Sum of confirmed payment amounts for the tenant"""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Payment.amount), 0))
            .join(Reservation, Payment.reservation_id == Reservation.id)
            .where(Reservation.tenant_id == tenant_id)
            .where(Payment.status == PaymentStatus.PAID.value)
        )
        return Decimal(str(result.scalar() or 0)).quantize(Decimal("0.01"))
