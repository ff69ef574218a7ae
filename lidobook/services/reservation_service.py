# lidobook/services/reservation_service.py
"""
Reservation lifecycle.

    pending -> confirmed -> paid -> completed
    pending | confirmed | paid -> cancelled

Cancelled, refunded and completed are terminal. A refund happens on the
payment; its cascade cancels the reservation with a "Refunded: ..." note.
"""
import secrets
import time
from datetime import date
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.core.config import settings
from lidobook.core.constants import ReservationStatus, ReservationType
from lidobook.core.exceptions import (
    DateRangeConflict,
    InvalidTransition,
    ReservationNotFound,
    ResourceUnavailable,
    StorageError,
)
from lidobook.core.logging import logger
from lidobook.db.database import after_commit, reading, transaction
from lidobook.db.models.reservation import Reservation
from lidobook.db.repositories.reservation_repository import ReservationRepository
from lidobook.db.repositories.resource_repository import ResourceRepository
from lidobook.services.availability_service import AvailabilityService, validate_range
from lidobook.services.notification_service import NotificationService
from lidobook.services.pricing import price_for_resource

BOOKING_CODE_ATTEMPTS = 5

CONFIRMABLE: FrozenSet[str] = frozenset({ReservationStatus.PENDING.value})
PAYABLE: FrozenSet[str] = frozenset({ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value})
COMPLETABLE: FrozenSet[str] = frozenset({ReservationStatus.PAID.value})
CANCELLABLE: FrozenSet[str] = frozenset({
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.PAID.value,
})


def generate_booking_code(prefix: Optional[str] = None) -> str:
    """Prefix, millisecond timestamp and 24 random bits, e.g. BK1719822000123A1B2C3"""
    prefix = settings.BOOKING_CODE_PREFIX if prefix is None else prefix
    millis = int(time.time() * 1000)
    return f"{prefix}{millis}{secrets.token_hex(3).upper()}"


def append_note(existing: Optional[str], line: str) -> str:
    """Audit trail: new lines go at the end, earlier ones are kept"""
    return f"{existing}\n{line}" if existing else line


class ReservationService:
    """Service layer for the reservation state machine"""

    def __init__(self, session: AsyncSession, notifier: Optional[NotificationService] = None):
        self.session = session
        self.notifier = notifier or NotificationService()
        self.reservations = ReservationRepository(session)
        self.resources = ResourceRepository(session)
        self.availability = AvailabilityService(session)

    # ==================== CREATION ====================

    async def create(
        self,
        tenant_id: UUID,
        user_id: UUID,
        resource_id: UUID,
        start_date: date,
        end_date: date,
        reservation_type: Union[str, ReservationType] = ReservationType.DAILY,
        notes: Optional[str] = None,
    ) -> Reservation:
        """
        Book an umbrella for [start_date, end_date].

        The umbrella row is locked for the rest of the transaction, then the
        availability check, the insert and the day claims run against it. A
        concurrent request for an overlapping range loses with DateRangeConflict
        either at the check or at the unique day claim.
        """
        validate_range(start_date, end_date)
        reservation_type = ReservationType(reservation_type).value

        async with transaction(self.session):
            resource = await self.resources.lock_with_tenant_check(resource_id, tenant_id)
            if resource is None:
                raise ResourceUnavailable(f"Umbrella {resource_id} does not exist in this beach club")
            # Plain values only past this point: a failed flush expires the ORM objects
            number = resource.number
            if not resource.is_active:
                raise ResourceUnavailable(f"Umbrella {number} is not active")

            if not await self.availability.is_available(tenant_id, resource_id, start_date, end_date):
                logger.warning(
                    f"Date range conflict for {start_date}..{end_date}",
                    extra={"tenant_id": tenant_id, "resource_id": resource_id},
                )
                raise DateRangeConflict(
                    f"Umbrella {number} is already booked between {start_date} and {end_date}"
                )

            reservation = Reservation(
                tenant_id=tenant_id,
                user_id=user_id,
                resource_id=resource_id,
                start_date=start_date,
                end_date=end_date,
                reservation_type=reservation_type,
                total_price=price_for_resource(resource.category, start_date, end_date, reservation_type),
                status=ReservationStatus.PENDING.value,
                notes=notes,
                booking_code=await self._new_booking_code(),
            )
            await self.reservations.add(reservation)

            try:
                await self.reservations.claim_days(reservation)
            except IntegrityError as exc:
                logger.warning(
                    "Concurrent booking won the date range",
                    extra={"tenant_id": tenant_id, "resource_id": resource_id},
                )
                raise DateRangeConflict(
                    f"Umbrella {number} was booked concurrently for overlapping dates"
                ) from exc

        logger.info(
            f"Reservation {reservation.booking_code} created",
            extra={"tenant_id": tenant_id, "user_id": user_id, "reservation_id": reservation.id},
        )
        return reservation

    async def _new_booking_code(self) -> str:
        for _ in range(BOOKING_CODE_ATTEMPTS):
            code = generate_booking_code()
            if not await self.reservations.booking_code_exists(code):
                return code
        raise StorageError("Could not allocate a unique booking code")

    # ==================== TRANSITIONS ====================

    async def confirm(self, tenant_id: UUID, reservation_id: UUID) -> Reservation:
        async with transaction(self.session):
            reservation = await self.get(tenant_id, reservation_id)
            self._require(reservation, CONFIRMABLE, "confirm")
            await self._set_status(reservation, ReservationStatus.CONFIRMED)
            after_commit(self.session, lambda: self.notifier.booking_confirmed(reservation))
        return reservation

    async def mark_as_paid(self, tenant_id: UUID, reservation_id: UUID) -> Reservation:
        """Payment cascade target; only pending or confirmed bookings can become paid"""
        async with transaction(self.session):
            reservation = await self.get(tenant_id, reservation_id)
            self._require(reservation, PAYABLE, "mark as paid")
            await self._set_status(reservation, ReservationStatus.PAID)
        return reservation

    async def complete(self, tenant_id: UUID, reservation_id: UUID) -> Reservation:
        async with transaction(self.session):
            reservation = await self.get(tenant_id, reservation_id)
            self._require(reservation, COMPLETABLE, "complete")
            await self._set_status(reservation, ReservationStatus.COMPLETED)
        return reservation

    async def cancel(
        self,
        tenant_id: UUID,
        reservation_id: UUID,
        reason: str,
        notify: bool = True,
    ) -> Reservation:
        """Cancel and release the umbrella; the reason is appended to the notes"""
        async with transaction(self.session):
            reservation = await self.get(tenant_id, reservation_id)
            self._require(reservation, CANCELLABLE, "cancel")

            reservation.notes = append_note(reservation.notes, f"Cancelled: {reason}")
            await self._set_status(reservation, ReservationStatus.CANCELLED)
            await self.reservations.release_days(reservation.id)

            if notify:
                after_commit(self.session, lambda: self.notifier.booking_cancelled(reservation, reason))
        return reservation

    def _require(self, reservation: Reservation, allowed: FrozenSet[str], action: str) -> None:
        if reservation.status not in allowed:
            logger.warning(
                f"Rejected '{action}' from status {reservation.status}",
                extra={"tenant_id": reservation.tenant_id, "reservation_id": reservation.id},
            )
            raise InvalidTransition(
                f"Cannot {action} reservation {reservation.booking_code} in status {reservation.status}"
            )

    async def _set_status(self, reservation: Reservation, status: ReservationStatus) -> None:
        previous = reservation.status
        reservation.status = status.value
        await self.reservations.save(reservation)
        logger.info(
            f"Reservation {reservation.booking_code}: {previous} -> {status.value}",
            extra={"tenant_id": reservation.tenant_id, "reservation_id": reservation.id},
        )

    # ==================== QUERIES ====================

    async def get(self, tenant_id: UUID, reservation_id: UUID) -> Reservation:
        async with reading(self.session):
            reservation = await self.reservations.get_with_tenant_check(reservation_id, tenant_id)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {reservation_id} not found")
        return reservation

    async def get_by_booking_code(self, tenant_id: UUID, booking_code: str) -> Reservation:
        async with reading(self.session):
            reservation = await self.reservations.get_by_booking_code(booking_code, tenant_id)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {booking_code} not found")
        return reservation

    async def list_for_tenant(self, tenant_id: UUID) -> List[Reservation]:
        async with reading(self.session):
            return await self.reservations.get_by_tenant(tenant_id)

    async def list_by_user(self, tenant_id: UUID, user_id: UUID) -> List[Reservation]:
        async with reading(self.session):
            return await self.reservations.get_by_tenant(tenant_id, user_id=user_id)

    async def list_by_status(self, tenant_id: UUID, status: Union[str, ReservationStatus]) -> List[Reservation]:
        status = ReservationStatus(status).value
        async with reading(self.session):
            return await self.reservations.get_by_tenant(tenant_id, status=status)

    async def list_by_resource(self, tenant_id: UUID, resource_id: UUID) -> List[Reservation]:
        async with reading(self.session):
            return await self.reservations.get_by_tenant(tenant_id, resource_id=resource_id)

    async def list_in_range(self, tenant_id: UUID, start_date: date, end_date: date) -> List[Reservation]:
        """Reservations of any status overlapping the range, by start date"""
        validate_range(start_date, end_date)
        async with reading(self.session):
            return await self.reservations.get_overlapping(tenant_id, start_date, end_date)

    async def list_active(self, tenant_id: UUID, on: Optional[date] = None) -> List[Reservation]:
        """Confirmed or paid reservations running today (or on ``on``)"""
        async with reading(self.session):
            return await self.reservations.get_active_on(tenant_id, on or date.today())

    # ==================== STATS ====================

    async def count_by_status(self, tenant_id: UUID, status: Union[str, ReservationStatus]) -> int:
        status = ReservationStatus(status).value
        async with reading(self.session):
            return await self.reservations.count_by_status(tenant_id, status)

    async def total_revenue(self, tenant_id: UUID) -> Decimal:
        async with reading(self.session):
            return await self.reservations.total_revenue(tenant_id)

    async def stats(self, tenant_id: UUID) -> Dict[str, object]:
        async with reading(self.session):
            breakdown = await self.reservations.status_breakdown(tenant_id)
            revenue = await self.reservations.total_revenue(tenant_id)
        return {
            "by_status": {status.value: breakdown.get(status.value, 0) for status in ReservationStatus},
            "revenue": revenue,
        }
