# lidobook/services/payment_service.py
from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.core.constants import PaymentMethod, PaymentStatus, ReservationStatus
from lidobook.core.exceptions import (
    AlreadyConfirmed,
    AlreadyPaid,
    AmountMismatch,
    DuplicatePayment,
    InvalidTransition,
    NotPaid,
    PaymentNotFound,
    WrongMethod,
)
from lidobook.core.logging import logger
from lidobook.db.base import utcnow
from lidobook.db.database import after_commit, reading, transaction
from lidobook.db.models.payment import Payment
from lidobook.db.repositories.payment_repository import PaymentRepository
from lidobook.services.notification_service import NotificationService
from lidobook.services.pricing import CENTS
from lidobook.services.reservation_service import ReservationService, append_note

CLOSED_PAYMENT_STATUSES = frozenset({PaymentStatus.CANCELLED.value, PaymentStatus.REFUNDED.value})


class PaymentService:
    """Payment ledger.

    Confirming a payment marks its reservation paid, refunding it cancels the
    reservation. Both sides change in one transaction or not at all.
    """

    def __init__(self, session: AsyncSession, notifier: Optional[NotificationService] = None):
        self.session = session
        self.notifier = notifier or NotificationService()
        self.payments = PaymentRepository(session)
        self.reservation_service = ReservationService(session, self.notifier)

    async def create(
        self,
        tenant_id: UUID,
        reservation_id: UUID,
        method: Union[str, PaymentMethod],
        amount: Decimal,
        external_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        method = PaymentMethod(method).value
        amount = Decimal(str(amount))

        async with transaction(self.session):
            reservation = await self.reservation_service.get(tenant_id, reservation_id)
            booking_code = reservation.booking_code

            if await self.payments.exists_for_reservation(reservation.id):
                raise DuplicatePayment(f"Reservation {booking_code} already has a payment")

            if amount != Decimal(reservation.total_price):
                raise AmountMismatch(
                    f"Amount {amount} does not match reservation price {reservation.total_price}"
                )

            payment = Payment(
                reservation_id=reservation.id,
                method=method,
                amount=amount.quantize(CENTS),
                status=PaymentStatus.PENDING.value,
                external_reference=external_reference,
                notes=notes,
            )
            try:
                await self.payments.add(payment)
            except IntegrityError as exc:
                raise DuplicatePayment(
                    f"Reservation {booking_code} already has a payment"
                ) from exc

        logger.info(
            f"Payment created for {booking_code} ({method}, {payment.amount})",
            extra={"tenant_id": tenant_id, "reservation_id": reservation.id, "payment_id": payment.id},
        )
        return payment

    # ==================== CONFIRMATION ====================

    async def confirm(self, tenant_id: UUID, payment_id: UUID) -> Payment:
        """Generic confirmation, used for cash and card payments taken at the desk"""
        return await self._confirm(tenant_id, payment_id)

    async def confirm_paypal(self, tenant_id: UUID, payment_id: UUID, transaction_id: str) -> Payment:
        return await self._confirm(
            tenant_id, payment_id, required_method=PaymentMethod.PAYPAL, external_reference=transaction_id
        )

    async def confirm_bank_transfer(self, tenant_id: UUID, payment_id: UUID, reference: str) -> Payment:
        return await self._confirm(
            tenant_id, payment_id, required_method=PaymentMethod.BANK_TRANSFER, external_reference=reference
        )

    async def _confirm(
        self,
        tenant_id: UUID,
        payment_id: UUID,
        required_method: Optional[PaymentMethod] = None,
        external_reference: Optional[str] = None,
    ) -> Payment:
        async with transaction(self.session):
            payment = await self.get(tenant_id, payment_id)

            if required_method is not None and payment.method != required_method.value:
                raise WrongMethod(
                    f"Payment {payment.id} uses {payment.method}, not {required_method.value}"
                )
            if payment.status == PaymentStatus.PAID.value:
                raise AlreadyConfirmed(f"Payment {payment.id} is already confirmed")
            if payment.status in CLOSED_PAYMENT_STATUSES:
                raise InvalidTransition(f"Cannot confirm payment {payment.id} in status {payment.status}")

            if external_reference is not None:
                payment.external_reference = external_reference
            payment.status = PaymentStatus.PAID.value
            payment.paid_at = utcnow()
            await self.payments.save(payment)

            reservation = await self.reservation_service.mark_as_paid(tenant_id, payment.reservation_id)
            after_commit(self.session, lambda: self.notifier.payment_confirmed(reservation, payment))

        logger.info(
            f"Payment confirmed for {reservation.booking_code}",
            extra={"tenant_id": tenant_id, "reservation_id": reservation.id, "payment_id": payment.id},
        )
        return payment

    # ==================== CANCEL / REFUND ====================

    async def cancel(self, tenant_id: UUID, payment_id: UUID, reason: str) -> Payment:
        """Drop a pending payment; the reservation is left as it is"""
        async with transaction(self.session):
            payment = await self.get(tenant_id, payment_id)

            if payment.status == PaymentStatus.PAID.value:
                raise AlreadyPaid(f"Payment {payment.id} is confirmed, refund it instead")
            if payment.status != PaymentStatus.PENDING.value:
                raise InvalidTransition(f"Cannot cancel payment {payment.id} in status {payment.status}")

            payment.status = PaymentStatus.CANCELLED.value
            payment.notes = append_note(payment.notes, f"Cancelled: {reason}")
            await self.payments.save(payment)

        logger.info(
            "Payment cancelled",
            extra={"tenant_id": tenant_id, "reservation_id": payment.reservation_id, "payment_id": payment.id},
        )
        return payment

    async def refund(self, tenant_id: UUID, payment_id: UUID, reason: str) -> Payment:
        async with transaction(self.session):
            payment = await self.get(tenant_id, payment_id)

            if payment.status != PaymentStatus.PAID.value:
                raise NotPaid(f"Payment {payment.id} is {payment.status}, only paid payments can be refunded")

            refund_note = f"Refunded: {reason}"
            payment.status = PaymentStatus.REFUNDED.value
            payment.notes = append_note(payment.notes, refund_note)
            await self.payments.save(payment)

            reservation = await self.reservation_service.get(tenant_id, payment.reservation_id)
            if reservation.status != ReservationStatus.CANCELLED.value:
                reservation = await self.reservation_service.cancel(
                    tenant_id, reservation.id, refund_note, notify=False
                )
            after_commit(self.session, lambda: self.notifier.payment_refunded(reservation, payment, reason))

        logger.info(
            f"Payment refunded for {reservation.booking_code}",
            extra={"tenant_id": tenant_id, "reservation_id": reservation.id, "payment_id": payment.id},
        )
        return payment

    # ==================== QUERIES ====================

    async def get(self, tenant_id: UUID, payment_id: UUID) -> Payment:
        async with reading(self.session):
            payment = await self.payments.get_with_tenant_check(payment_id, tenant_id)
        if payment is None:
            raise PaymentNotFound(f"Payment {payment_id} not found")
        return payment

    async def get_by_reservation(self, tenant_id: UUID, reservation_id: UUID) -> Payment:
        async with reading(self.session):
            payment = await self.payments.get_by_reservation(reservation_id, tenant_id)
        if payment is None:
            raise PaymentNotFound(f"No payment for reservation {reservation_id}")
        return payment

    async def get_by_external_reference(self, tenant_id: UUID, reference: str) -> Payment:
        async with reading(self.session):
            payment = await self.payments.get_by_external_reference(reference, tenant_id)
        if payment is None:
            raise PaymentNotFound(f"No payment with reference {reference}")
        return payment

    async def list_for_tenant(
        self,
        tenant_id: UUID,
        status: Optional[Union[str, PaymentStatus]] = None,
        method: Optional[Union[str, PaymentMethod]] = None,
    ) -> List[Payment]:
        async with reading(self.session):
            return await self.payments.get_by_tenant(
                tenant_id,
                status=PaymentStatus(status).value if status is not None else None,
                method=PaymentMethod(method).value if method is not None else None,
            )

    async def total_paid(self, tenant_id: UUID) -> Decimal:
        async with reading(self.session):
            return await self.payments.total_paid(tenant_id)
