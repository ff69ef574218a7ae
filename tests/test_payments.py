"""
Payment ledger tests
Tests: creation guards, confirmation variants, cascade atomicity, cancel, refund
"""
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from lidobook.core.exceptions import (
    AlreadyConfirmed,
    AlreadyPaid,
    AmountMismatch,
    DuplicatePayment,
    InvalidTransition,
    NotPaid,
    PaymentNotFound,
    ReservationNotFound,
    WrongMethod,
)
from lidobook.services.payment_service import PaymentService
from lidobook.services.reservation_service import ReservationService


@pytest.mark.asyncio
class TestPaymentLedger:
    """One payment per reservation, cascading into the reservation status"""

    @pytest.fixture
    async def reservation(self, reservation_service: ReservationService, tenant, umbrella, user_id):
        """Three standard days: 90.00"""
        return await reservation_service.create(tenant.id, user_id, umbrella.id, date(2024, 7, 1), date(2024, 7, 3))

    # ==================== Creation ====================

    async def test_create_pending(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "credit_card", Decimal("90.00"))

        assert payment.status == "pending"
        assert payment.amount == Decimal("90.00")
        assert payment.method == "credit_card"
        assert payment.reservation_id == reservation.id
        assert payment.paid_at is None
        assert payment.is_online is True

    async def test_amount_must_match_price(self, payment_service: PaymentService, tenant, reservation):
        with pytest.raises(AmountMismatch):
            await payment_service.create(tenant.id, reservation.id, "cash", Decimal("89.99"))

    async def test_amount_compared_as_decimal(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90"))
        assert payment.amount == Decimal("90.00")
        assert payment.is_online is False

    async def test_one_payment_per_reservation(self, payment_service: PaymentService, tenant, reservation):
        reservation_id = reservation.id
        await payment_service.create(tenant.id, reservation_id, "cash", Decimal("90.00"))

        with pytest.raises(DuplicatePayment):
            await payment_service.create(tenant.id, reservation_id, "paypal", Decimal("90.00"))

    async def test_unique_constraint_backs_the_duplicate_check(self, payment_service: PaymentService, tenant, reservation):
        """A second payment racing past the existence check is stopped by the store"""
        reservation_id, booking_code = reservation.id, reservation.booking_code
        first = await payment_service.create(tenant.id, reservation_id, "cash", Decimal("90.00"))
        first_id = first.id

        with patch.object(payment_service.payments, "exists_for_reservation", AsyncMock(return_value=False)):
            with pytest.raises(DuplicatePayment) as exc_info:
                await payment_service.create(tenant.id, reservation_id, "paypal", Decimal("90.00"))

        assert booking_code in exc_info.value.detail
        assert (await payment_service.get_by_reservation(tenant.id, reservation_id)).id == first_id
        assert len(await payment_service.list_for_tenant(tenant.id)) == 1

    async def test_unknown_reservation(self, payment_service: PaymentService, other_tenant, reservation):
        with pytest.raises(ReservationNotFound):
            await payment_service.create(other_tenant.id, reservation.id, "cash", Decimal("90.00"))

    # ==================== Confirmation ====================

    async def test_confirm_cascades_to_reservation(self, payment_service, reservation_service, notifier, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "credit_card", Decimal("90.00"))

        confirmed = await payment_service.confirm(tenant.id, payment.id)

        assert confirmed.status == "paid"
        assert confirmed.paid_at is not None
        assert (await reservation_service.get(tenant.id, reservation.id)).status == "paid"
        assert notifier.names() == ["payment_confirmed"]

    async def test_confirm_twice(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90.00"))
        payment_id = payment.id
        await payment_service.confirm(tenant.id, payment_id)

        with pytest.raises(AlreadyConfirmed):
            await payment_service.confirm(tenant.id, payment_id)

    async def test_confirm_paypal(self, payment_service, reservation_service, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "paypal", Decimal("90.00"))

        confirmed = await payment_service.confirm_paypal(tenant.id, payment.id, "PAYID-123")

        assert confirmed.status == "paid"
        assert confirmed.external_reference == "PAYID-123"
        assert (await payment_service.get_by_external_reference(tenant.id, "PAYID-123")).id == payment.id
        assert (await reservation_service.get(tenant.id, reservation.id)).status == "paid"

    async def test_confirm_bank_transfer(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "bank_transfer", Decimal("90.00"))

        confirmed = await payment_service.confirm_bank_transfer(tenant.id, payment.id, "CRO-0001")
        assert confirmed.external_reference == "CRO-0001"
        assert confirmed.status == "paid"

    async def test_method_gated_confirmation(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90.00"))
        payment_id = payment.id

        with pytest.raises(WrongMethod):
            await payment_service.confirm_paypal(tenant.id, payment_id, "PAYID-1")
        with pytest.raises(WrongMethod):
            await payment_service.confirm_bank_transfer(tenant.id, payment_id, "CRO-1")

        assert (await payment_service.get(tenant.id, payment_id)).status == "pending"

    async def test_cascade_failure_rolls_back_payment(self, payment_service, reservation_service, notifier, tenant, reservation):
        reservation_id = reservation.id
        payment = await payment_service.create(tenant.id, reservation_id, "cash", Decimal("90.00"))
        payment_id = payment.id
        await reservation_service.cancel(tenant.id, reservation_id, "left early")
        notifier.events.clear()

        with pytest.raises(InvalidTransition):
            await payment_service.confirm(tenant.id, payment_id)

        fresh = await payment_service.get(tenant.id, payment_id)
        assert fresh.status == "pending"
        assert fresh.paid_at is None
        assert (await reservation_service.get(tenant.id, reservation_id)).status == "cancelled"
        assert notifier.events == []

    # ==================== Cancel / Refund ====================

    async def test_cancel_pending(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90.00"))

        cancelled = await payment_service.cancel(tenant.id, payment.id, "customer paid with card")
        assert cancelled.status == "cancelled"
        assert cancelled.notes == "Cancelled: customer paid with card"

    async def test_cancel_paid_rejected(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90.00"))
        payment_id = payment.id
        await payment_service.confirm(tenant.id, payment_id)

        with pytest.raises(AlreadyPaid):
            await payment_service.cancel(tenant.id, payment_id, "oops")

    async def test_refund_cascades_cancel(self, payment_service, reservation_service, notifier, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "credit_card", Decimal("90.00"))
        await payment_service.confirm(tenant.id, payment.id)

        refunded = await payment_service.refund(tenant.id, payment.id, "duplicate charge")

        assert refunded.status == "refunded"
        assert "Refunded: duplicate charge" in refunded.notes
        cancelled = await reservation_service.get(tenant.id, reservation.id)
        assert cancelled.status == "cancelled"
        assert "Refunded: duplicate charge" in cancelled.notes
        assert notifier.names() == ["payment_confirmed", "payment_refunded"]

    async def test_refund_releases_umbrella(self, payment_service, reservation_service, tenant, umbrella, user_id, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90.00"))
        await payment_service.confirm(tenant.id, payment.id)
        await payment_service.refund(tenant.id, payment.id, "beach closed")

        rebooked = await reservation_service.create(tenant.id, user_id, umbrella.id, date(2024, 7, 2), date(2024, 7, 2))
        assert rebooked.status == "pending"

    async def test_refund_requires_paid(self, payment_service: PaymentService, tenant, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "cash", Decimal("90.00"))

        with pytest.raises(NotPaid):
            await payment_service.refund(tenant.id, payment.id, "nothing to refund")

    async def test_refund_of_completed_stay_rolls_back(self, payment_service, reservation_service, tenant, reservation):
        reservation_id = reservation.id
        payment = await payment_service.create(tenant.id, reservation_id, "cash", Decimal("90.00"))
        payment_id = payment.id
        await payment_service.confirm(tenant.id, payment_id)
        await reservation_service.complete(tenant.id, reservation_id)

        with pytest.raises(InvalidTransition):
            await payment_service.refund(tenant.id, payment_id, "complaint")

        assert (await payment_service.get(tenant.id, payment_id)).status == "paid"

    # ==================== Queries ====================

    async def test_queries_and_revenue(self, payment_service, reservation_service, tenant, other_tenant, umbrella, user_id, reservation):
        payment = await payment_service.create(tenant.id, reservation.id, "paypal", Decimal("90.00"))
        await payment_service.confirm_paypal(tenant.id, payment.id, "PAYID-9")
        second = await reservation_service.create(tenant.id, user_id, umbrella.id, date(2024, 7, 10), date(2024, 7, 10))
        pending = await payment_service.create(tenant.id, second.id, "cash", Decimal("30.00"))

        assert (await payment_service.get_by_reservation(tenant.id, reservation.id)).id == payment.id
        assert [p.id for p in await payment_service.list_for_tenant(tenant.id, status="pending")] == [pending.id]
        assert [p.id for p in await payment_service.list_for_tenant(tenant.id, method="paypal")] == [payment.id]
        assert len(await payment_service.list_for_tenant(tenant.id)) == 2
        assert await payment_service.total_paid(tenant.id) == Decimal("90.00")

        assert await payment_service.list_for_tenant(other_tenant.id) == []
        assert await payment_service.total_paid(other_tenant.id) == Decimal("0.00")
        with pytest.raises(PaymentNotFound):
            await payment_service.get(other_tenant.id, payment.id)
