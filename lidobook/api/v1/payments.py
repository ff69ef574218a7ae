# lidobook/api/v1/payments.py
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from lidobook.api.dependencies import get_payment_service
from lidobook.core.constants import PaymentMethod, PaymentStatus
from lidobook.core.tenant import require_tenant
from lidobook.schemas.payment import (
    Payment as PaymentSchema,
    PaymentConfirm,
    PaymentCreate,
    PaymentReason,
    PaymentRevenue,
)
from lidobook.services.payment_service import PaymentService

router = APIRouter()


@router.post("/", response_model=PaymentSchema, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payload: PaymentCreate,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    """Record a payment; the amount must equal the reservation price"""
    return await service.create(
        tenant_id,
        reservation_id=payload.reservation_id,
        method=payload.method,
        amount=payload.amount,
        external_reference=payload.external_reference,
        notes=payload.notes,
    )


@router.get("/", response_model=List[PaymentSchema])
async def list_payments(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    method: Optional[PaymentMethod] = Query(None),
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.list_for_tenant(tenant_id, status=status_filter, method=method)


@router.get("/revenue", response_model=PaymentRevenue)
async def payment_revenue(
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return PaymentRevenue(total_paid=await service.total_paid(tenant_id))


@router.get("/reference/{reference}", response_model=PaymentSchema)
async def get_by_reference(
    reference: str,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.get_by_external_reference(tenant_id, reference)


@router.get("/reservation/{reservation_id}", response_model=PaymentSchema)
async def get_by_reservation(
    reservation_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.get_by_reservation(tenant_id, reservation_id)


@router.get("/{payment_id}", response_model=PaymentSchema)
async def get_payment(
    payment_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.get(tenant_id, payment_id)


@router.post("/{payment_id}/confirm", response_model=PaymentSchema)
async def confirm_payment(
    payment_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    """Confirm a payment taken at the desk; marks the reservation paid"""
    return await service.confirm(tenant_id, payment_id)


@router.post("/{payment_id}/confirm/paypal", response_model=PaymentSchema)
async def confirm_paypal(
    payment_id: UUID,
    payload: PaymentConfirm,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.confirm_paypal(tenant_id, payment_id, payload.external_reference)


@router.post("/{payment_id}/confirm/bank-transfer", response_model=PaymentSchema)
async def confirm_bank_transfer(
    payment_id: UUID,
    payload: PaymentConfirm,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.confirm_bank_transfer(tenant_id, payment_id, payload.external_reference)


@router.post("/{payment_id}/cancel", response_model=PaymentSchema)
async def cancel_payment(
    payment_id: UUID,
    payload: PaymentReason,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.cancel(tenant_id, payment_id, payload.reason)


@router.post("/{payment_id}/refund", response_model=PaymentSchema)
async def refund_payment(
    payment_id: UUID,
    payload: PaymentReason,
    tenant_id: UUID = Depends(require_tenant),
    service: PaymentService = Depends(get_payment_service),
):
    """Refund a confirmed payment and cancel its reservation"""
    return await service.refund(tenant_id, payment_id, payload.reason)
