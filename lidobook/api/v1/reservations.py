# lidobook/api/v1/reservations.py
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from lidobook.api.dependencies import get_reservation_service, get_resource_service
from lidobook.core.constants import ReservationStatus, ReservationType
from lidobook.core.tenant import require_tenant
from lidobook.schemas.reservation import (
    PriceQuote,
    Reservation as ReservationSchema,
    ReservationCancel,
    ReservationCreate,
    ReservationStats,
)
from lidobook.services.pricing import count_days, price_for_resource
from lidobook.services.reservation_service import ReservationService
from lidobook.services.resource_service import ResourceService

router = APIRouter()


@router.post("/", response_model=ReservationSchema, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    """Book an umbrella; the booking starts out pending"""
    return await service.create(
        tenant_id,
        user_id=payload.user_id,
        resource_id=payload.resource_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reservation_type=payload.reservation_type,
        notes=payload.notes,
    )


@router.get("/", response_model=List[ReservationSchema])
async def list_reservations(
    user_id: Optional[UUID] = Query(None),
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    resource_id: Optional[UUID] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    List reservations of the current tenant.

    Query parameters (one filter at a time, in this order of precedence):
    - start_date + end_date: reservations overlapping the range, by start date
    - user_id: bookings of one customer
    - status: bookings in one status
    - resource_id: bookings of one umbrella
    """
    if start_date is not None and end_date is not None:
        return await service.list_in_range(tenant_id, start_date, end_date)
    if user_id is not None:
        return await service.list_by_user(tenant_id, user_id)
    if status_filter is not None:
        return await service.list_by_status(tenant_id, status_filter)
    if resource_id is not None:
        return await service.list_by_resource(tenant_id, resource_id)
    return await service.list_for_tenant(tenant_id)


@router.get("/active", response_model=List[ReservationSchema])
async def list_active_reservations(
    on: Optional[date] = Query(None),
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    """Confirmed or paid bookings running today"""
    return await service.list_active(tenant_id, on)


@router.get("/stats", response_model=ReservationStats)
async def reservation_stats(
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.stats(tenant_id)


@router.get("/quote", response_model=PriceQuote)
async def quote(
    resource_id: UUID = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    reservation_type: ReservationType = Query(ReservationType.DAILY),
    tenant_id: UUID = Depends(require_tenant),
    resources: ResourceService = Depends(get_resource_service),
):
    """Price a booking without creating it"""
    resource = await resources.get_resource(tenant_id, resource_id)
    return PriceQuote(
        resource_id=resource.id,
        start_date=start_date,
        end_date=end_date,
        reservation_type=reservation_type,
        days=count_days(start_date, end_date),
        total_price=price_for_resource(resource.category, start_date, end_date, reservation_type),
    )


@router.get("/code/{booking_code}", response_model=ReservationSchema)
async def get_by_booking_code(
    booking_code: str,
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.get_by_booking_code(tenant_id, booking_code)


@router.get("/{reservation_id}", response_model=ReservationSchema)
async def get_reservation(
    reservation_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.get(tenant_id, reservation_id)


@router.post("/{reservation_id}/confirm", response_model=ReservationSchema)
async def confirm_reservation(
    reservation_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.confirm(tenant_id, reservation_id)


@router.post("/{reservation_id}/complete", response_model=ReservationSchema)
async def complete_reservation(
    reservation_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.complete(tenant_id, reservation_id)


@router.post("/{reservation_id}/cancel", response_model=ReservationSchema)
async def cancel_reservation(
    reservation_id: UUID,
    payload: ReservationCancel,
    tenant_id: UUID = Depends(require_tenant),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.cancel(tenant_id, reservation_id, payload.reason)
