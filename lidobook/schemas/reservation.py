# lidobook/schemas/reservation.py
from pydantic import BaseModel, UUID4, Field
from typing import Optional, Dict
from datetime import date, datetime
from decimal import Decimal
from lidobook.core.constants import ReservationStatus, ReservationType


class ReservationCreate(BaseModel):
    user_id: UUID4
    resource_id: UUID4
    start_date: date
    end_date: date
    reservation_type: ReservationType = ReservationType.DAILY
    notes: Optional[str] = None


class ReservationCancel(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class Reservation(BaseModel):
    id: UUID4
    tenant_id: UUID4
    user_id: UUID4
    resource_id: UUID4
    start_date: date
    end_date: date
    reservation_type: ReservationType
    total_price: Decimal
    status: ReservationStatus
    notes: Optional[str]
    booking_code: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PriceQuote(BaseModel):
    resource_id: UUID4
    start_date: date
    end_date: date
    reservation_type: ReservationType
    days: int
    total_price: Decimal


class ReservationStats(BaseModel):
    by_status: Dict[str, int]
    revenue: Decimal
