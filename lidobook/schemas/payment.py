# lidobook/schemas/payment.py
from pydantic import BaseModel, UUID4, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from lidobook.core.constants import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    reservation_id: UUID4
    method: PaymentMethod
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    external_reference: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class PaymentConfirm(BaseModel):
    """Gateway transaction id (PayPal) or wire transfer reference"""
    external_reference: str = Field(..., min_length=1, max_length=255)


class PaymentReason(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class Payment(BaseModel):
    id: UUID4
    reservation_id: UUID4
    method: PaymentMethod
    amount: Decimal
    status: PaymentStatus
    external_reference: Optional[str]
    paid_at: Optional[datetime]
    is_online: bool
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaymentRevenue(BaseModel):
    total_paid: Decimal
