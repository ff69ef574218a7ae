# lidobook/db/models/payment.py
import uuid

from sqlalchemy import Column, String, DateTime, Numeric, Text, ForeignKey, CheckConstraint, Uuid

from lidobook.core.constants import is_online_method
from lidobook.db.base import BaseModel


class Payment(BaseModel):
    """
    Settlement record owned by exactly one reservation.

    ``reservation_id`` is unique: a reservation never has two payments.
    """
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled', 'refunded')",
            name="payments_status_check",
        ),
        CheckConstraint(
            "method IN ('paypal', 'credit_card', 'bank_transfer', 'cash')",
            name="payments_method_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    reservation_id = Column(
        Uuid, ForeignKey("reservations.id"), nullable=False, unique=True, index=True
    )
    method = Column(String(20), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)

    # Gateway transaction id or wire transfer reference
    external_reference = Column(String(255), nullable=True, index=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    @property
    def is_online(self) -> bool:
        """PayPal and card payments settle through a gateway"""
        return is_online_method(self.method)
