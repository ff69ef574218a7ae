# lidobook/core/exceptions.py
"""Booking error taxonomy.

Every failure the core reports is a ``BookingError`` subclass carrying a stable
``code`` and a human-readable ``detail``. The request boundary maps codes to
transport statuses; the core never retries and never downgrades them.
"""
from typing import Optional


class BookingError(Exception):
    code = "BOOKING_ERROR"
    default_detail = "Booking operation failed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.detail}


class NotFound(BookingError):
    code = "NOT_FOUND"
    default_detail = "Entity not found"


class TenantNotFound(NotFound):
    code = "TENANT_NOT_FOUND"
    default_detail = "Tenant not found"


class ResourceNotFound(NotFound):
    code = "RESOURCE_NOT_FOUND"
    default_detail = "Umbrella not found"


class ReservationNotFound(NotFound):
    code = "RESERVATION_NOT_FOUND"
    default_detail = "Reservation not found"


class PaymentNotFound(NotFound):
    code = "PAYMENT_NOT_FOUND"
    default_detail = "Payment not found"


class DuplicateNumber(BookingError):
    code = "DUPLICATE_NUMBER"
    default_detail = "Umbrella number already exists"


class DuplicatePayment(BookingError):
    code = "DUPLICATE_PAYMENT"
    default_detail = "A payment already exists for this reservation"


class CapacityExceeded(BookingError):
    code = "CAPACITY_EXCEEDED"
    default_detail = "Umbrella limit reached for the current plan"


class ResourceUnavailable(BookingError):
    code = "RESOURCE_UNAVAILABLE"
    default_detail = "Umbrella is not available"


class DateRangeConflict(BookingError):
    code = "DATE_RANGE_CONFLICT"
    default_detail = "Umbrella is already booked for the selected dates"


class InvalidDateRange(BookingError):
    code = "INVALID_DATE_RANGE"
    default_detail = "End date must not be before start date"


class HasActiveBookings(BookingError):
    code = "HAS_ACTIVE_BOOKINGS"
    default_detail = "Umbrella is referenced by reservations"


class AmountMismatch(BookingError):
    code = "AMOUNT_MISMATCH"
    default_detail = "Payment amount does not match the reservation price"


class WrongMethod(BookingError):
    code = "WRONG_METHOD"
    default_detail = "Payment method does not match this confirmation"


class InvalidTransition(BookingError):
    code = "INVALID_TRANSITION"
    default_detail = "Status transition not allowed"


class AlreadyConfirmed(BookingError):
    code = "ALREADY_CONFIRMED"
    default_detail = "Payment already confirmed"


class AlreadyPaid(BookingError):
    code = "ALREADY_PAID"
    default_detail = "Cannot cancel a confirmed payment"


class NotPaid(BookingError):
    code = "NOT_PAID"
    default_detail = "Only confirmed payments can be refunded"


class StorageError(BookingError):
    code = "STORAGE_ERROR"
    default_detail = "Storage layer failure"
