# lidobook/services/pricing.py
"""
Pricing engine.

Pure functions over ``Decimal``:

    days  = (end - start) + 1            inclusive range
    price = daily_rate * days * category multiplier * type discount

rounded half-up to cents. The discount follows the stated reservation type,
not the number of days booked.
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from lidobook.core.constants import (
    DAILY_BASE_RATE,
    RESERVATION_DISCOUNTS,
    ReservationType,
    category_multiplier,
)
from lidobook.core.exceptions import InvalidDateRange

CENTS = Decimal("0.01")


def count_days(start: date, end: date) -> int:
    """Number of days in the inclusive range [start, end]"""
    if end < start:
        raise InvalidDateRange(f"End date {end} is before start date {start}")
    return (end - start).days + 1


def discount_for(reservation_type: Union[str, ReservationType]) -> Decimal:
    return RESERVATION_DISCOUNTS[ReservationType(reservation_type)]


def calculate_price(
    multiplier: Decimal,
    start: date,
    end: date,
    reservation_type: Union[str, ReservationType],
    daily_rate: Decimal = DAILY_BASE_RATE,
) -> Decimal:
    """Total price for a booking, exact to the cent"""
    days = count_days(start, end)

    price = daily_rate * days
    price = price * Decimal(str(multiplier))
    price = price * discount_for(reservation_type)

    return price.quantize(CENTS, rounding=ROUND_HALF_UP)


def price_for_resource(
    category: str,
    start: date,
    end: date,
    reservation_type: Union[str, ReservationType],
) -> Decimal:
    """Price an umbrella of ``category`` with the system daily rate"""
    return calculate_price(category_multiplier(category), start, end, reservation_type)
