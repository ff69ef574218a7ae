# lidobook/core/constants.py
from decimal import Decimal
from enum import Enum
from typing import Dict, Any, FrozenSet


class PlanType(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class TenantStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ResourceCategory(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    VIP = "vip"
    FAMILY = "family"


class ReservationType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    PAYPAL = "paypal"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


# Plan Limits Configuration
PLAN_LIMITS: Dict[str, Dict[str, Any]] = {
    PlanType.FREE: {
        "max_resources": 10,
        "monthly_price": Decimal("0.00"),
    },
    PlanType.BASIC: {
        "max_resources": 50,
        "monthly_price": Decimal("9.99"),
    },
    PlanType.PRO: {
        "max_resources": 200,
        "monthly_price": Decimal("29.99"),
    },
    PlanType.ENTERPRISE: {
        "max_resources": -1,  # Unlimited
        "monthly_price": Decimal("99.99"),
    },
}

# Price multiplier per umbrella category
CATEGORY_MULTIPLIERS: Dict[str, Decimal] = {
    ResourceCategory.STANDARD: Decimal("1.0"),
    ResourceCategory.PREMIUM: Decimal("1.5"),
    ResourceCategory.VIP: Decimal("2.0"),
    ResourceCategory.FAMILY: Decimal("1.8"),
}

# Discount factor per reservation type, chosen by the stated type and not by
# the length of the date range
RESERVATION_DISCOUNTS: Dict[str, Decimal] = {
    ReservationType.DAILY: Decimal("1.00"),
    ReservationType.WEEKLY: Decimal("0.90"),
    ReservationType.MONTHLY: Decimal("0.80"),
    ReservationType.YEARLY: Decimal("0.60"),
}

DAILY_BASE_RATE = Decimal("30.00")

ONLINE_PAYMENT_METHODS: FrozenSet[str] = frozenset({
    PaymentMethod.PAYPAL.value,
    PaymentMethod.CREDIT_CARD.value,
})

# Statuses that no longer hold the umbrella
TERMINAL_RESERVATION_STATUSES: FrozenSet[str] = frozenset({
    ReservationStatus.CANCELLED.value,
    ReservationStatus.REFUNDED.value,
})

REVENUE_RESERVATION_STATUSES: FrozenSet[str] = frozenset({
    ReservationStatus.PAID.value,
    ReservationStatus.COMPLETED.value,
})

ACTIVE_TODAY_STATUSES: FrozenSet[str] = frozenset({
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.PAID.value,
})


def max_resources_for(plan: str) -> int:
    """Resource ceiling for a plan, -1 meaning unlimited"""
    return PLAN_LIMITS[PlanType(plan)]["max_resources"]


def category_multiplier(category: str) -> Decimal:
    return CATEGORY_MULTIPLIERS[ResourceCategory(category)]


def is_online_method(method: str) -> bool:
    return PaymentMethod(method).value in ONLINE_PAYMENT_METHODS
