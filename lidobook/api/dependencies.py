# lidobook/api/dependencies.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.db.database import get_db
from lidobook.services.notification_service import NotificationService
from lidobook.services.payment_service import PaymentService
from lidobook.services.reservation_service import ReservationService
from lidobook.services.resource_service import ResourceService


def get_notifier() -> NotificationService:
    """Notification sender; no recipient resolver is wired until an identity store is"""
    return NotificationService()


def get_resource_service(db: AsyncSession = Depends(get_db)) -> ResourceService:
    return ResourceService(db)


def get_reservation_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> ReservationService:
    return ReservationService(db, notifier)


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> PaymentService:
    return PaymentService(db, notifier)
