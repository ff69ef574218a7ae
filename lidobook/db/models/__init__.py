# lidobook/db/models/__init__.py
from lidobook.db.models.tenant import Tenant
from lidobook.db.models.resource import Resource
from lidobook.db.models.reservation import Reservation, ResourceOccupancy
from lidobook.db.models.payment import Payment

__all__ = ["Tenant", "Resource", "Reservation", "ResourceOccupancy", "Payment"]
