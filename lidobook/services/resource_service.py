# lidobook/services/resource_service.py
"""
Resource registry: the umbrellas of a beach club.

Creation is bounded by the tenant's plan (active umbrellas only) and numbers
are unique per tenant. Deactivation is the normal way to retire an umbrella;
hard deletion is refused while any reservation references it.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.core.constants import ResourceCategory, max_resources_for
from lidobook.core.exceptions import (
    CapacityExceeded,
    DuplicateNumber,
    HasActiveBookings,
    ResourceNotFound,
    TenantNotFound,
)
from lidobook.core.logging import logger
from lidobook.db.database import reading, transaction
from lidobook.db.models.resource import Resource
from lidobook.db.models.tenant import Tenant
from lidobook.db.repositories.resource_repository import ResourceRepository
from lidobook.db.repositories.tenant_repository import TenantRepository

UPDATABLE_FIELDS = ("number", "row_label", "category", "description", "position_x", "position_y", "notes")


@dataclass
class ResourceSpec:
    """Input for one umbrella in a batch"""
    number: int
    row_label: str
    category: str = ResourceCategory.STANDARD.value
    description: Optional[str] = None
    position_x: Optional[int] = None
    position_y: Optional[int] = None
    notes: Optional[str] = None


class ResourceService:
    """Service layer for umbrella inventory"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.resources = ResourceRepository(session)
        self.tenants = TenantRepository(session)

    # ==================== COMMANDS ====================

    async def create_resource(
        self,
        tenant_id: UUID,
        number: int,
        row_label: str,
        category: str = ResourceCategory.STANDARD.value,
        description: Optional[str] = None,
        position_x: Optional[int] = None,
        position_y: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Resource:
        spec = ResourceSpec(
            number=number,
            row_label=row_label,
            category=category,
            description=description,
            position_x=position_x,
            position_y=position_y,
            notes=notes,
        )
        created = await self.create_batch(tenant_id, [spec])
        return created[0]

    async def create_batch(self, tenant_id: UUID, specs: List[ResourceSpec]) -> List[Resource]:
        """Create several umbrellas at once; either all are created or none"""
        async with transaction(self.session):
            tenant = await self._get_tenant(tenant_id)
            await self._check_capacity(tenant, len(specs))

            numbers = [spec.number for spec in specs]
            duplicates = {n for n in numbers if numbers.count(n) > 1}
            duplicates.update(await self.resources.existing_numbers(tenant_id, numbers))
            if duplicates:
                raise DuplicateNumber(
                    f"Umbrella number(s) already exist: {', '.join(str(n) for n in sorted(duplicates))}"
                )

            resources = [
                Resource(
                    tenant_id=tenant_id,
                    number=spec.number,
                    row_label=spec.row_label,
                    category=ResourceCategory(spec.category or ResourceCategory.STANDARD).value,
                    description=spec.description,
                    position_x=spec.position_x,
                    position_y=spec.position_y,
                    notes=spec.notes,
                    is_active=True,
                )
                for spec in specs
            ]
            try:
                await self.resources.add_all(resources)
            except IntegrityError as exc:
                # Lost a race against a concurrent creation with the same number
                raise DuplicateNumber("Umbrella number already exists") from exc

        logger.info(
            f"Created {len(resources)} umbrella(s)",
            extra={"tenant_id": tenant_id},
        )
        return resources

    async def update_resource(self, tenant_id: UUID, resource_id: UUID, **changes: Any) -> Resource:
        """Partial update; ``None`` values are ignored"""
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        async with transaction(self.session):
            resource = await self.get_resource(tenant_id, resource_id)

            number = changes.get("number")
            if number is not None and number != resource.number:
                if await self.resources.existing_numbers(tenant_id, [number]):
                    raise DuplicateNumber(f"Umbrella number {number} already exists")

            for field, value in changes.items():
                if value is None:
                    continue
                if field == "category":
                    value = ResourceCategory(value).value
                setattr(resource, field, value)

            try:
                await self.resources.save(resource)
            except IntegrityError as exc:
                raise DuplicateNumber("Umbrella number already exists") from exc

        return resource

    async def deactivate(self, tenant_id: UUID, resource_id: UUID) -> Resource:
        """Soft delete: existing reservations are left untouched"""
        async with transaction(self.session):
            resource = await self.get_resource(tenant_id, resource_id)
            resource.is_active = False
            await self.resources.save(resource)

        logger.info("Umbrella deactivated", extra={"tenant_id": tenant_id, "resource_id": resource_id})
        return resource

    async def activate(self, tenant_id: UUID, resource_id: UUID) -> Resource:
        async with transaction(self.session):
            resource = await self.get_resource(tenant_id, resource_id)
            if not resource.is_active:
                tenant = await self._get_tenant(tenant_id)
                await self._check_capacity(tenant, 1)
                resource.is_active = True
                await self.resources.save(resource)

        logger.info("Umbrella activated", extra={"tenant_id": tenant_id, "resource_id": resource_id})
        return resource

    async def delete(self, tenant_id: UUID, resource_id: UUID) -> None:
        """Hard delete, refused while any reservation references the umbrella"""
        async with transaction(self.session):
            resource = await self.get_resource(tenant_id, resource_id)

            live = await self.resources.count_reservations(resource.id, live_only=True)
            if live:
                raise HasActiveBookings(
                    f"Umbrella {resource.number} has {live} active reservation(s)"
                )
            if await self.resources.count_reservations(resource.id):
                raise HasActiveBookings(
                    f"Umbrella {resource.number} has booking history; deactivate it instead"
                )

            await self.resources.delete(resource.id)

        logger.info("Umbrella deleted", extra={"tenant_id": tenant_id, "resource_id": resource_id})

    # ==================== QUERIES ====================

    async def get_resource(self, tenant_id: UUID, resource_id: UUID) -> Resource:
        async with reading(self.session):
            resource = await self.resources.get_with_tenant_check(resource_id, tenant_id)
        if resource is None:
            raise ResourceNotFound(f"Umbrella {resource_id} not found")
        return resource

    async def list_resources(
        self,
        tenant_id: UUID,
        active_only: bool = False,
        row_label: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Resource]:
        if category is not None:
            category = ResourceCategory(category).value
        async with reading(self.session):
            return await self.resources.get_by_tenant(
                tenant_id, active_only=active_only, row_label=row_label, category=category
            )

    async def count(self, tenant_id: UUID, active_only: bool = False) -> int:
        async with reading(self.session):
            return await self.resources.count_by_tenant(tenant_id, active_only=active_only)

    async def capacity(self, tenant_id: UUID) -> Dict[str, int]:
        """Plan ceiling and current usage"""
        tenant = await self._get_tenant(tenant_id)
        async with reading(self.session):
            active = await self.tenants.count_active_resources(tenant_id)
        return {
            "max_resources": max_resources_for(tenant.plan),
            "active_resources": active,
        }

    # ==================== HELPERS ====================

    async def _get_tenant(self, tenant_id: UUID) -> Tenant:
        async with reading(self.session):
            tenant = await self.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFound(f"Tenant {tenant_id} not found")
        return tenant

    async def _check_capacity(self, tenant: Tenant, adding: int) -> None:
        limit = max_resources_for(tenant.plan)
        if limit < 0:
            return

        current = await self.tenants.count_active_resources(tenant.id)
        if current + adding > limit:
            logger.warning(
                f"Umbrella limit reached: {current} active, {adding} requested, plan allows {limit}",
                extra={"tenant_id": tenant.id},
            )
            raise CapacityExceeded(
                f"Umbrella limit reached for plan {tenant.plan} ({limit}); upgrade to add more"
            )
