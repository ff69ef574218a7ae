# lidobook/db/repositories/tenant_repository.py
from typing import Optional
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from lidobook.db.models.tenant import Tenant
from lidobook.db.models.resource import Resource
from lidobook.db.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Tenant, session)

    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        """Get tenant by ID"""
        result = await self.session.execute(
            select(Tenant).where(Tenant.id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def count_active_resources(self, tenant_id: UUID) -> int:
        """Count active umbrellas in tenant"""
        result = await self.session.execute(
            select(func.count(Resource.id))
            .where(Resource.tenant_id == tenant_id)
            .where(Resource.is_active.is_(True))
        )
        return result.scalar() or 0
