# lidobook/api/v1/resources.py
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from lidobook.api.dependencies import get_resource_service
from lidobook.core.constants import ResourceCategory
from lidobook.core.tenant import require_tenant
from lidobook.schemas.resource import (
    Resource as ResourceSchema,
    ResourceBatchCreate,
    ResourceCapacity,
    ResourceCreate,
    ResourceUpdate,
)
from lidobook.services.availability_service import AvailabilityService
from lidobook.services.resource_service import ResourceService, ResourceSpec

router = APIRouter()


@router.post("/", response_model=ResourceSchema, status_code=status.HTTP_201_CREATED)
async def create_resource(
    payload: ResourceCreate,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    """Add an umbrella, subject to the plan limit"""
    return await service.create_resource(tenant_id, **payload.model_dump(mode="json"))


@router.post("/batch", response_model=List[ResourceSchema], status_code=status.HTTP_201_CREATED)
async def create_resources(
    payload: ResourceBatchCreate,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    """Add several umbrellas; all of them are created or none is"""
    specs = [ResourceSpec(**item.model_dump(mode="json")) for item in payload.resources]
    return await service.create_batch(tenant_id, specs)


@router.get("/", response_model=List[ResourceSchema])
async def list_resources(
    active_only: bool = Query(False),
    row_label: Optional[str] = Query(None),
    category: Optional[ResourceCategory] = Query(None),
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.list_resources(
        tenant_id,
        active_only=active_only,
        row_label=row_label,
        category=category.value if category else None,
    )


@router.get("/available", response_model=List[ResourceSchema])
async def list_available_resources(
    start_date: date = Query(...),
    end_date: date = Query(...),
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    """Active umbrellas free for the whole range"""
    return await AvailabilityService(service.session).find_available_resources(tenant_id, start_date, end_date)


@router.get("/capacity", response_model=ResourceCapacity)
async def get_capacity(
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.capacity(tenant_id)


@router.get("/{resource_id}", response_model=ResourceSchema)
async def get_resource(
    resource_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.get_resource(tenant_id, resource_id)


@router.patch("/{resource_id}", response_model=ResourceSchema)
async def update_resource(
    resource_id: UUID,
    payload: ResourceUpdate,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.update_resource(
        tenant_id, resource_id, **payload.model_dump(mode="json", exclude_unset=True)
    )


@router.post("/{resource_id}/deactivate", response_model=ResourceSchema)
async def deactivate_resource(
    resource_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.deactivate(tenant_id, resource_id)


@router.post("/{resource_id}/activate", response_model=ResourceSchema)
async def activate_resource(
    resource_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.activate(tenant_id, resource_id)


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resource(
    resource_id: UUID,
    tenant_id: UUID = Depends(require_tenant),
    service: ResourceService = Depends(get_resource_service),
):
    """Hard delete; refused while the umbrella has reservations"""
    await service.delete(tenant_id, resource_id)
