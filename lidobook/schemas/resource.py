# lidobook/schemas/resource.py
from pydantic import BaseModel, UUID4, Field
from typing import Optional, List
from datetime import datetime
from lidobook.core.constants import ResourceCategory


class ResourceBase(BaseModel):
    number: int = Field(..., ge=1)
    row_label: str = Field(..., min_length=1, max_length=10)
    category: ResourceCategory = ResourceCategory.STANDARD
    description: Optional[str] = Field(None, max_length=500)
    position_x: Optional[int] = None
    position_y: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ResourceCreate(ResourceBase):
    pass


class ResourceBatchCreate(BaseModel):
    resources: List[ResourceCreate] = Field(..., min_length=1)


class ResourceUpdate(BaseModel):
    number: Optional[int] = Field(None, ge=1)
    row_label: Optional[str] = Field(None, min_length=1, max_length=10)
    category: Optional[ResourceCategory] = None
    description: Optional[str] = Field(None, max_length=500)
    position_x: Optional[int] = None
    position_y: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=1000)


class Resource(ResourceBase):
    id: UUID4
    tenant_id: UUID4
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ResourceCapacity(BaseModel):
    max_resources: int
    active_resources: int
