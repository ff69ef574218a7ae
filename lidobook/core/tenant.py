"""Tenant dependency resolver for FastAPI routes."""
from typing import Optional
from uuid import UUID
from fastapi import Header, HTTPException


async def require_tenant(
    x_tenant_id: Optional[str] = Header(None),
) -> UUID:
    """
    FastAPI dependency that extracts and validates the tenant ID from request headers.

    The resolved id is passed explicitly into every service call; nothing is
    stored in request-global or task-local state.

    Raises:
        HTTPException: If tenant ID is missing or invalid
    """
    if not x_tenant_id:
        raise HTTPException(status_code=400, detail="X-Tenant-ID header is required")

    try:
        return UUID(x_tenant_id)
    except (ValueError, AttributeError):
        raise HTTPException(status_code=400, detail="Invalid tenant ID format")
