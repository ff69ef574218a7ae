# lidobook/db/models/tenant.py
import uuid

from sqlalchemy import Column, String, CheckConstraint, Uuid

from lidobook.db.base import BaseModel


class Tenant(BaseModel):
    """Tenant model for multi-tenancy: one beach club"""
    __tablename__ = "tenants"
    __table_args__ = (
        CheckConstraint(
            "plan IN ('free', 'basic', 'pro', 'enterprise')",
            name="tenants_plan_check",
        ),
        CheckConstraint(
            "status IN ('trial', 'active', 'suspended', 'expired', 'cancelled')",
            name="tenants_status_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(200), nullable=False)

    # Subscription plan bounds the number of active umbrellas
    plan = Column(String(20), default="free", nullable=False, index=True)
    status = Column(String(20), default="trial", nullable=False, index=True)
