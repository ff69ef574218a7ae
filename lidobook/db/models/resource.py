# lidobook/db/models/resource.py
import uuid

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, UniqueConstraint, CheckConstraint, Uuid

from lidobook.db.base import BaseModel


class Resource(BaseModel):
    """
    A bookable umbrella.

    The umbrella number is unique within its tenant. Soft deletion clears
    ``is_active``; the category drives the price multiplier.
    """
    __tablename__ = "resources"
    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_resources_tenant_number"),
        CheckConstraint(
            "category IN ('standard', 'premium', 'vip', 'family')",
            name="resources_category_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)

    number = Column(Integer, nullable=False)
    row_label = Column(String(10), nullable=False)  # A, B, C, ...
    category = Column(String(20), nullable=False, default="standard")
    description = Column(String(500), nullable=True)

    # Position on the beach map
    position_x = Column(Integer, nullable=True)
    position_y = Column(Integer, nullable=True)

    notes = Column(String(1000), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
