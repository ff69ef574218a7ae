# alembic/versions/001_initial_schema.py
"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create tenants table
    op.create_table(
        'tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('plan', sa.String(20), server_default=sa.text("'free'"), nullable=False, index=True),
        sa.Column('status', sa.String(20), server_default=sa.text("'trial'"), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("plan IN ('free', 'basic', 'pro', 'enterprise')", name='tenants_plan_check'),
        sa.CheckConstraint(
            "status IN ('trial', 'active', 'suspended', 'expired', 'cancelled')",
            name='tenants_status_check',
        ),
    )

    # Create resources table (umbrellas)
    op.create_table(
        'resources',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('number', sa.Integer, nullable=False),
        sa.Column('row_label', sa.String(10), nullable=False),
        sa.Column('category', sa.String(20), server_default=sa.text("'standard'"), nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('position_x', sa.Integer),
        sa.Column('position_y', sa.Integer),
        sa.Column('notes', sa.String(1000)),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('tenant_id', 'number', name='uq_resources_tenant_number'),
        sa.CheckConstraint(
            "category IN ('standard', 'premium', 'vip', 'family')",
            name='resources_category_check',
        ),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('resources.id'), nullable=False, index=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('reservation_type', sa.String(20), server_default=sa.text("'daily'"), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'pending'"), nullable=False, index=True),
        sa.Column('notes', sa.Text),
        sa.Column('booking_code', sa.String(40), nullable=False, unique=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('end_date >= start_date', name='reservations_date_range_check'),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'paid', 'completed', 'cancelled', 'refunded')",
            name='reservations_status_check',
        ),
        sa.CheckConstraint(
            "reservation_type IN ('daily', 'weekly', 'monthly', 'yearly')",
            name='reservations_type_check',
        ),
    )
    op.create_index('ix_reservations_resource_dates', 'reservations', ['resource_id', 'start_date', 'end_date'])

    # One row per umbrella-day held by a live reservation
    op.create_table(
        'resource_occupancy',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('resources.id'), nullable=False),
        sa.Column(
            'reservation_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('reservations.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('day', sa.Date, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('resource_id', 'day', name='uq_resource_occupancy_day'),
    )

    # Create payments table
    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'reservation_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('reservations.id'),
            nullable=False,
            unique=True,
            index=True,
        ),
        sa.Column('method', sa.String(20), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'pending'"), nullable=False, index=True),
        sa.Column('external_reference', sa.String(255), index=True),
        sa.Column('paid_at', sa.DateTime(timezone=True)),
        sa.Column('notes', sa.Text),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled', 'refunded')",
            name='payments_status_check',
        ),
        sa.CheckConstraint(
            "method IN ('paypal', 'credit_card', 'bank_transfer', 'cash')",
            name='payments_method_check',
        ),
    )


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_table('resource_occupancy')
    op.drop_index('ix_reservations_resource_dates', table_name='reservations')
    op.drop_table('reservations')
    op.drop_table('resources')
    op.drop_table('tenants')
