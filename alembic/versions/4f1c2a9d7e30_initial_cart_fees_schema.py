"""initial_cart_fees_schema

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-19 09:12:31.208114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create fee configuration, tax rate, cart session and order tables."""
    op.create_table(
        'fees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('fee_id', sa.String(), nullable=False),
        sa.Column('internal_name', sa.String(), nullable=False),
        sa.Column('public_name', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(12, 4), nullable=False),
        sa.Column('tax_class', sa.String(), nullable=False, server_default=''),
        sa.Column('type', sa.String(), nullable=False, server_default='required'),
        sa.Column('checkbox_text', sa.String(), nullable=False, server_default=''),
        sa.Column('help_text', sa.String(), nullable=False, server_default=''),
        sa.Column('condition', sa.String(), nullable=False, server_default='always'),
        sa.Column('condition_minimum', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_fees_id', 'fees', ['id'], unique=False)
    op.create_index('ix_fees_fee_id', 'fees', ['fee_id'], unique=True)
    op.create_index('ix_fees_sort_order', 'fees', ['sort_order'], unique=False)

    op.create_table(
        'tax_rates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tax_class', sa.String(), nullable=False, server_default=''),
        sa.Column('name', sa.String(), nullable=False, server_default=''),
        sa.Column('rate', sa.Numeric(8, 4), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tax_rates_id', 'tax_rates', ['id'], unique=False)
    op.create_index('ix_tax_rates_tax_class', 'tax_rates', ['tax_class'], unique=False)

    op.create_table(
        'cart_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cart_sessions_id', 'cart_sessions', ['id'], unique=False)
    op.create_index('ix_cart_sessions_session_id', 'cart_sessions', ['session_id'], unique=True)

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='placed'),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.Column('customer_name', sa.String(), nullable=True),
        sa.Column('customer_email', sa.String(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('fee_total', sa.Numeric(18, 8), nullable=False, server_default='0'),
        sa.Column('fees_recorded', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_id', 'orders', ['id'], unique=False)
    op.create_index('ix_orders_status', 'orders', ['status'], unique=False)
    op.create_index('ix_orders_session_id', 'orders', ['session_id'], unique=False)
    op.create_index('ix_orders_created_at', 'orders', ['created_at'], unique=False)
    op.create_index('ix_orders_status_created_at', 'orders', ['status', 'created_at'], unique=False)

    op.create_table(
        'order_applied_fees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('fee_id', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('internal_name', sa.String(), nullable=False),
        sa.Column('public_name', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(12, 4), nullable=False),
        sa.Column('net_amount', sa.Numeric(18, 8), nullable=False),
        sa.Column('tax_class', sa.String(), nullable=False, server_default=''),
        sa.Column('fee_type', sa.String(), nullable=False, server_default='required'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', 'fee_id', name='uix_order_applied_fee'),
    )
    op.create_index('ix_order_applied_fees_id', 'order_applied_fees', ['id'], unique=False)
    op.create_index('ix_order_applied_fees_order_id', 'order_applied_fees', ['order_id'], unique=False)
    op.create_index('ix_order_applied_fees_fee_id', 'order_applied_fees', ['fee_id'], unique=False)


def downgrade() -> None:
    """Drop all cart fees tables."""
    op.drop_table('order_applied_fees')
    op.drop_table('orders')
    op.drop_table('cart_sessions')
    op.drop_table('tax_rates')
    op.drop_table('fees')
