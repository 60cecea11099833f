"""create_store_tables

Revision ID: 3f9c2a7b1d40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7b1d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


product_status = postgresql.ENUM(
    'draft', 'active', 'inactive', 'archived',
    name='store_product_status_enum', create_type=False,
)
order_status = postgresql.ENUM(
    'pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled', 'returned',
    name='store_order_status_enum', create_type=False,
)
payment_status = postgresql.ENUM(
    'pending', 'paid', 'failed',
    name='store_payment_status_enum', create_type=False,
)
payment_method = postgresql.ENUM(
    'credit_card', 'debit_card', 'paypal', 'stripe', 'cash_on_delivery',
    name='store_payment_method_enum', create_type=False,
)


def upgrade() -> None:
    """Upgrade schema - Add store cart, order and product tables."""
    bind = op.get_bind()
    for enum_type in (product_status, order_status, payment_status, payment_method):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'store_products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', product_status, server_default='draft', nullable=False),
        sa.Column('inventory_quantity', sa.Integer(), server_default='0', nullable=False),
        sa.Column('track_quantity', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('allow_backorder', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), server_default='5', nullable=False),
        sa.Column('sales_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        sa.UniqueConstraint('sku'),
    )
    op.create_index('ix_store_products_status', 'store_products', ['status'])
    op.create_index('ix_store_products_inventory_quantity', 'store_products', ['inventory_quantity'])

    op.create_table(
        'store_carts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('total_items', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('ix_store_carts_last_updated', 'store_carts', ['last_updated'])

    op.create_table(
        'store_cart_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('cart_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('selected_variants', postgresql.JSONB(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity > 0', name='positive_quantity'),
        sa.ForeignKeyConstraint(['cart_id'], ['store_carts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['store_products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'store_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(length=30), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('shipping_cost', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('shipping_address', postgresql.JSONB(), nullable=False),
        sa.Column('billing_address', postgresql.JSONB(), nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('payment_status', payment_status, server_default='pending', nullable=False),
        sa.Column('payment_reference', sa.String(length=100), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', order_status, server_default='pending', nullable=False),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_by', sa.String(length=255), nullable=True),
        sa.Column('inventory_released', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('tracking_number', sa.String(length=100), nullable=True),
        sa.Column('actual_delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('customer_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_store_orders_order_number', 'store_orders', ['order_number'], unique=True)
    op.create_index('ix_store_orders_user_id', 'store_orders', ['user_id'])
    op.create_index('ix_store_orders_payment_reference', 'store_orders', ['payment_reference'])
    op.create_index('ix_store_orders_user_created', 'store_orders', ['user_id', 'created_at'])
    op.create_index('ix_store_orders_status', 'store_orders', ['status'])

    op.create_table(
        'store_order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('product_image', sa.String(length=512), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('selected_variants', postgresql.JSONB(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('line_total', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['store_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['store_products.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'store_order_status_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('status', order_status, nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['store_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_store_order_status_history_order_id', 'store_order_status_history', ['order_id']
    )


def downgrade() -> None:
    """Downgrade schema - Remove store tables."""
    op.drop_index('ix_store_order_status_history_order_id', table_name='store_order_status_history')
    op.drop_table('store_order_status_history')
    op.drop_table('store_order_items')

    op.drop_index('ix_store_orders_status', table_name='store_orders')
    op.drop_index('ix_store_orders_user_created', table_name='store_orders')
    op.drop_index('ix_store_orders_payment_reference', table_name='store_orders')
    op.drop_index('ix_store_orders_user_id', table_name='store_orders')
    op.drop_index('ix_store_orders_order_number', table_name='store_orders')
    op.drop_table('store_orders')

    op.drop_table('store_cart_items')
    op.drop_index('ix_store_carts_last_updated', table_name='store_carts')
    op.drop_table('store_carts')

    op.drop_index('ix_store_products_inventory_quantity', table_name='store_products')
    op.drop_index('ix_store_products_status', table_name='store_products')
    op.drop_table('store_products')

    bind = op.get_bind()
    for enum_type in (payment_method, payment_status, order_status, product_status):
        enum_type.drop(bind, checkfirst=True)
