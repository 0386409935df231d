"""Initial schema - stores, tracked products, item index, overrides, alerts, webhook log

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('shop_domain', sa.String(255), nullable=False),
        sa.Column('access_token', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('plan', sa.String(20), nullable=False, server_default='free'),
        sa.Column('email_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notification_email', sa.String(255), nullable=True),
        sa.Column('chat_notifications', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('chat_webhook_url', sa.String(2048), nullable=True),
        sa.Column('restock_alerts_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('auto_hide_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('auto_republish_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('uninstalled_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_stores_shop_domain', 'stores', ['shop_domain'], unique=True)
    op.create_index('ix_stores_plan', 'stores', ['plan'])

    op.create_table(
        'tracked_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('product_title', sa.String(512), nullable=True),
        sa.Column('sku', sa.String(2048), nullable=True),
        sa.Column('current_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('previous_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('inventory_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('is_hidden', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_checked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_alert_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deactivated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('store_id', 'product_id', name='uq_tracked_products_store_product'),
    )
    op.create_index('ix_tracked_products_store_id', 'tracked_products', ['store_id'])
    op.create_index('ix_tracked_products_inventory_status', 'tracked_products', ['inventory_status'])
    op.create_index('ix_tracked_products_store_updated', 'tracked_products', ['store_id', 'updated_at'])

    op.create_table(
        'inventory_item_index',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('inventory_item_id', sa.String(64), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('variant_id', sa.String(64), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('store_id', 'inventory_item_id', name='uq_inventory_item_index_store_item'),
    )
    op.create_index('ix_inventory_item_index_store_id', 'inventory_item_index', ['store_id'])
    op.create_index('ix_inventory_item_index_product_id', 'inventory_item_index', ['product_id'])

    op.create_table(
        'product_overrides',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('custom_threshold', sa.Integer(), nullable=True),
        sa.Column('exclude_from_auto_hide', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('exclude_from_alerts', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('store_id', 'product_id', name='uq_product_overrides_store_product'),
    )
    op.create_index('ix_product_overrides_store_id', 'product_overrides', ['store_id'])

    # No foreign key: alert history outlives an uninstall
    op.create_table(
        'alert_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('product_title', sa.String(512), nullable=True),
        sa.Column('alert_kind', sa.String(20), nullable=False),
        sa.Column('channel', sa.String(20), nullable=False),
        sa.Column('quantity_at_alert', sa.Integer(), nullable=False),
        sa.Column('threshold_at_alert', sa.Integer(), nullable=True),
        sa.Column('delivered', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_alert_records_store_id', 'alert_records', ['store_id'])
    op.create_index('ix_alert_records_dedup', 'alert_records', ['store_id', 'product_id', 'alert_kind', 'sent_at'])

    op.create_table(
        'webhook_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), nullable=True),
        sa.Column('topic', sa.String(100), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('outcome', sa.String(30), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_webhook_events_store_id', 'webhook_events', ['store_id'])


def downgrade() -> None:
    op.drop_table('webhook_events')
    op.drop_table('alert_records')
    op.drop_table('product_overrides')
    op.drop_table('inventory_item_index')
    op.drop_table('tracked_products')
    op.drop_table('stores')
