"""initial ledger schema

Revision ID: b7e41c9a0d2f
Revises:
Create Date: 2026-10-17 00:00:00.000000

Creates the stock ledger schema:
- products / stock_records: catalog and authoritative base-unit stock
- counters: per-day document number counters
- orders / order_lines, purchases / purchase_lines, stock_losses:
  append-only documents

Every table carries a namespace column (production / staging); natural keys
are unique per namespace.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7e41c9a0d2f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # products: catalog master
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('namespace', sa.String(length=32), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('base_unit', sa.String(length=16), nullable=False),
        sa.Column('bulk_unit_name', sa.String(length=32), nullable=True),
        sa.Column('bulk_unit_conversion', sa.Float(), nullable=True),
        sa.Column('cost_price', sa.Integer(), nullable=True),
        sa.Column('price_regular', sa.Integer(), nullable=True),
        sa.Column('price_premium', sa.Integer(), nullable=True),
        sa.Column('price_star', sa.Integer(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace', 'sku', name='uq_products_namespace_sku'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_namespace', 'products', ['namespace'])
    op.create_index('ix_products_namespace_name', 'products', ['namespace', 'name'])

    # ============================================================================
    # stock_records: one per SKU, base units only
    # ============================================================================
    op.create_table(
        'stock_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('namespace', sa.String(length=32), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('current_stock_base', sa.Float(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace', 'sku', name='uq_stock_records_namespace_sku'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stock_records_namespace', 'stock_records', ['namespace'])

    # ============================================================================
    # counters: "{document_type}_{YYYY-MM-DD}" -> count
    # ============================================================================
    op.create_table(
        'counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('namespace', sa.String(length=32), nullable=False),
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace', 'key', name='uq_counters_namespace_key'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_counters_namespace', 'counters', ['namespace'])

    # ============================================================================
    # orders / order_lines
    # ============================================================================
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('namespace', sa.String(length=32), nullable=False),
        sa.Column('order_number', sa.String(length=64), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('source', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_type', sa.String(length=16), nullable=False),
        sa.Column('payment_method', sa.String(length=32), nullable=False),
        sa.Column('grand_total', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace', 'order_number', name='uq_orders_namespace_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_orders_namespace', 'orders', ['namespace'])
    op.create_index('ix_orders_namespace_created', 'orders', ['namespace', 'created_at'])

    op.create_table(
        'order_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=8), nullable=False),
        sa.Column('unit_name', sa.String(length=32), nullable=True),
        sa.Column('base_quantity', sa.Float(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('line_total', sa.Integer(), nullable=False),
        sa.Column('buy_price', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name='fk_order_lines_order_id_orders'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', 'line_no', name='uq_order_lines_order_line'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_order_lines_order_id', 'order_lines', ['order_id'])
    op.create_index('ix_order_lines_sku', 'order_lines', ['sku'])

    # ============================================================================
    # purchases / purchase_lines
    # ============================================================================
    op.create_table(
        'purchases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('namespace', sa.String(length=32), nullable=False),
        sa.Column('purchase_number', sa.String(length=64), nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        sa.Column('source', sa.String(length=32), nullable=False),
        sa.Column('supplier_name', sa.String(length=255), nullable=True),
        sa.Column('receipt_file', sa.String(length=255), nullable=True),
        sa.Column('grand_total', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace', 'purchase_number', name='uq_purchases_namespace_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_purchases_namespace', 'purchases', ['namespace'])
    op.create_index('ix_purchases_namespace_created', 'purchases', ['namespace', 'created_at'])

    op.create_table(
        'purchase_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('purchase_id', sa.Integer(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=True),
        sa.Column('unit_cost', sa.Integer(), nullable=False),
        sa.Column('line_total', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['purchase_id'], ['purchases.id'], name='fk_purchase_lines_purchase_id_purchases'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('purchase_id', 'line_no', name='uq_purchase_lines_purchase_line'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_purchase_lines_purchase_id', 'purchase_lines', ['purchase_id'])
    op.create_index('ix_purchase_lines_sku', 'purchase_lines', ['sku'])

    # ============================================================================
    # stock_losses
    # ============================================================================
    op.create_table(
        'stock_losses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('namespace', sa.String(length=32), nullable=False),
        sa.Column('loss_number', sa.String(length=128), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('reason', sa.String(length=32), nullable=False),
        sa.Column('cost_price', sa.Integer(), nullable=False),
        sa.Column('estimated_loss', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace', 'loss_number', name='uq_stock_losses_namespace_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stock_losses_namespace', 'stock_losses', ['namespace'])
    op.create_index('ix_stock_losses_sku', 'stock_losses', ['sku'])


def downgrade():
    op.drop_table('stock_losses')
    op.drop_table('purchase_lines')
    op.drop_table('purchases')
    op.drop_table('order_lines')
    op.drop_table('orders')
    op.drop_table('counters')
    op.drop_table('stock_records')
    op.drop_table('products')
