"""Create stock core schema

Revision ID: 001_stock_core
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers
revision = '001_stock_core'
down_revision = None
branch_labels = None
depends_on = None

QTY = sa.Numeric(18, 4)
MONEY = sa.Numeric(14, 2)


def audit_columns():
    """Tenant scope and audit columns present on every table."""
    return [
        sa.Column('tenant_id', UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('updated_by', UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]


def upgrade():
    """Create stock core tables"""

    # ====================
    # UNITS OF MEASURE / PRODUCTS
    # ====================
    op.create_table(
        'units_of_measure',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('uom_code', sa.String(20), nullable=False),
        sa.Column('uom_name', sa.String(100), nullable=False),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'uom_code', name='uq_uom_tenant_code'),
    )

    op.create_table(
        'products',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('product_code', sa.String(50), nullable=False, index=True),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('base_uom_id', UUID(as_uuid=True), sa.ForeignKey('units_of_measure.id', ondelete='SET NULL'), nullable=True),
        sa.Column('primary_uom_id', UUID(as_uuid=True), sa.ForeignKey('units_of_measure.id', ondelete='SET NULL'), nullable=True),
        sa.Column('secondary_uom_id', UUID(as_uuid=True), sa.ForeignKey('units_of_measure.id', ondelete='SET NULL'), nullable=True),
        sa.Column('primary_to_secondary_factor', QTY, nullable=True),
        sa.Column('secondary_to_base_factor', QTY, nullable=True),
        sa.Column('is_serialized', sa.Boolean, server_default='false', nullable=False),
        sa.Column('is_active', sa.Boolean, server_default='true', nullable=False),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'product_code', name='uq_product_tenant_code'),
    )

    # ====================
    # INVENTORY TRANSACTIONS
    # ====================
    op.create_table(
        'inventory_transactions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('txn_number', sa.String(40), nullable=False, unique=True, index=True),
        sa.Column('txn_type', sa.String(30), nullable=False, index=True),
        sa.Column('txn_date', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', UUID(as_uuid=True), nullable=True),
        sa.Column('reference_number', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *audit_columns(),
    )

    op.create_table(
        'inventory_transaction_details',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('txn_id', UUID(as_uuid=True), sa.ForeignKey('inventory_transactions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('variant_id', UUID(as_uuid=True), nullable=True),
        sa.Column('bin_id', UUID(as_uuid=True), nullable=True),
        sa.Column('from_warehouse_id', UUID(as_uuid=True), nullable=True),
        sa.Column('to_warehouse_id', UUID(as_uuid=True), nullable=False),
        sa.Column('quantity', QTY, nullable=False),
        sa.Column('unit_cost', MONEY, server_default='0', nullable=False),
        sa.Column('uom_id', UUID(as_uuid=True), nullable=True),
        *audit_columns(),
    )
    op.create_index(
        'ix_txn_details_position', 'inventory_transaction_details',
        ['tenant_id', 'product_id', 'to_warehouse_id', 'variant_id', 'bin_id'],
    )

    # ====================
    # RESERVATIONS
    # ====================
    op.create_table(
        'stock_reservations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('product_id', UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('variant_id', UUID(as_uuid=True), nullable=True),
        sa.Column('warehouse_id', UUID(as_uuid=True), nullable=False),
        sa.Column('bin_id', UUID(as_uuid=True), nullable=True),
        sa.Column('reserved_quantity', QTY, nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=False),
        sa.Column('reference_id', UUID(as_uuid=True), nullable=True),
        sa.Column('reference_number', sa.String(50), nullable=True),
        sa.Column('reserved_by', UUID(as_uuid=True), nullable=True),
        sa.Column('reservation_date', sa.Date, server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('expiry_date', sa.Date, nullable=True),
        sa.Column('status', sa.String(20), server_default='ACTIVE', nullable=False, index=True),
        sa.Column('released_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *audit_columns(),
    )
    op.create_index(
        'ix_reservations_lookup', 'stock_reservations',
        ['tenant_id', 'product_id', 'warehouse_id', 'status'],
    )

    # ====================
    # SERIAL NUMBERS
    # ====================
    op.create_table(
        'product_serial_numbers',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('product_id', UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('variant_id', UUID(as_uuid=True), nullable=True),
        sa.Column('serial_number', sa.String(100), nullable=False, index=True),
        sa.Column('warehouse_id', UUID(as_uuid=True), nullable=True, index=True),
        sa.Column('bin_id', UUID(as_uuid=True), nullable=True),
        sa.Column('current_location', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), server_default='AVAILABLE', nullable=False, index=True),
        sa.Column('purchase_date', sa.Date, nullable=True),
        sa.Column('expiry_date', sa.Date, nullable=True),
        sa.Column('supplier_batch', sa.String(50), nullable=True),
        sa.Column('internal_batch', sa.String(50), nullable=True),
        sa.Column('cost_price', MONEY, nullable=True),
        sa.Column('selling_price', MONEY, nullable=True),
        sa.Column('last_transaction_id', UUID(as_uuid=True), nullable=True),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'serial_number', name='uq_serial_tenant_number'),
    )

    # ====================
    # QUALITY CONTROL
    # ====================
    op.create_table(
        'quality_control_holds',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('product_id', UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('variant_id', UUID(as_uuid=True), nullable=True),
        sa.Column('warehouse_id', UUID(as_uuid=True), nullable=False),
        sa.Column('bin_id', UUID(as_uuid=True), nullable=True),
        sa.Column('serial_number', sa.String(100), nullable=True),
        sa.Column('hold_quantity', QTY, nullable=False),
        sa.Column('hold_reason', sa.String(255), nullable=False),
        sa.Column('hold_date', sa.Date, server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('inspector_id', UUID(as_uuid=True), nullable=True),
        sa.Column('inspection_notes', sa.Text, nullable=True),
        sa.Column('status', sa.String(20), server_default='ON_HOLD', nullable=False, index=True),
        sa.Column('release_date', sa.Date, nullable=True),
        sa.Column('released_by', UUID(as_uuid=True), nullable=True),
        sa.Column('release_notes', sa.Text, nullable=True),
        sa.Column('related_transaction_id', UUID(as_uuid=True), nullable=True),
        *audit_columns(),
    )
    op.create_index(
        'ix_qc_holds_lookup', 'quality_control_holds',
        ['tenant_id', 'product_id', 'warehouse_id', 'status'],
    )

    op.create_table(
        'damage_assessments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('warehouse_id', UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('product_id', UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('variant_id', UUID(as_uuid=True), nullable=True),
        sa.Column('serial_number', sa.String(100), nullable=True),
        sa.Column('damaged_quantity', QTY, nullable=False),
        sa.Column('damage_type', sa.String(50), nullable=False),
        sa.Column('damage_severity', sa.String(20), nullable=False),
        sa.Column('damage_description', sa.Text, nullable=True),
        sa.Column('assessed_by', UUID(as_uuid=True), nullable=True),
        sa.Column('assessment_date', sa.Date, nullable=False, index=True),
        sa.Column('estimated_loss_value', MONEY, nullable=True),
        sa.Column('action_taken', sa.String(30), nullable=True),
        sa.Column('insurance_claim_number', sa.String(50), nullable=True),
        sa.Column('related_transaction_id', UUID(as_uuid=True), nullable=True),
        *audit_columns(),
    )

    # ====================
    # PICK LISTS
    # ====================
    op.create_table(
        'pick_lists',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('pick_list_number', sa.String(40), nullable=False, unique=True, index=True),
        sa.Column('pick_list_date', sa.Date, server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('warehouse_id', UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('picker_id', UUID(as_uuid=True), nullable=True),
        sa.Column('status', sa.String(20), server_default='DRAFT', nullable=False, index=True),
        sa.Column('priority_level', sa.String(20), server_default='NORMAL', nullable=False),
        sa.Column('special_instructions', sa.Text, nullable=True),
        *audit_columns(),
    )

    op.create_table(
        'pick_list_details',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('pick_list_id', UUID(as_uuid=True), sa.ForeignKey('pick_lists.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('variant_id', UUID(as_uuid=True), nullable=True),
        sa.Column('warehouse_id', UUID(as_uuid=True), nullable=False),
        sa.Column('bin_id', UUID(as_uuid=True), nullable=True),
        sa.Column('required_quantity', QTY, nullable=False),
        sa.Column('picked_quantity', QTY, server_default='0', nullable=False),
        sa.Column('uom_id', UUID(as_uuid=True), nullable=True),
        sa.Column('pick_sequence', sa.Integer, nullable=False),
        sa.Column('pick_instructions', sa.Text, nullable=True),
        sa.Column('status', sa.String(20), server_default='PENDING', nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        *audit_columns(),
    )


def downgrade():
    """Drop stock core tables"""
    op.drop_table('pick_list_details')
    op.drop_table('pick_lists')
    op.drop_table('damage_assessments')
    op.drop_index('ix_qc_holds_lookup', table_name='quality_control_holds')
    op.drop_table('quality_control_holds')
    op.drop_table('product_serial_numbers')
    op.drop_index('ix_reservations_lookup', table_name='stock_reservations')
    op.drop_table('stock_reservations')
    op.drop_index('ix_txn_details_position', table_name='inventory_transaction_details')
    op.drop_table('inventory_transaction_details')
    op.drop_table('inventory_transactions')
    op.drop_table('products')
    op.drop_table('units_of_measure')
