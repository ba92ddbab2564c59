"""initial netting schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("product_code", sa.String(length=20), primary_key=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        "work_stations",
        sa.Column("station_code", sa.String(length=20), primary_key=True),
        sa.Column("process_group", sa.String(length=10), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_work_stations_process_group", "work_stations", ["process_group"], unique=False)

    op.create_table(
        "parts",
        sa.Column("part_code", sa.String(length=30), primary_key=True),
        sa.Column("part_name", sa.String(length=100), nullable=False),
        sa.Column("specification", sa.String(length=200), nullable=True),
        sa.Column("unit", sa.String(length=10), nullable=False, server_default="pcs"),
        sa.Column("lead_time_days", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("safety_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("supplier", sa.String(length=100), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("lead_time_days >= 0", name="ck_parts_lead_time_non_negative"),
        sa.CheckConstraint("safety_stock >= 0", name="ck_parts_safety_stock_non_negative"),
    )
    op.create_index("ix_parts_supplier", "parts", ["supplier"], unique=False)
    op.create_index("ix_parts_active", "parts", ["is_active"], unique=False)

    op.create_table(
        "bom_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_code",
            sa.String(length=20),
            sa.ForeignKey("products.product_code", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "station_code",
            sa.String(length=20),
            sa.ForeignKey("work_stations.station_code", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("part_code", sa.String(length=30), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("product_code", "station_code", "part_code", name="uq_bom_product_station_part"),
        sa.CheckConstraint("quantity > 0", name="ck_bom_items_quantity_positive"),
    )
    op.create_index("ix_bom_items_id", "bom_items", ["id"], unique=False)
    op.create_index("ix_bom_items_part_code", "bom_items", ["part_code"], unique=False)
    op.create_index("ix_bom_items_product_active", "bom_items", ["product_code", "is_active"], unique=False)

    op.create_table(
        "production_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("building_no", sa.String(length=10), nullable=True),
        sa.Column("product_code", sa.String(length=20), sa.ForeignKey("products.product_code"), nullable=False),
        sa.Column("planned_quantity", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="planned"),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=50), nullable=False, server_default="system"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("planned_quantity > 0", name="ck_production_plans_quantity_positive"),
        sa.CheckConstraint(
            "status IN ('planned', 'in_progress', 'completed', 'cancelled')",
            name="ck_production_plans_status",
        ),
    )
    op.create_index("ix_production_plans_id", "production_plans", ["id"], unique=False)
    op.create_index("ix_production_plans_product_code", "production_plans", ["product_code"], unique=False)
    op.create_index("ix_production_plans_status_start", "production_plans", ["status", "start_date"], unique=False)

    op.create_table(
        "inventory",
        sa.Column("part_code", sa.String(length=30), primary_key=True),
        sa.Column("current_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        "inventory_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("part_code", sa.String(length=30), nullable=False),
        sa.Column("transaction_type", sa.String(length=20), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("before_stock", sa.Integer(), nullable=False),
        sa.Column("after_stock", sa.Integer(), nullable=False),
        sa.Column("reference_id", sa.Integer(), nullable=True),
        sa.Column("reference_type", sa.String(length=50), nullable=True),
        sa.Column("transaction_date", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=50), nullable=False, server_default="system"),
        sa.CheckConstraint(
            "transaction_type IN ('receipt', 'issue', 'adjustment', 'stocktake', 'initial')",
            name="ck_inventory_transactions_type",
        ),
    )
    op.create_index("ix_inventory_transactions_id", "inventory_transactions", ["id"], unique=False)
    op.create_index(
        "ix_inventory_transactions_part_date",
        "inventory_transactions",
        ["part_code", "transaction_date"],
        unique=False,
    )
    op.create_index(
        "ix_inventory_transactions_reference",
        "inventory_transactions",
        ["reference_type", "reference_id"],
        unique=False,
    )

    op.create_table(
        "inventory_reservations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("production_plan_id", sa.Integer(), nullable=False),
        sa.Column("part_code", sa.String(length=30), nullable=False),
        sa.Column("reserved_quantity", sa.Integer(), nullable=False),
        sa.Column("reservation_date", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=50), nullable=False, server_default="system"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("production_plan_id", "part_code", name="uq_inventory_reservations_plan_part"),
        sa.CheckConstraint("reserved_quantity >= 0", name="ck_inventory_reservations_quantity_non_negative"),
    )
    op.create_index("ix_inventory_reservations_id", "inventory_reservations", ["id"], unique=False)
    op.create_index(
        "ix_inventory_reservations_production_plan_id",
        "inventory_reservations",
        ["production_plan_id"],
        unique=False,
    )
    op.create_index("ix_inventory_reservations_part", "inventory_reservations", ["part_code"], unique=False)

    op.create_table(
        "scheduled_receipts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_no", sa.String(length=20), nullable=False),
        sa.Column("part_code", sa.String(length=30), nullable=False),
        sa.Column("supplier", sa.String(length=100), nullable=True),
        sa.Column("order_quantity", sa.Integer(), nullable=False),
        sa.Column("scheduled_quantity", sa.Integer(), nullable=True),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="awaiting_confirmation"),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=50), nullable=False, server_default="system"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("order_no", name="uq_scheduled_receipts_order_no"),
        sa.CheckConstraint("order_quantity > 0", name="ck_scheduled_receipts_order_quantity_positive"),
        sa.CheckConstraint(
            "scheduled_quantity IS NULL OR scheduled_quantity >= 0",
            name="ck_scheduled_receipts_scheduled_quantity_non_negative",
        ),
        sa.CheckConstraint(
            "status IN ('awaiting_confirmation', 'scheduled', 'received', 'cancelled')",
            name="ck_scheduled_receipts_status",
        ),
    )
    op.create_index("ix_scheduled_receipts_id", "scheduled_receipts", ["id"], unique=False)
    op.create_index(
        "ix_scheduled_receipts_part_status_date",
        "scheduled_receipts",
        ["part_code", "status", "scheduled_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_scheduled_receipts_part_status_date", table_name="scheduled_receipts")
    op.drop_index("ix_scheduled_receipts_id", table_name="scheduled_receipts")
    op.drop_table("scheduled_receipts")

    op.drop_index("ix_inventory_reservations_part", table_name="inventory_reservations")
    op.drop_index("ix_inventory_reservations_production_plan_id", table_name="inventory_reservations")
    op.drop_index("ix_inventory_reservations_id", table_name="inventory_reservations")
    op.drop_table("inventory_reservations")

    op.drop_index("ix_inventory_transactions_reference", table_name="inventory_transactions")
    op.drop_index("ix_inventory_transactions_part_date", table_name="inventory_transactions")
    op.drop_index("ix_inventory_transactions_id", table_name="inventory_transactions")
    op.drop_table("inventory_transactions")

    op.drop_table("inventory")

    op.drop_index("ix_production_plans_status_start", table_name="production_plans")
    op.drop_index("ix_production_plans_product_code", table_name="production_plans")
    op.drop_index("ix_production_plans_id", table_name="production_plans")
    op.drop_table("production_plans")

    op.drop_index("ix_bom_items_product_active", table_name="bom_items")
    op.drop_index("ix_bom_items_part_code", table_name="bom_items")
    op.drop_index("ix_bom_items_id", table_name="bom_items")
    op.drop_table("bom_items")

    op.drop_index("ix_parts_active", table_name="parts")
    op.drop_index("ix_parts_supplier", table_name="parts")
    op.drop_table("parts")

    op.drop_index("ix_work_stations_process_group", table_name="work_stations")
    op.drop_table("work_stations")

    op.drop_table("products")
