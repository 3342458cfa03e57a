"""Core multi-company schema with RLS.

- companies, users, user_companies (global, no RLS)
- audit_log
- locations
- product_categories, products, stock_adjustments
- customers, suppliers
- orders, order_items
- location_inventory, stock_movements, stock_reservations, stock_alerts

Every company-owned table gets ENABLE + FORCE ROW LEVEL SECURITY and a
<table>_tenant_isolation policy on company_id = app.company_id.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "c1a0e5d2b7f1"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

COMPANY_GUC_SQL = "NULLIF(current_setting('app.company_id', true), '')::uuid"

TENANT_TABLES = [
    "audit_log",
    "locations",
    "product_categories",
    "products",
    "stock_adjustments",
    "customers",
    "suppliers",
    "orders",
    "order_items",
    "location_inventory",
    "stock_movements",
    "stock_reservations",
    "stock_alerts",
]


def _id() -> sa.Column:
    return sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("uuid_generate_v4()"))


def _company_id() -> sa.Column:
    return sa.Column(
        "company_id",
        sa.UUID(),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        server_default=sa.text(COMPANY_GUC_SQL),
    )


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _is_active() -> sa.Column:
    return sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False)


def _money(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.Numeric(18, 2), nullable=True)
    return sa.Column(name, sa.Numeric(18, 2), server_default=sa.text("0"), nullable=False)


def _qty(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.Numeric(18, 3), nullable=True)
    return sa.Column(name, sa.Numeric(18, 3), server_default=sa.text("0"), nullable=False)


def enable_tenant_rls(tables: Sequence[str]) -> None:
    for tbl in tables:
        op.execute(f"ALTER TABLE {tbl} ENABLE ROW LEVEL SECURITY;")
        op.execute(f"ALTER TABLE {tbl} FORCE ROW LEVEL SECURITY;")
        op.execute(
            f"""
            CREATE POLICY {tbl}_tenant_isolation ON {tbl}
            USING (company_id = {COMPANY_GUC_SQL})
            WITH CHECK (company_id = {COMPANY_GUC_SQL});
            """
        )


def disable_tenant_rls(tables: Sequence[str]) -> None:
    for tbl in tables:
        op.execute(f"DROP POLICY IF EXISTS {tbl}_tenant_isolation ON {tbl};")
        op.execute(f"ALTER TABLE {tbl} NO FORCE ROW LEVEL SECURITY;")
        op.execute(f"ALTER TABLE {tbl} DISABLE ROW LEVEL SECURITY;")


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp";')

    op.create_table(
        "companies",
        _id(),
        sa.Column("code", sa.Text(), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("industry", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("tax_id", sa.Text(), nullable=True),
        _is_active(),
        *_timestamps(),
    )

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        _is_active(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "user_companies",
        _id(),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("company_id", sa.UUID(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("role", sa.Text(), nullable=False),
        _is_active(),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "company_id", name="uq_user_companies_user_company"),
    )

    op.create_table(
        "audit_log",
        _id(),
        _company_id(),
        sa.Column("actor_user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("entity_type", sa.Text(), nullable=True),
        sa.Column("entity_id", sa.Text(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "locations",
        _id(),
        _company_id(),
        sa.Column("location_code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), server_default="BRANCH", nullable=False),
        sa.Column("is_default", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_headquarters", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("address_line1", sa.Text(), nullable=True),
        sa.Column("address_line2", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("postal_code", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        _is_active(),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "location_code", name="uq_locations_company_code"),
    )

    op.create_table(
        "product_categories",
        _id(),
        _company_id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "name", name="uq_product_categories_company_name"),
    )

    op.create_table(
        "products",
        _id(),
        _company_id(),
        sa.Column("product_code", sa.Text(), nullable=False),
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.UUID(), sa.ForeignKey("product_categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("product_type", sa.Text(), server_default="OWN_MANUFACTURE", nullable=False),
        sa.Column("unit_of_measure", sa.Text(), server_default="PCS", nullable=False),
        _money("cost_price"),
        _money("selling_price"),
        sa.Column("markup_percent", sa.Numeric(9, 2), nullable=True),
        _qty("stock_quantity"),
        _qty("reorder_level", nullable=True),
        sa.Column("fabric_type", sa.Text(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column("size", sa.Text(), nullable=True),
        sa.Column("gsm", sa.Numeric(10, 2), nullable=True),
        sa.Column("material", sa.Text(), nullable=True),
        sa.Column("hsn_code", sa.Text(), nullable=True),
        _is_active(),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "product_code", name="uq_products_company_code"),
        sa.UniqueConstraint("company_id", "sku", name="uq_products_company_sku"),
    )

    op.create_table(
        "stock_adjustments",
        _id(),
        _company_id(),
        sa.Column("adjustment_code", sa.Text(), nullable=False),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("adjustment_type", sa.Text(), nullable=False),
        _qty("quantity"),
        _qty("previous_stock"),
        _qty("new_stock"),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("adjusted_by", sa.UUID(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "customers",
        _id(),
        _company_id(),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("customer_type", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("billing_address", sa.Text(), nullable=True),
        sa.Column("shipping_address", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("payment_terms", sa.Text(), nullable=True),
        _money("credit_limit", nullable=True),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        sa.Column("tax_id", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _is_active(),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "code", name="uq_customers_company_code"),
    )

    op.create_table(
        "suppliers",
        _id(),
        _company_id(),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("supplier_type", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("payment_terms", sa.Text(), nullable=True),
        sa.Column("lead_time_days", sa.Integer(), nullable=True),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        sa.Column("tax_id", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _money("min_order_value", nullable=True),
        _is_active(),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "code", name="uq_suppliers_company_code"),
    )

    op.create_table(
        "orders",
        _id(),
        _company_id(),
        sa.Column("order_code", sa.Text(), nullable=False),
        sa.Column("customer_id", sa.UUID(), sa.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("customer_name", sa.Text(), nullable=True),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Text(), server_default="DRAFT", nullable=False),
        sa.Column("priority", sa.Text(), server_default="NORMAL", nullable=False),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        _money("subtotal"),
        _money("discount_amount"),
        _money("tax_amount"),
        _money("shipping_charges"),
        _money("total_amount"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("shipping_address", sa.Text(), nullable=True),
        sa.Column("shipping_carrier", sa.Text(), nullable=True),
        sa.Column("tracking_number", sa.Text(), nullable=True),
        sa.Column("shipping_method", sa.Text(), nullable=True),
        sa.Column("delivery_window_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivery_window_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=True),
        _is_active(),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "order_code", name="uq_orders_company_code"),
    )
    op.create_index("ix_orders_company_status", "orders", ["company_id", "status"])

    op.create_table(
        "order_items",
        _id(),
        _company_id(),
        sa.Column("order_id", sa.UUID(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("item_code", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _qty("quantity"),
        sa.Column("unit_of_measure", sa.Text(), server_default="PCS", nullable=False),
        _money("unit_price"),
        sa.Column("discount_percent", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False),
        _money("discount_amount"),
        sa.Column("tax_rate", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False),
        _money("tax_amount"),
        _money("line_amount"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "location_inventory",
        _id(),
        _company_id(),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        _qty("stock_quantity"),
        _qty("reserved_quantity"),
        _qty("reorder_level", nullable=True),
        _qty("max_stock_level", nullable=True),
        sa.Column("updated_by", sa.UUID(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "company_id", "product_id", "location_id", name="uq_location_inventory_company_product_location"
        ),
    )

    op.create_table(
        "stock_movements",
        _id(),
        _company_id(),
        sa.Column("movement_code", sa.Text(), nullable=False),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("from_location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("to_location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("movement_type", sa.Text(), nullable=False),
        _qty("quantity"),
        _money("unit_cost", nullable=True),
        _money("total_cost", nullable=True),
        sa.Column("reference_type", sa.Text(), nullable=True),
        sa.Column("reference_id", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "stock_reservations",
        _id(),
        _company_id(),
        sa.Column("reservation_code", sa.Text(), nullable=False),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order_id", sa.UUID(), sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        _qty("reserved_quantity"),
        sa.Column("reservation_type", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), server_default="ACTIVE", nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "stock_alerts",
        _id(),
        _company_id(),
        sa.Column("alert_code", sa.Text(), nullable=False),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("alert_type", sa.Text(), nullable=False),
        _qty("current_stock"),
        _qty("threshold_value"),
        sa.Column("status", sa.Text(), server_default="ACTIVE", nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("acknowledged_by", sa.UUID(), nullable=True),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    enable_tenant_rls(TENANT_TABLES)


def downgrade() -> None:
    disable_tenant_rls(TENANT_TABLES)

    op.drop_table("stock_alerts")
    op.drop_table("stock_reservations")
    op.drop_table("stock_movements")
    op.drop_table("location_inventory")
    op.drop_table("order_items")
    op.drop_index("ix_orders_company_status", table_name="orders")
    op.drop_table("orders")
    op.drop_table("suppliers")
    op.drop_table("customers")
    op.drop_table("stock_adjustments")
    op.drop_table("products")
    op.drop_table("product_categories")
    op.drop_table("locations")
    op.drop_table("audit_log")
    op.drop_table("user_companies")
    op.drop_table("users")
    op.drop_table("companies")
