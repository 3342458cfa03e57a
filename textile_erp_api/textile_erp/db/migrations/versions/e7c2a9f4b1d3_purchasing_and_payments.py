"""Purchase orders and the payment ledger.

- purchase_orders, purchase_order_items
- payments (against invoices and bills)

All tables are company-owned and protected by forced RLS.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "e7c2a9f4b1d3"
down_revision: Union[str, None] = "d4b9f3a6c2e8"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

COMPANY_GUC_SQL = "NULLIF(current_setting('app.company_id', true), '')::uuid"

TENANT_TABLES = [
    "purchase_orders",
    "purchase_order_items",
    "payments",
]


def _base_columns() -> list:
    return [
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("uuid_generate_v4()")),
        sa.Column(
            "company_id",
            sa.UUID(),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            server_default=sa.text(COMPANY_GUC_SQL),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(18, 2), server_default=sa.text("0"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "purchase_orders",
        *_base_columns(),
        sa.Column("po_code", sa.Text(), nullable=False),
        sa.Column("supplier_id", sa.UUID(), sa.ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("supplier_name", sa.Text(), nullable=True),
        sa.Column("supplier_code", sa.Text(), nullable=True),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("po_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Text(), server_default="DRAFT", nullable=False),
        sa.Column("priority", sa.Text(), server_default="NORMAL", nullable=False),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        sa.Column("payment_terms", sa.Text(), nullable=True),
        sa.Column("reference_number", sa.Text(), nullable=True),
        _money("subtotal"),
        _money("discount_amount"),
        _money("tax_amount"),
        _money("shipping_charges"),
        _money("total_amount"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("terms_conditions", sa.Text(), nullable=True),
        sa.Column("delivery_address", sa.Text(), nullable=True),
        sa.Column("shipping_method", sa.Text(), nullable=True),
        sa.Column("incoterms", sa.Text(), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.UniqueConstraint("company_id", "po_code", name="uq_purchase_orders_company_code"),
    )
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["company_id", "status"])

    op.create_table(
        "purchase_order_items",
        *_base_columns(),
        sa.Column(
            "purchase_order_id",
            sa.UUID(),
            sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("item_code", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit_of_measure", sa.Text(), server_default="PCS", nullable=False),
        sa.Column("unit_cost", sa.Numeric(18, 2), nullable=False),
        sa.Column("discount_percent", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False),
        _money("discount_amount"),
        sa.Column("tax_rate", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False),
        _money("tax_amount"),
        _money("line_amount"),
        sa.Column("expected_delivery", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )

    op.create_table(
        "payments",
        *_base_columns(),
        sa.Column("payment_code", sa.Text(), nullable=False),
        sa.Column("reference_type", sa.Text(), nullable=False),
        sa.Column("reference_id", sa.UUID(), nullable=False),
        sa.Column("reference_code", sa.Text(), nullable=True),
        sa.Column("party_id", sa.UUID(), nullable=True),
        sa.Column("party_name", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("payment_method", sa.Text(), nullable=False),
        sa.Column("transaction_ref", sa.Text(), nullable=True),
        sa.Column("bank_name", sa.Text(), nullable=True),
        sa.Column("cheque_number", sa.Text(), nullable=True),
        sa.Column("cheque_date", sa.Date(), nullable=True),
        sa.Column("upi_id", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="COMPLETED", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.UUID(), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        sa.UniqueConstraint("company_id", "payment_code", name="uq_payments_company_code"),
    )
    op.create_index("ix_payments_reference", "payments", ["reference_type", "reference_id"])

    for tbl in TENANT_TABLES:
        op.execute(f"ALTER TABLE {tbl} ENABLE ROW LEVEL SECURITY;")
        op.execute(f"ALTER TABLE {tbl} FORCE ROW LEVEL SECURITY;")
        op.execute(
            f"""
            CREATE POLICY {tbl}_tenant_isolation ON {tbl}
            USING (company_id = {COMPANY_GUC_SQL})
            WITH CHECK (company_id = {COMPANY_GUC_SQL});
            """
        )


def downgrade() -> None:
    for tbl in TENANT_TABLES:
        op.execute(f"DROP POLICY IF EXISTS {tbl}_tenant_isolation ON {tbl};")
        op.execute(f"ALTER TABLE {tbl} NO FORCE ROW LEVEL SECURITY;")
        op.execute(f"ALTER TABLE {tbl} DISABLE ROW LEVEL SECURITY;")

    op.drop_index("ix_payments_reference", table_name="payments")
    op.drop_index("ix_purchase_orders_status", table_name="purchase_orders")
    for tbl in reversed(TENANT_TABLES):
        op.drop_table(tbl)
