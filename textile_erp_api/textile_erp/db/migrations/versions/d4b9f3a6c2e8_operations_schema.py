"""Machines, maintenance, quality and financial documents.

- machines, machine_status_history, breakdown_reports
- maintenance_schedules, maintenance_records
- inspections, inspection_checkpoints
- quality_checkpoints, quality_defects, quality_metrics, compliance_reports
- invoices, invoice_items, bills, bill_items

All tables are company-owned and protected by forced RLS.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "d4b9f3a6c2e8"
down_revision: Union[str, None] = "c1a0e5d2b7f1"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

COMPANY_GUC_SQL = "NULLIF(current_setting('app.company_id', true), '')::uuid"

TENANT_TABLES = [
    "machines",
    "machine_status_history",
    "breakdown_reports",
    "maintenance_schedules",
    "maintenance_records",
    "inspections",
    "inspection_checkpoints",
    "quality_checkpoints",
    "quality_defects",
    "quality_metrics",
    "compliance_reports",
    "invoices",
    "invoice_items",
    "bills",
    "bill_items",
]


def _base_columns(*, timestamps: bool = True) -> list:
    cols = [
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("uuid_generate_v4()")),
        sa.Column(
            "company_id",
            sa.UUID(),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            server_default=sa.text(COMPANY_GUC_SQL),
        ),
    ]
    if timestamps:
        cols += [
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        ]
    return cols


def _is_active() -> sa.Column:
    return sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False)


def _jsonb(name: str, default: str) -> sa.Column:
    return sa.Column(
        name, postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text(f"'{default}'::jsonb"), nullable=False
    )


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(18, 2), server_default=sa.text("0"), nullable=False)


def _document_totals() -> list:
    return [
        _money("subtotal"),
        _money("discount_amount"),
        _money("tax_amount"),
        _money("shipping_charges"),
        _money("total_amount"),
        _money("amount_paid"),
        _money("balance_due"),
        sa.Column("currency", sa.Text(), server_default="INR", nullable=False),
        sa.Column("payment_terms", sa.Text(), nullable=True),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("transaction_ref", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    ]


def _document_item() -> list:
    return [
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("item_code", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit_of_measure", sa.Text(), server_default="PCS", nullable=False),
        sa.Column("discount_percent", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False),
        _money("discount_amount"),
        sa.Column("tax_rate", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False),
        _money("tax_amount"),
        _money("line_amount"),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
    ]


def upgrade() -> None:
    # Machines and maintenance
    op.create_table(
        "machines",
        *_base_columns(),
        sa.Column("machine_code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("machine_type", sa.Text(), nullable=True),
        sa.Column("model", sa.Text(), nullable=True),
        sa.Column("manufacturer", sa.Text(), nullable=True),
        sa.Column("serial_number", sa.Text(), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("warranty_expiry", sa.Date(), nullable=True),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.Text(), server_default="NEW", nullable=False),
        sa.Column("operational_status", sa.Text(), server_default="FREE", nullable=False),
        sa.Column("current_operator_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _jsonb("specifications", "{}"),
        _is_active(),
        sa.UniqueConstraint("company_id", "machine_code", name="uq_machines_company_code"),
    )

    op.create_table(
        "machine_status_history",
        *_base_columns(timestamps=False),
        sa.Column("machine_id", sa.UUID(), sa.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("previous_status", sa.Text(), nullable=True),
        sa.Column("new_status", sa.Text(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("changed_by", sa.UUID(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "breakdown_reports",
        *_base_columns(),
        sa.Column("ticket_code", sa.Text(), nullable=False),
        sa.Column("machine_id", sa.UUID(), sa.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("severity", sa.Text(), nullable=False),
        sa.Column("priority", sa.Text(), server_default="MEDIUM", nullable=False),
        sa.Column("status", sa.Text(), server_default="OPEN", nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("breakdown_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_technician", sa.Text(), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("resolved_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("downtime_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("reported_by", sa.UUID(), nullable=True),
    )

    op.create_table(
        "maintenance_schedules",
        *_base_columns(),
        sa.Column("schedule_code", sa.Text(), nullable=False),
        sa.Column("machine_id", sa.UUID(), sa.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("maintenance_type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("frequency_days", sa.Integer(), nullable=True),
        sa.Column("last_completed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_due", sa.DateTime(timezone=True), nullable=False),
        sa.Column("estimated_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("assigned_technician", sa.Text(), nullable=True),
        _jsonb("checklist", "[]"),
        _jsonb("parts_required", "[]"),
        _is_active(),
    )

    op.create_table(
        "maintenance_records",
        *_base_columns(),
        sa.Column("record_code", sa.Text(), nullable=False),
        sa.Column("machine_id", sa.UUID(), sa.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "schedule_id", sa.UUID(), sa.ForeignKey("maintenance_schedules.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("maintenance_type", sa.Text(), nullable=False),
        sa.Column("performed_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("performed_by", sa.Text(), nullable=True),
        sa.Column("duration_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("cost", sa.Numeric(18, 2), nullable=True),
        _jsonb("parts_used", "[]"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("next_maintenance_date", sa.DateTime(timezone=True), nullable=True),
    )

    # Quality
    op.create_table(
        "inspections",
        *_base_columns(),
        sa.Column("inspection_number", sa.Text(), nullable=False),
        sa.Column("inspection_type", sa.Text(), nullable=False),
        sa.Column("reference_type", sa.Text(), nullable=False),
        sa.Column("reference_id", sa.Text(), nullable=False),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("inspector_id", sa.UUID(), nullable=True),
        sa.Column("inspector_name", sa.Text(), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.Text(), server_default="PENDING", nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("overall_result", sa.Text(), nullable=True),
        sa.Column("quality_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("inspector_notes", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        _is_active(),
        sa.UniqueConstraint("company_id", "inspection_number", name="uq_inspections_company_number"),
    )

    op.create_table(
        "inspection_checkpoints",
        *_base_columns(),
        sa.Column(
            "inspection_id", sa.UUID(), sa.ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("evaluation_type", sa.Text(), nullable=False),
        sa.Column("result", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), server_default=sa.text("0"), nullable=False),
    )

    op.create_table(
        "quality_checkpoints",
        *_base_columns(),
        sa.Column("checkpoint_code", sa.Text(), nullable=False),
        sa.Column("checkpoint_type", sa.Text(), nullable=False),
        sa.Column("checkpoint_name", sa.Text(), nullable=False),
        sa.Column("inspector_name", sa.Text(), nullable=False),
        sa.Column("inspection_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("order_id", sa.UUID(), sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("batch_number", sa.Text(), nullable=True),
        sa.Column("lot_number", sa.Text(), nullable=True),
        sa.Column("sample_size", sa.Integer(), nullable=True),
        sa.Column("tested_quantity", sa.Integer(), nullable=True),
        sa.Column("overall_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("status", sa.Text(), server_default="PENDING", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _is_active(),
        sa.UniqueConstraint("company_id", "checkpoint_code", name="uq_quality_checkpoints_company_code"),
    )

    op.create_table(
        "quality_defects",
        *_base_columns(),
        sa.Column("defect_code", sa.Text(), nullable=False),
        sa.Column(
            "checkpoint_id",
            sa.UUID(),
            sa.ForeignKey("quality_checkpoints.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("product_id", sa.UUID(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("defect_category", sa.Text(), nullable=False),
        sa.Column("defect_type", sa.Text(), nullable=False),
        sa.Column("severity", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("batch_number", sa.Text(), nullable=True),
        sa.Column("affected_items", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("resolution_status", sa.Text(), server_default="OPEN", nullable=False),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("resolved_by", sa.Text(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "quality_metrics",
        *_base_columns(),
        sa.Column("metric_code", sa.Text(), nullable=False),
        sa.Column(
            "checkpoint_id",
            sa.UUID(),
            sa.ForeignKey("quality_checkpoints.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("metric_name", sa.Text(), nullable=False),
        sa.Column("metric_value", sa.Numeric(18, 4), nullable=False),
        sa.Column("unit_of_measure", sa.Text(), nullable=False),
        sa.Column("min_threshold", sa.Numeric(18, 4), nullable=True),
        sa.Column("max_threshold", sa.Numeric(18, 4), nullable=True),
        sa.Column("is_within_range", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )

    op.create_table(
        "compliance_reports",
        *_base_columns(),
        sa.Column("report_code", sa.Text(), nullable=False),
        sa.Column("report_type", sa.Text(), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("auditor_name", sa.Text(), nullable=False),
        sa.Column("certification", sa.Text(), nullable=True),
        sa.Column("validity_period", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("findings", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("document_url", sa.Text(), nullable=True),
        _is_active(),
    )

    # Financial documents
    op.create_table(
        "invoices",
        *_base_columns(),
        sa.Column("invoice_code", sa.Text(), nullable=False),
        sa.Column("customer_id", sa.UUID(), sa.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("customer_name", sa.Text(), nullable=True),
        sa.Column("order_id", sa.UUID(), sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Text(), server_default="DRAFT", nullable=False),
        *_document_totals(),
        _is_active(),
        sa.UniqueConstraint("company_id", "invoice_code", name="uq_invoices_company_code"),
    )

    op.create_table(
        "invoice_items",
        *_base_columns(),
        sa.Column("invoice_id", sa.UUID(), sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True),
        *_document_item(),
        sa.Column("unit_price", sa.Numeric(18, 2), nullable=False),
    )

    op.create_table(
        "bills",
        *_base_columns(),
        sa.Column("bill_code", sa.Text(), nullable=False),
        sa.Column("supplier_id", sa.UUID(), sa.ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("supplier_name", sa.Text(), nullable=True),
        sa.Column("supplier_invoice_no", sa.Text(), nullable=True),
        sa.Column("location_id", sa.UUID(), sa.ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("bill_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Text(), server_default="DRAFT", nullable=False),
        *_document_totals(),
        _is_active(),
        sa.UniqueConstraint("company_id", "bill_code", name="uq_bills_company_code"),
    )

    op.create_table(
        "bill_items",
        *_base_columns(),
        sa.Column("bill_id", sa.UUID(), sa.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True),
        *_document_item(),
        sa.Column("unit_cost", sa.Numeric(18, 2), nullable=False),
    )

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

    for tbl in reversed(TENANT_TABLES):
        op.drop_table(tbl)
