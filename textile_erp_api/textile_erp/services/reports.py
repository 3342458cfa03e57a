"""
Tenant-scoped business reports.

Each report is computed with pandas from rows read through ReportRepository
and returned as a `Report`: the JSON payload plus the DataFrame used for
csv/xlsx/pdf exports.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel

from textile_erp.repositories.reports import ReportRepository
from textile_erp.schemas.reports import (
    AgingBuckets,
    AgingReport,
    CustomerRevenue,
    InventoryLine,
    InventoryMovementsReport,
    InventorySummaryReport,
    MachineUtilizationLine,
    MachineUtilizationReport,
    MovementLine,
    MovementTypeTotal,
    PartyAging,
    ProfitLossReport,
    QualityMetricsReport,
    RevenueLine,
    SalesSummaryReport,
)
from textile_erp.services.base import TenantService
from textile_erp.services.pricing import money

logger = logging.getLogger(__name__)

COGS_SHARE = Decimal("0.70")
OPEX_SHARE = Decimal("0.30")
TOP_CUSTOMERS = 10
AGING_BUCKETS = ("current", "days_31_60", "days_61_90", "over_90")


@dataclass(frozen=True)
class Report:
    name: str
    data: BaseModel
    frame: pd.DataFrame


def _floats(frame: pd.DataFrame, *columns: str) -> pd.DataFrame:
    for column in columns:
        frame[column] = frame[column].map(lambda v: float(v) if v is not None else float("nan"))
    return frame


def _plain(value: Any) -> Any:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return value.item() if hasattr(value, "item") else value


def _records(frame: pd.DataFrame) -> List[dict]:
    """DataFrame rows as plain Python dicts, NaN as None."""
    return [{k: _plain(v) for k, v in record.items()} for record in frame.to_dict("records")]


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _day_bounds(start: Optional[date], end: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = datetime.combine(end, time.max, tzinfo=timezone.utc) if end else None
    return lower, upper


# PUBLIC_INTERFACE
def aging_bucket(days_past_due: int) -> str:
    """current (<= 30 days, including not yet due), days_31_60, days_61_90 or over_90."""
    if days_past_due <= 30:
        return "current"
    if days_past_due <= 60:
        return "days_31_60"
    if days_past_due <= 90:
        return "days_61_90"
    return "over_90"


# PUBLIC_INTERFACE
def age_balances(rows: Iterable[Sequence[Any]], as_of: date) -> Tuple[AgingReport, pd.DataFrame]:
    """
    Bucket open balances by days past due.

    rows: (document_code, party_id, party_name, due_date, balance_due)
    """
    frame = pd.DataFrame(
        [tuple(r) for r in rows], columns=["document", "party_id", "party_name", "due_date", "balance_due"]
    )
    frame = _floats(frame, "balance_due")
    frame["days_past_due"] = [(as_of - d).days for d in frame["due_date"]]
    frame["bucket"] = [aging_bucket(d) for d in frame["days_past_due"]]
    if frame.empty:
        return AgingReport(as_of=as_of, totals=AgingBuckets(), parties=[]), frame

    sums = frame.groupby("bucket")["balance_due"].sum()
    totals = AgingBuckets(
        **{b: round(float(sums.get(b, 0.0)), 2) for b in AGING_BUCKETS},
        total=round(float(frame["balance_due"].sum()), 2),
    )

    frame["party_key"] = [str(p) if p else "" for p in frame["party_id"]]
    frame["party_label"] = frame["party_name"].fillna("Unknown")
    pivot = pd.pivot_table(
        frame,
        index=["party_key", "party_label"],
        columns="bucket",
        values="balance_due",
        aggfunc="sum",
        fill_value=0.0,
    ).reindex(columns=list(AGING_BUCKETS), fill_value=0.0)
    parties = [
        PartyAging(
            party_id=key or None,
            party_name=label,
            total=round(float(values.sum()), 2),
            **{b: round(float(values[b]), 2) for b in AGING_BUCKETS},
        )
        for (key, label), values in pivot.iterrows()
    ]
    parties.sort(key=lambda p: p.total, reverse=True)
    export = frame[["document", "party_label", "due_date", "days_past_due", "bucket", "balance_due"]].rename(
        columns={"party_label": "party"}
    )
    return AgingReport(as_of=as_of, totals=totals, parties=parties), export


# PUBLIC_INTERFACE
def profit_and_loss(
    revenue: Decimal,
    bill_line_total: Decimal,
    revenue_lines: Iterable[Sequence[Any]],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> ProfitLossReport:
    """
    Revenue minus purchases, with purchases split 70/30 into cost of goods and
    operating expenses.
    """
    revenue = money(revenue)
    cogs = money(bill_line_total * COGS_SHARE)
    opex = money(bill_line_total * OPEX_SHARE)
    gross = revenue - cogs
    net = gross - opex

    lines = pd.DataFrame([tuple(r) for r in revenue_lines], columns=["product", "amount"])
    lines = _floats(lines, "amount")
    by_product = lines.groupby("product")["amount"].sum().sort_values(ascending=False)
    line_total = float(by_product.sum()) if not by_product.empty else 0.0
    breakdown = [
        RevenueLine(product=str(product), amount=round(float(amount), 2), percentage=_pct(float(amount), line_total))
        for product, amount in by_product.items()
    ]
    return ProfitLossReport(
        start_date=start,
        end_date=end,
        revenue=float(revenue),
        cost_of_goods_sold=float(cogs),
        gross_profit=float(gross),
        operating_expenses=float(opex),
        net_profit=float(net),
        profit_margin=_pct(float(net), float(revenue)),
        revenue_breakdown=breakdown,
    )


class ReportService(TenantService):
    """Builds report payloads and their export frames for the context company."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.rows = ReportRepository(session, ctx.company_id)

    # PUBLIC_INTERFACE
    async def profit_loss(self, start: Optional[date], end: Optional[date]) -> Report:
        invoices = await self.rows.invoices(start, end)
        revenue = sum((Decimal(str(r.total_amount or 0)) for r in invoices), Decimal("0"))
        bill_total = await self.rows.bill_line_total(start, end)
        data = profit_and_loss(revenue, bill_total, await self.rows.revenue_lines(start, end), start, end)

        summary = [
            ("Revenue", data.revenue),
            ("Cost of goods sold", data.cost_of_goods_sold),
            ("Gross profit", data.gross_profit),
            ("Operating expenses", data.operating_expenses),
            ("Net profit", data.net_profit),
            ("Profit margin %", data.profit_margin),
        ]
        summary += [(f"Revenue: {line.product}", line.amount) for line in data.revenue_breakdown]
        logger.info("Built profit and loss report (%s..%s)", start or "-", end or "-")
        return Report("profit_loss", data, pd.DataFrame(summary, columns=["line", "amount"]))

    # PUBLIC_INTERFACE
    async def sales_summary(self, start: Optional[date], end: Optional[date]) -> Report:
        columns = [
            "invoice_code", "customer_id", "customer_name", "invoice_date",
            "status", "total_amount", "amount_paid", "balance_due",
        ]
        frame = pd.DataFrame([tuple(r) for r in await self.rows.invoices(start, end)], columns=columns)
        frame = _floats(frame, "total_amount", "amount_paid", "balance_due")
        frame["customer_name"] = frame["customer_name"].fillna("Walk-in")

        top = (
            frame.groupby("customer_name")
            .agg(invoice_count=("invoice_code", "count"), revenue=("total_amount", "sum"))
            .sort_values("revenue", ascending=False)
            .head(TOP_CUSTOMERS)
        )
        paid = frame[frame["status"] == "PAID"]
        data = SalesSummaryReport(
            start_date=start,
            end_date=end,
            invoice_count=len(frame),
            total_revenue=round(float(frame["total_amount"].sum()), 2),
            paid_count=len(paid),
            paid_amount=round(float(frame["amount_paid"].sum()), 2),
            outstanding_amount=round(float(frame["balance_due"].sum()), 2),
            top_customers=[
                CustomerRevenue(customer=str(name), invoice_count=int(row.invoice_count), revenue=round(float(row.revenue), 2))
                for name, row in top.iterrows()
            ],
        )
        return Report("sales_summary", data, frame.drop(columns=["customer_id"]))

    # PUBLIC_INTERFACE
    async def inventory_summary(self, location_id=None) -> Report:
        columns = ["product_code", "sku", "name", "stock_quantity", "reorder_level", "cost_price"]
        if location_id is not None:
            rows = await self.rows.location_stock(location_id)
            columns = columns + ["location"]
        else:
            rows = await self.rows.product_stock()
        frame = pd.DataFrame([tuple(r) for r in rows], columns=columns)
        if "location" not in frame.columns:
            frame["location"] = None
        frame = _floats(frame, "stock_quantity", "reorder_level", "cost_price")
        frame["stock_value"] = (frame["stock_quantity"] * frame["cost_price"]).round(2)
        frame["is_low_stock"] = frame["reorder_level"].notna() & (frame["stock_quantity"] <= frame["reorder_level"])
        frame["is_out_of_stock"] = frame["stock_quantity"] <= 0

        data = InventorySummaryReport(
            total_products=len(frame),
            total_stock_value=round(float(frame["stock_value"].sum()), 2),
            low_stock_count=int(frame["is_low_stock"].sum()),
            out_of_stock_count=int(frame["is_out_of_stock"].sum()),
            items=[InventoryLine(**record) for record in _records(frame)],
        )
        return Report("inventory_summary", data, frame)

    # PUBLIC_INTERFACE
    async def receivables_aging(self, as_of: Optional[date] = None) -> Report:
        as_of = as_of or date.today()
        data, frame = age_balances(await self.rows.open_invoices(), as_of)
        return Report("ar_aging", data, frame)

    # PUBLIC_INTERFACE
    async def payables_aging(self, as_of: Optional[date] = None) -> Report:
        as_of = as_of or date.today()
        data, frame = age_balances(await self.rows.open_bills(), as_of)
        return Report("ap_aging", data, frame)

    async def machine_utilization(self) -> Report:
        columns = [
            "machine_code", "name", "machine_type", "status", "operational_status",
            "breakdown_count", "downtime_hours", "maintenance_records",
        ]
        frame = pd.DataFrame([tuple(r) for r in await self.rows.machine_utilization()], columns=columns)
        frame = _floats(frame, "downtime_hours")
        data = MachineUtilizationReport(machines=[MachineUtilizationLine(**record) for record in _records(frame)])
        return Report("machine_utilization", data, frame)

    async def quality_metrics(self, start: Optional[date], end: Optional[date]) -> Report:
        lower, upper = _day_bounds(start, end)
        statuses = pd.Series(await self.rows.checkpoint_statuses(lower, upper), dtype=object)
        defects = pd.DataFrame(
            [tuple(r) for r in await self.rows.defects(lower, upper)],
            columns=["defect_code", "defect_category", "severity", "quantity", "resolution_status", "created_at"],
        )
        total = len(statuses)
        passed = int((statuses == "PASSED").sum())
        failed = int((statuses == "FAILED").sum())
        data = QualityMetricsReport(
            start_date=start,
            end_date=end,
            total_checkpoints=total,
            passed=passed,
            failed=failed,
            pass_rate=_pct(passed, total),
            fail_rate=_pct(failed, total),
            total_defects=len(defects),
            defects_by_category={str(k): int(v) for k, v in defects["defect_category"].value_counts().items()},
            defects_by_severity={str(k): int(v) for k, v in defects["severity"].value_counts().items()},
        )
        return Report("quality_metrics", data, defects)

    async def inventory_movements(self, start: Optional[date], end: Optional[date]) -> Report:
        lower, upper = _day_bounds(start, end)
        columns = [
            "movement_code", "created_at", "product", "movement_type", "quantity",
            "unit_cost", "total_cost", "reference_type", "reference_id",
        ]
        frame = pd.DataFrame([tuple(r) for r in await self.rows.movements(lower, upper)], columns=columns)
        frame = _floats(frame, "quantity", "unit_cost", "total_cost")
        frame["created_at"] = frame["created_at"].map(lambda v: v.isoformat() if v is not None else None)

        totals = (
            frame.groupby("movement_type")
            .agg(movements=("movement_code", "count"), quantity=("quantity", "sum"), total_cost=("total_cost", "sum"))
            .reset_index()
        )
        data = InventoryMovementsReport(
            start_date=start,
            end_date=end,
            movements=[MovementLine(**record) for record in _records(frame)],
            totals_by_type=[
                MovementTypeTotal(
                    movement_type=row.movement_type,
                    movements=int(row.movements),
                    quantity=round(float(row.quantity), 3),
                    total_cost=round(float(row.total_cost), 2),
                )
                for row in totals.itertuples(index=False)
            ],
        )
        return Report("inventory_movements", data, frame)
