from __future__ import annotations

import io
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok
from textile_erp.schemas.reports import (
    AgingReport,
    InventoryMovementsReport,
    InventorySummaryReport,
    MachineUtilizationReport,
    ProfitLossReport,
    QualityMetricsReport,
    SalesSummaryReport,
)
from textile_erp.services.reports import Report, ReportService

# PUBLIC_INTERFACE
router = APIRouter(prefix="/reports", tags=["Reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
_FILE_RESPONSES = {
    200: {
        "content": {"text/csv": {}, XLSX_MEDIA_TYPE: {}, "application/pdf": {}},
        "description": "JSON envelope, or a file stream when format is given",
    }
}


class ExportFormat(str, Enum):
    csv = "csv"
    xlsx = "xlsx"
    pdf = "pdf"


def _attachment(buffer, filename: str, media_type: str) -> StreamingResponse:
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(buffer, media_type=media_type, headers=headers)


def _pdf_table(df: pd.DataFrame, filename_base: str) -> io.BytesIO:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    stamp = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    title = Paragraph(f"{filename_base.replace('_', ' ').title()} ({stamp})", getSampleStyleSheet()["Title"])
    rows = [list(df.columns)] + df.fillna("").astype(str).values.tolist()
    table = Table(rows, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    doc.build([title, table])
    buffer.seek(0)
    return buffer


# PUBLIC_INTERFACE
def export_dataframe(df: pd.DataFrame, filename_base: str, export_format: ExportFormat) -> StreamingResponse:
    """
    Stream a DataFrame as a downloadable file.

    Supported formats:
      - csv: text/csv
      - xlsx: spreadsheet written with the openpyxl engine
      - pdf: a single landscape table rendered with reportlab
    """
    if export_format == ExportFormat.xlsx:
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        return _attachment(buffer, f"{filename_base}.xlsx", XLSX_MEDIA_TYPE)

    if export_format == ExportFormat.pdf:
        return _attachment(_pdf_table(df, filename_base), f"{filename_base}.pdf", "application/pdf")

    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)
    return _attachment(buffer, f"{filename_base}.csv", "text/csv")


def _respond(report: Report, export_format: Optional[ExportFormat]):
    if export_format is None:
        return ok(report.data)
    return export_dataframe(report.frame, report.name, export_format)


def _format_query():
    return Query(None, alias="format", description="Export format: csv | xlsx | pdf; omit for JSON")


# PUBLIC_INTERFACE
@router.get(
    "/profit-loss",
    response_model=ApiResponse[ProfitLossReport],
    responses=_FILE_RESPONSES,
    summary="Profit and loss",
    description="Revenue from invoices, cost of goods and expenses from bill lines, with a revenue breakdown by product.",
)
async def profit_loss_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).profit_loss(start_date, end_date), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/sales-summary",
    response_model=ApiResponse[SalesSummaryReport],
    responses=_FILE_RESPONSES,
    summary="Sales summary",
    description="Invoice count, revenue, paid and outstanding amounts and top customers.",
)
async def sales_summary_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).sales_summary(start_date, end_date), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/inventory-summary",
    response_model=ApiResponse[InventorySummaryReport],
    responses=_FILE_RESPONSES,
    summary="Inventory summary",
    description="Product count, stock value and low or out of stock counts, company-wide or for one location.",
)
async def inventory_summary_report(
    location_id: Optional[UUID] = Query(None),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).inventory_summary(location_id), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/ar-aging",
    response_model=ApiResponse[AgingReport],
    responses=_FILE_RESPONSES,
    summary="Receivables aging",
    description="Open invoice balances bucketed by days past due, per customer.",
)
async def receivables_aging_report(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).receivables_aging(as_of), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/ap-aging",
    response_model=ApiResponse[AgingReport],
    responses=_FILE_RESPONSES,
    summary="Payables aging",
    description="Open bill balances bucketed by days past due, per supplier.",
)
async def payables_aging_report(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).payables_aging(as_of), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/machine-utilization",
    response_model=ApiResponse[MachineUtilizationReport],
    responses=_FILE_RESPONSES,
    summary="Machine utilization",
    description="Per machine status, breakdown count, downtime hours and maintenance records.",
)
async def machine_utilization_report(
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).machine_utilization(), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/quality-metrics",
    response_model=ApiResponse[QualityMetricsReport],
    responses=_FILE_RESPONSES,
    summary="Quality metrics",
    description="Checkpoint pass and fail rates plus defects by category and severity.",
)
async def quality_metrics_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).quality_metrics(start_date, end_date), export_format)


# PUBLIC_INTERFACE
@router.get(
    "/inventory-movements",
    response_model=ApiResponse[InventoryMovementsReport],
    responses=_FILE_RESPONSES,
    summary="Inventory movements",
    description="Movement rows in range with quantity and cost totals by movement type.",
)
async def inventory_movements_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    export_format: Optional[ExportFormat] = _format_query(),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return _respond(await ReportService(session, ctx).inventory_movements(start_date, end_date), export_format)
