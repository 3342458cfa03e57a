from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.db.models.catalog import Product
from textile_erp.db.models.finance import Bill, BillItem, Invoice, InvoiceItem
from textile_erp.db.models.inventory import LocationInventory, StockMovement
from textile_erp.db.models.location import Location
from textile_erp.db.models.maintenance import BreakdownReport, Machine, MaintenanceRecord
from textile_erp.db.models.quality import QualityCheckpoint, QualityDefect
from .base import BaseRepository

OPEN_INVOICE_STATUSES = ("SENT", "PARTIALLY_PAID", "OVERDUE")
OPEN_BILL_STATUSES = ("RECEIVED", "PARTIALLY_PAID", "OVERDUE")


class ReportRepository(BaseRepository):
    """
    Read-only row queries behind the reports.

    Each statement joins several tables, so every participating table is
    filtered by the context company explicitly.
    """

    def __init__(self, session: AsyncSession, company_id: UUID) -> None:
        super().__init__(session)
        self.company_id = company_id

    async def _rows(self, stmt: Select) -> Sequence[Any]:
        res = await self.execute(stmt)
        return list(res.all())

    # Sales and purchases

    def _invoices_in_range(self, stmt: Select, start: Optional[date], end: Optional[date]) -> Select:
        stmt = stmt.where(
            Invoice.company_id == self.company_id,
            Invoice.is_active.is_(True),
            Invoice.status != "CANCELLED",
        )
        if start:
            stmt = stmt.where(Invoice.invoice_date >= start)
        if end:
            stmt = stmt.where(Invoice.invoice_date <= end)
        return stmt

    async def invoices(self, start: Optional[date], end: Optional[date]) -> Sequence[Any]:
        stmt = select(
            Invoice.invoice_code,
            Invoice.customer_id,
            Invoice.customer_name,
            Invoice.invoice_date,
            Invoice.status,
            Invoice.total_amount,
            Invoice.amount_paid,
            Invoice.balance_due,
        ).order_by(Invoice.invoice_date, Invoice.invoice_code)
        return await self._rows(self._invoices_in_range(stmt, start, end))

    async def revenue_lines(self, start: Optional[date], end: Optional[date]) -> Sequence[Any]:
        """Invoice lines with the product name where the line references a product."""
        stmt = (
            select(
                func.coalesce(Product.name, InvoiceItem.description, InvoiceItem.item_code).label("product"),
                InvoiceItem.line_amount,
            )
            .join(Invoice, Invoice.id == InvoiceItem.invoice_id)
            .outerjoin(Product, (Product.id == InvoiceItem.product_id) & (Product.company_id == self.company_id))
            .where(InvoiceItem.company_id == self.company_id)
        )
        return await self._rows(self._invoices_in_range(stmt, start, end))

    async def bill_line_total(self, start: Optional[date], end: Optional[date]) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(BillItem.line_amount), 0))
            .join(Bill, Bill.id == BillItem.bill_id)
            .where(
                BillItem.company_id == self.company_id,
                Bill.company_id == self.company_id,
                Bill.is_active.is_(True),
                Bill.status != "CANCELLED",
            )
        )
        if start:
            stmt = stmt.where(Bill.bill_date >= start)
        if end:
            stmt = stmt.where(Bill.bill_date <= end)
        res = await self.execute(stmt)
        return Decimal(str(res.scalar_one() or 0))

    async def open_invoices(self) -> Sequence[Any]:
        stmt = select(
            Invoice.invoice_code,
            Invoice.customer_id,
            Invoice.customer_name,
            Invoice.due_date,
            Invoice.balance_due,
        ).where(
            Invoice.company_id == self.company_id,
            Invoice.is_active.is_(True),
            Invoice.status.in_(OPEN_INVOICE_STATUSES),
            Invoice.balance_due > 0,
        )
        return await self._rows(stmt)

    async def open_bills(self) -> Sequence[Any]:
        stmt = select(
            Bill.bill_code,
            Bill.supplier_id,
            Bill.supplier_name,
            Bill.due_date,
            Bill.balance_due,
        ).where(
            Bill.company_id == self.company_id,
            Bill.is_active.is_(True),
            Bill.status.in_(OPEN_BILL_STATUSES),
            Bill.balance_due > 0,
        )
        return await self._rows(stmt)

    # Inventory

    async def product_stock(self) -> Sequence[Any]:
        stmt = (
            select(
                Product.product_code,
                Product.sku,
                Product.name,
                Product.stock_quantity,
                Product.reorder_level,
                Product.cost_price,
            )
            .where(Product.company_id == self.company_id, Product.is_active.is_(True))
            .order_by(Product.name)
        )
        return await self._rows(stmt)

    async def location_stock(self, location_id: UUID) -> Sequence[Any]:
        stmt = (
            select(
                Product.product_code,
                Product.sku,
                Product.name,
                LocationInventory.stock_quantity,
                func.coalesce(LocationInventory.reorder_level, Product.reorder_level),
                Product.cost_price,
                Location.name,
            )
            .join(Product, Product.id == LocationInventory.product_id)
            .join(Location, Location.id == LocationInventory.location_id)
            .where(
                LocationInventory.company_id == self.company_id,
                Product.company_id == self.company_id,
                Location.company_id == self.company_id,
                LocationInventory.location_id == location_id,
            )
            .order_by(Product.name)
        )
        return await self._rows(stmt)

    async def movements(self, start: Optional[datetime], end: Optional[datetime]) -> Sequence[Any]:
        stmt = (
            select(
                StockMovement.movement_code,
                StockMovement.created_at,
                Product.name,
                StockMovement.movement_type,
                StockMovement.quantity,
                StockMovement.unit_cost,
                StockMovement.total_cost,
                StockMovement.reference_type,
                StockMovement.reference_id,
            )
            .join(Product, Product.id == StockMovement.product_id)
            .where(StockMovement.company_id == self.company_id, Product.company_id == self.company_id)
            .order_by(StockMovement.created_at)
        )
        if start:
            stmt = stmt.where(StockMovement.created_at >= start)
        if end:
            stmt = stmt.where(StockMovement.created_at <= end)
        return await self._rows(stmt)

    # Machines

    async def machine_utilization(self) -> Sequence[Any]:
        breakdowns = (
            select(func.count(BreakdownReport.id))
            .where(BreakdownReport.machine_id == Machine.id, BreakdownReport.company_id == self.company_id)
            .scalar_subquery()
        )
        downtime = (
            select(func.coalesce(func.sum(BreakdownReport.downtime_hours), 0))
            .where(BreakdownReport.machine_id == Machine.id, BreakdownReport.company_id == self.company_id)
            .scalar_subquery()
        )
        records = (
            select(func.count(MaintenanceRecord.id))
            .where(MaintenanceRecord.machine_id == Machine.id, MaintenanceRecord.company_id == self.company_id)
            .scalar_subquery()
        )
        stmt = (
            select(
                Machine.machine_code,
                Machine.name,
                Machine.machine_type,
                Machine.status,
                Machine.operational_status,
                breakdowns.label("breakdown_count"),
                downtime.label("downtime_hours"),
                records.label("maintenance_records"),
            )
            .where(Machine.company_id == self.company_id, Machine.is_active.is_(True))
            .order_by(Machine.machine_code)
        )
        return await self._rows(stmt)

    # Quality

    async def checkpoint_statuses(self, start: Optional[datetime], end: Optional[datetime]) -> List[str]:
        stmt = select(QualityCheckpoint.status).where(
            QualityCheckpoint.company_id == self.company_id, QualityCheckpoint.is_active.is_(True)
        )
        if start:
            stmt = stmt.where(QualityCheckpoint.inspection_date >= start)
        if end:
            stmt = stmt.where(QualityCheckpoint.inspection_date <= end)
        return [row[0] for row in await self._rows(stmt)]

    async def defects(self, start: Optional[datetime], end: Optional[datetime]) -> Sequence[Any]:
        stmt = select(
            QualityDefect.defect_code,
            QualityDefect.defect_category,
            QualityDefect.severity,
            QualityDefect.quantity,
            QualityDefect.resolution_status,
            QualityDefect.created_at,
        ).where(QualityDefect.company_id == self.company_id)
        if start:
            stmt = stmt.where(QualityDefect.created_at >= start)
        if end:
            stmt = stmt.where(QualityDefect.created_at <= end)
        return await self._rows(stmt.order_by(QualityDefect.created_at))
