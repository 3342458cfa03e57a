from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_

from textile_erp.db.models.procurement import PurchaseOrder, Supplier
from .base import TenantRepository


class SupplierRepository(TenantRepository[Supplier]):
    """Repository for suppliers."""

    model = Supplier

    async def list_suppliers(
        self, *, search: Optional[str] = None, is_active: Optional[bool] = None, limit: int = 100, offset: int = 0
    ) -> List[Supplier]:
        criteria = []
        if is_active is not None:
            criteria.append(Supplier.is_active.is_(is_active))
        if search:
            like = f"%{search}%"
            criteria.append(or_(Supplier.code.ilike(like), Supplier.name.ilike(like)))
        return await self.list_where(*criteria, order_by=Supplier.code, limit=limit, offset=offset)


class PurchaseOrderRepository(TenantRepository[PurchaseOrder]):
    """Purchase orders; items are loaded with the header (selectin)."""

    model = PurchaseOrder

    async def get_by_code(self, po_code: str) -> Optional[PurchaseOrder]:
        stmt = self.scoped().where(PurchaseOrder.po_code == po_code, PurchaseOrder.is_active.is_(True))
        return await self.scalar_one_or_none(stmt)

    async def list_purchase_orders(
        self,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        supplier_id: Optional[UUID] = None,
        supplier_name: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[PurchaseOrder]:
        criteria = [PurchaseOrder.is_active.is_(True)]
        if status:
            criteria.append(PurchaseOrder.status == status)
        if priority:
            criteria.append(PurchaseOrder.priority == priority)
        if supplier_id:
            criteria.append(PurchaseOrder.supplier_id == supplier_id)
        if supplier_name:
            criteria.append(PurchaseOrder.supplier_name.ilike(f"%{supplier_name}%"))
        if from_date:
            criteria.append(PurchaseOrder.po_date >= from_date)
        if to_date:
            criteria.append(PurchaseOrder.po_date <= to_date)
        return await self.list_where(
            *criteria, order_by=[PurchaseOrder.created_at.desc()], limit=limit, offset=offset
        )
