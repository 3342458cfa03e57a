from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError
from textile_erp.db.models.procurement import PurchaseOrder, PurchaseOrderItem
from textile_erp.repositories.catalog import ProductRepository
from textile_erp.repositories.locations import LocationRepository
from textile_erp.repositories.procurement import PurchaseOrderRepository, SupplierRepository
from textile_erp.schemas.procurement import PurchaseOrderCreate, PurchaseOrderStatusUpdate, PurchaseOrderUpdate
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import PURCHASE_ORDER_CODE
from textile_erp.services.orders import apply_totals, check_transition, price_items
from textile_erp.services.pricing import compute_line, compute_totals

logger = logging.getLogger(__name__)

PURCHASE_ORDER_TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    "DRAFT": frozenset({"SENT", "CANCELLED"}),
    "SENT": frozenset({"CONFIRMED", "CANCELLED"}),
    "CONFIRMED": frozenset({"PARTIALLY_RECEIVED", "RECEIVED", "CANCELLED"}),
    "PARTIALLY_RECEIVED": frozenset({"RECEIVED"}),
    "RECEIVED": frozenset(),
    "CANCELLED": frozenset(),
}
LOCKED_PO_STATUSES = frozenset({"RECEIVED", "CANCELLED"})
_STATUS_FIELDS = ("expected_delivery_date", "shipping_method")


class PurchaseOrderService(TenantService):
    """Purchase orders to suppliers, their items and the receiving workflow."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.purchase_orders: PurchaseOrderRepository = self.repo(PurchaseOrderRepository)

    async def _check_refs(
        self, supplier_id: Optional[UUID], location_id: Optional[UUID], items
    ) -> Tuple[Optional[str], Optional[str]]:
        """Referenced supplier, location and products must be active in the company; returns supplier name and code."""
        name = code = None
        if supplier_id is not None:
            supplier = self.require(await self.repo(SupplierRepository).get_active(supplier_id), "Supplier", supplier_id)
            name, code = supplier.name, supplier.code
        if location_id is not None:
            self.require(await self.repo(LocationRepository).get_active(location_id), "Location", location_id)
        products = self.repo(ProductRepository)
        for item in items or ():
            if item.product_id is not None:
                self.require(await products.get_active(item.product_id), "Product", item.product_id)
        return name, code

    def _po_items(self, rows: List[Dict[str, Any]]) -> List[PurchaseOrderItem]:
        return [PurchaseOrderItem(company_id=self.company_id, **row) for row in rows]

    async def list_purchase_orders(self, **filters) -> List[PurchaseOrder]:
        return await self.purchase_orders.list_purchase_orders(**filters)

    async def get_purchase_order(self, po_code: str) -> PurchaseOrder:
        return self.require(await self.purchase_orders.get_by_code(po_code), "Purchase order", po_code)

    # PUBLIC_INTERFACE
    async def create_purchase_order(self, payload: PurchaseOrderCreate) -> PurchaseOrder:
        """Create a DRAFT purchase order with priced items and derived totals."""
        supplier_name, supplier_code = await self._check_refs(payload.supplier_id, payload.location_id, payload.items)
        rows, totals = price_items(payload.items, price_field="unit_cost", shipping_charges=payload.shipping_charges)

        data = dump(payload, exclude=("items",))
        data["supplier_name"] = data.get("supplier_name") or supplier_name
        code = await self.next_code(self.purchase_orders, PurchaseOrder.po_code, *PURCHASE_ORDER_CODE)
        po = PurchaseOrder(
            po_code=code,
            supplier_code=supplier_code,
            status="DRAFT",
            is_active=True,
            created_by=self.ctx.user_id,
            **data,
        )
        apply_totals(po, totals)
        po.items = self._po_items(rows)
        await self.purchase_orders.create(po)
        await self.commit()
        await self.session.refresh(po)
        logger.info("Created purchase order %s with %d items, total %s", code, len(rows), po.total_amount)
        return po

    # PUBLIC_INTERFACE
    async def update_purchase_order(self, po_code: str, payload: PurchaseOrderUpdate) -> PurchaseOrder:
        """Update header fields and optionally replace all items; received or cancelled orders are locked."""
        po = await self.get_purchase_order(po_code)
        if po.status in LOCKED_PO_STATUSES:
            raise BusinessRuleError(f"Cannot update a purchase order in {po.status} status")

        changes = dump(payload, exclude_unset=True, exclude=("items",))
        supplier_name, supplier_code = await self._check_refs(
            changes.get("supplier_id"), changes.get("location_id"), payload.items
        )
        if supplier_code:
            changes["supplier_code"] = supplier_code
            if not changes.get("supplier_name"):
                changes["supplier_name"] = supplier_name
        for required in ("po_date", "priority", "currency", "shipping_charges"):
            if changes.get(required, "") is None:
                changes.pop(required)
        apply_changes(po, changes)

        if payload.items is not None:
            rows, totals = price_items(payload.items, price_field="unit_cost", shipping_charges=po.shipping_charges)
            po.items = self._po_items(rows)
            apply_totals(po, totals)
        elif "shipping_charges" in changes:
            existing = [compute_line(i.quantity, i.unit_cost, i.discount_percent, i.tax_rate) for i in po.items]
            apply_totals(po, compute_totals(existing, po.shipping_charges))

        await self.commit()
        await self.session.refresh(po)
        logger.info("Updated purchase order %s", po.po_code)
        return po

    # PUBLIC_INTERFACE
    async def update_status(self, po_code: str, payload: PurchaseOrderStatusUpdate) -> PurchaseOrder:
        """Move along DRAFT -> SENT -> CONFIRMED -> (PARTIALLY_)RECEIVED; delivery date and shipping method may ride along."""
        po = await self.get_purchase_order(po_code)
        target = payload.status.value
        if not check_transition(PURCHASE_ORDER_TRANSITIONS, po.status, target):
            return po

        previous = po.status
        po.status = target
        extra = dump(payload, exclude_unset=True, exclude=("status",))
        apply_changes(po, {k: v for k, v in extra.items() if k in _STATUS_FIELDS and v is not None})
        await self.commit()
        await self.session.refresh(po)
        logger.info("Purchase order %s status %s -> %s", po.po_code, previous, target)
        return po

    async def delete_purchase_order(self, po_code: str) -> None:
        po = await self.get_purchase_order(po_code)
        if po.status != "DRAFT":
            raise BusinessRuleError("Only DRAFT purchase orders can be deleted")
        po.is_active = False
        await self.commit()
        logger.info("Deactivated purchase order %s", po.po_code)
