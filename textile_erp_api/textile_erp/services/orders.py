from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError
from textile_erp.db.models.sales import Order, OrderItem
from textile_erp.repositories.catalog import ProductRepository
from textile_erp.repositories.locations import LocationRepository
from textile_erp.repositories.sales import CustomerRepository, OrderRepository
from textile_erp.schemas.orders import OrderCreate, OrderStatusUpdate, OrderUpdate
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import ORDER_CODE
from textile_erp.services.pricing import DocumentTotals, compute_line, compute_totals

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    "DRAFT": frozenset({"CONFIRMED", "CANCELLED"}),
    "CONFIRMED": frozenset({"IN_PRODUCTION", "CANCELLED"}),
    "IN_PRODUCTION": frozenset({"READY_TO_SHIP", "CANCELLED"}),
    "READY_TO_SHIP": frozenset({"SHIPPED"}),
    "SHIPPED": frozenset({"DELIVERED"}),
    "DELIVERED": frozenset(),
    "CANCELLED": frozenset(),
}
LOCKED_ORDER_STATUSES = frozenset({"DELIVERED", "CANCELLED"})
_SHIPPING_FIELDS = (
    "delivery_date",
    "shipping_address",
    "shipping_carrier",
    "tracking_number",
    "shipping_method",
    "delivery_window_start",
    "delivery_window_end",
)


# PUBLIC_INTERFACE
def check_transition(transitions: Mapping[str, FrozenSet[str]], current: str, target: str) -> bool:
    """
    Validate a status move against an adjacency map.

    Returns False for a same-status request (nothing to do), True for an
    allowed move, and raises BusinessRuleError otherwise.
    """
    if current == target:
        return False
    if target not in transitions.get(current, frozenset()):
        raise BusinessRuleError(f"Invalid status transition from {current} to {target}")
    return True


# PUBLIC_INTERFACE
def price_items(
    items: Iterable[Any], price_field: str = "unit_price", shipping_charges=None
) -> Tuple[List[Dict[str, Any]], DocumentTotals]:
    """
    Number the lines and compute their amounts.

    Returns the column values for each item row and the document totals.
    """
    rows: List[Dict[str, Any]] = []
    amounts = []
    for line_number, item in enumerate(items, start=1):
        values = dump(item) if hasattr(item, "model_dump") else dict(item)
        line = compute_line(
            values["quantity"], values[price_field], values.get("discount_percent"), values.get("tax_rate")
        )
        amounts.append(line)
        values.update(
            line_number=line_number,
            discount_amount=line.discount,
            tax_amount=line.tax,
            line_amount=line.line,
        )
        rows.append(values)
    return rows, compute_totals(amounts, shipping_charges)


def apply_totals(document: Any, totals: DocumentTotals) -> None:
    document.subtotal = totals.subtotal
    document.discount_amount = totals.discount_amount
    document.tax_amount = totals.tax_amount
    document.shipping_charges = totals.shipping_charges
    document.total_amount = totals.total_amount


class OrderService(TenantService):
    """Sales orders, their items and the status workflow."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.orders: OrderRepository = self.repo(OrderRepository)

    async def _check_refs(self, customer_id: Optional[UUID], location_id: Optional[UUID], items) -> Optional[str]:
        """Referenced customer, location and products must belong to the company; returns the customer name."""
        customer_name = None
        if customer_id is not None:
            customer = self.require(await self.repo(CustomerRepository).get_active(customer_id), "Customer", customer_id)
            customer_name = customer.name
        if location_id is not None:
            self.require(await self.repo(LocationRepository).get_active(location_id), "Location", location_id)
        products = self.repo(ProductRepository)
        for item in items or ():
            if item.product_id is not None:
                self.require(await products.get_active(item.product_id), "Product", item.product_id)
        return customer_name

    def _order_items(self, rows: List[Dict[str, Any]]) -> List[OrderItem]:
        return [OrderItem(company_id=self.company_id, **row) for row in rows]

    async def list_orders(self, **filters) -> List[Order]:
        return await self.orders.list_orders(**filters)

    async def get_order(self, order_code: str) -> Order:
        return self.require(await self.orders.get_by_code(order_code), "Order", order_code)

    # PUBLIC_INTERFACE
    async def create_order(self, payload: OrderCreate) -> Order:
        """Create a DRAFT order with priced items and derived totals."""
        customer_name = await self._check_refs(payload.customer_id, payload.location_id, payload.items)
        rows, totals = price_items(payload.items, shipping_charges=payload.shipping_charges)

        data = dump(payload, exclude=("items",))
        if not data.get("customer_name"):
            data["customer_name"] = customer_name
        code = await self.next_code(self.orders, Order.order_code, *ORDER_CODE)
        order = Order(order_code=code, status="DRAFT", is_active=True, created_by=self.ctx.user_id, **data)
        apply_totals(order, totals)
        order.items = self._order_items(rows)
        await self.orders.create(order)
        await self.commit()
        await self.session.refresh(order)
        logger.info("Created order %s with %d items, total %s", code, len(rows), order.total_amount)
        return order

    # PUBLIC_INTERFACE
    async def update_order(self, order_code: str, payload: OrderUpdate) -> Order:
        """Update header fields and optionally replace all items (totals are recomputed)."""
        order = await self.get_order(order_code)
        if order.status in LOCKED_ORDER_STATUSES:
            raise BusinessRuleError(f"Cannot update an order in {order.status} status")

        changes = dump(payload, exclude_unset=True, exclude=("items",))
        customer_name = await self._check_refs(
            changes.get("customer_id"), changes.get("location_id"), payload.items
        )
        if customer_name and not changes.get("customer_name"):
            changes["customer_name"] = customer_name
        for required in ("order_date", "priority", "currency", "shipping_charges"):
            if changes.get(required, "") is None:
                changes.pop(required)
        apply_changes(order, changes)

        if payload.items is not None:
            rows, totals = price_items(payload.items, shipping_charges=order.shipping_charges)
            order.items = self._order_items(rows)
            apply_totals(order, totals)
        elif "shipping_charges" in changes:
            existing = [compute_line(i.quantity, i.unit_price, i.discount_percent, i.tax_rate) for i in order.items]
            apply_totals(order, compute_totals(existing, order.shipping_charges))

        await self.commit()
        await self.session.refresh(order)
        logger.info("Updated order %s", order.order_code)
        return order

    # PUBLIC_INTERFACE
    async def update_status(self, order_code: str, payload: OrderStatusUpdate) -> Order:
        """Move the order along the workflow; shipping details may be set with the move."""
        order = await self.get_order(order_code)
        target = payload.status.value
        if not check_transition(ORDER_TRANSITIONS, order.status, target):
            return order

        previous = order.status
        order.status = target
        shipping = dump(payload, exclude_unset=True, exclude=("status",))
        apply_changes(order, {k: v for k, v in shipping.items() if k in _SHIPPING_FIELDS})
        await self.commit()
        await self.session.refresh(order)
        logger.info("Order %s status %s -> %s", order.order_code, previous, target)
        return order

    async def delete_order(self, order_code: str) -> None:
        order = await self.get_order(order_code)
        order.is_active = False
        await self.commit()
        logger.info("Deactivated order %s", order.order_code)
