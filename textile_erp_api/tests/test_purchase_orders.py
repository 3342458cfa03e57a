import uuid
from datetime import date
from decimal import Decimal

import pytest

from textile_erp.core.errors import BusinessRuleError, NotFoundError
from textile_erp.db.models.procurement import PurchaseOrder, Supplier
from textile_erp.schemas.procurement import (
    PurchaseOrderCreate,
    PurchaseOrderStatusUpdate,
    PurchaseOrderUpdate,
)
from textile_erp.services.purchase_orders import PurchaseOrderService

SUPPLIER = Supplier(id=uuid.uuid4(), code="SUPP-004", name="Arvind Yarns")


def _create_payload(**kw):
    values = dict(
        supplier_id=SUPPLIER.id,
        po_date=date(2026, 3, 2),
        shipping_charges=Decimal("150"),
        items=[
            {"item_code": "YRN-40S", "quantity": "100", "unit_of_measure": "KG", "unit_cost": "12.50", "tax_rate": "5"},
            {"item_code": "DYE-RED", "quantity": "20", "unit_cost": "45", "discount_percent": "10"},
        ],
    )
    values.update(kw)
    return PurchaseOrderCreate(**values)


def _po(status="DRAFT", **kw):
    return PurchaseOrder(id=uuid.uuid4(), po_code="PO003", status=status, is_active=True, **kw)


async def test_create_prices_lines_from_unit_cost(scripted, tenant_ctx):
    session = scripted(SUPPLIER, "PO002")
    po = await PurchaseOrderService(session, tenant_ctx).create_purchase_order(_create_payload())
    assert po.po_code == "PO003"
    assert po.status == "DRAFT"
    assert po.supplier_name == "Arvind Yarns"
    assert po.supplier_code == "SUPP-004"
    assert po.created_by == tenant_ctx.user_id
    assert [i.line_number for i in po.items] == [1, 2]
    assert po.items[0].line_amount == Decimal("1312.50")
    assert po.items[1].discount_amount == Decimal("90.00")
    assert po.subtotal == Decimal("2150.00")
    assert po.total_amount == Decimal("2272.50")
    assert session.added == [po]
    assert session.commits == 1


async def test_create_with_unknown_supplier_is_a_404(scripted, tenant_ctx):
    session = scripted(None)
    with pytest.raises(NotFoundError):
        await PurchaseOrderService(session, tenant_ctx).create_purchase_order(_create_payload())
    assert session.added == []


async def test_received_order_is_locked(scripted, tenant_ctx):
    session = scripted(_po("RECEIVED"))
    with pytest.raises(BusinessRuleError, match="RECEIVED"):
        await PurchaseOrderService(session, tenant_ctx).update_purchase_order("PO003", PurchaseOrderUpdate(notes="late"))


async def test_replacing_items_recomputes_totals(scripted, tenant_ctx):
    po = _po("SENT", shipping_charges=Decimal("0"))
    session = scripted(po)
    payload = PurchaseOrderUpdate(items=[{"item_code": "YRN-60S", "quantity": "10", "unit_cost": "20"}])
    await PurchaseOrderService(session, tenant_ctx).update_purchase_order("PO003", payload)
    assert len(po.items) == 1
    assert po.total_amount == Decimal("200.00")


async def test_status_move_carries_delivery_details(scripted, tenant_ctx):
    po = _po("CONFIRMED", expected_delivery_date=date(2026, 3, 20))
    session = scripted(po)
    payload = PurchaseOrderStatusUpdate(
        status="PARTIALLY_RECEIVED", expected_delivery_date=date(2026, 3, 27), shipping_method="Road"
    )
    await PurchaseOrderService(session, tenant_ctx).update_status("PO003", payload)
    assert po.status == "PARTIALLY_RECEIVED"
    assert po.expected_delivery_date == date(2026, 3, 27)
    assert po.shipping_method == "Road"


async def test_status_cannot_skip_confirmation(scripted, tenant_ctx):
    po = _po("DRAFT")
    session = scripted(po)
    with pytest.raises(BusinessRuleError, match="Invalid status transition from DRAFT to RECEIVED"):
        await PurchaseOrderService(session, tenant_ctx).update_status(
            "PO003", PurchaseOrderStatusUpdate(status="RECEIVED")
        )
    assert session.commits == 0


async def test_only_drafts_are_deleted(scripted, tenant_ctx):
    sent = _po("SENT")
    with pytest.raises(BusinessRuleError, match="Only DRAFT purchase orders can be deleted"):
        await PurchaseOrderService(scripted(sent), tenant_ctx).delete_purchase_order("PO003")
    assert sent.is_active is True

    draft = _po("DRAFT")
    await PurchaseOrderService(scripted(draft), tenant_ctx).delete_purchase_order("PO003")
    assert draft.is_active is False
