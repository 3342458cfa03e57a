"""Service rules exercised against a scripted session (no database)."""
import re
import uuid
from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql

from textile_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from textile_erp.db.models.catalog import Product, ProductCategory
from textile_erp.db.models.inventory import LocationInventory, StockMovement
from textile_erp.db.models.location import Location
from textile_erp.db.models.sales import Order
from textile_erp.repositories.reports import ReportRepository
from textile_erp.schemas.inventory import ReservationCreate, StockMovementCreate
from textile_erp.schemas.orders import OrderStatusUpdate
from textile_erp.schemas.products import CategoryCreate, StockAdjustmentCreate
from textile_erp.services.finance import BillService, InvoiceService
from textile_erp.services.inventory import InventoryService
from textile_erp.services.orders import OrderService
from textile_erp.services.products import ProductService

MILL = uuid.uuid4()
STORE = uuid.uuid4()


def _sql(stmt):
    return str(stmt.compile(dialect=postgresql.dialect()))


def _product(**kw):
    values = dict(id=uuid.uuid4(), product_code="PRD001", name="Cotton Shirting", stock_quantity=Decimal("10"))
    values.update(kw)
    return Product(**values)


def _row(product, location_id=MILL, **kw):
    values = dict(
        id=uuid.uuid4(),
        product_id=product.id,
        location_id=location_id,
        stock_quantity=Decimal("10"),
        reserved_quantity=Decimal("0"),
    )
    values.update(kw)
    return LocationInventory(**values)


class TestStockNeverNegative:
    async def test_sale_beyond_available_is_refused(self, scripted, tenant_ctx):
        product = _product()
        row = _row(product, stock_quantity=Decimal("5"), reserved_quantity=Decimal("2"))
        session = scripted(product, Location(id=MILL, name="Mill"), row)
        payload = StockMovementCreate(
            product_id=product.id, movement_type="SALE", quantity=Decimal("4"), from_location_id=MILL
        )
        with pytest.raises(BusinessRuleError, match="Insufficient available stock"):
            await InventoryService(session, tenant_ctx).record_movement(payload)
        assert row.stock_quantity == Decimal("5")
        assert session.commits == 0

    async def test_sale_from_a_location_without_stock_is_refused(self, scripted, tenant_ctx):
        product = _product()
        session = scripted(product, Location(id=MILL, name="Mill"), None)
        payload = StockMovementCreate(
            product_id=product.id, movement_type="DAMAGE", quantity=Decimal("1"), from_location_id=MILL
        )
        with pytest.raises(BusinessRuleError):
            await InventoryService(session, tenant_ctx).record_movement(payload)
        assert session.added == []

    async def test_sale_within_available_lowers_row_and_total(self, scripted, tenant_ctx):
        product = _product(stock_quantity=Decimal("10"))
        row = _row(product, stock_quantity=Decimal("6"))
        session = scripted(product, Location(id=MILL, name="Mill"), row, None)
        payload = StockMovementCreate(
            product_id=product.id, movement_type="SALE", quantity=Decimal("4"), from_location_id=MILL
        )
        movement = await InventoryService(session, tenant_ctx).record_movement(payload)
        assert isinstance(movement, StockMovement)
        assert movement.movement_code == "MOV001"
        assert row.stock_quantity == Decimal("2")
        assert product.stock_quantity == Decimal("6")
        assert session.commits == 1

    async def test_reservation_beyond_available_is_refused(self, scripted, tenant_ctx):
        product = _product()
        row = _row(product, stock_quantity=Decimal("10"), reserved_quantity=Decimal("8"))
        session = scripted(product, Location(id=MILL, name="Mill"), row)
        payload = ReservationCreate(product_id=product.id, location_id=MILL, quantity=Decimal("5"))
        with pytest.raises(BusinessRuleError, match="Insufficient available stock to reserve"):
            await InventoryService(session, tenant_ctx).reserve(payload)
        assert row.reserved_quantity == Decimal("8")
        assert session.commits == 0


class TestDeleteStockRow:
    async def test_product_total_drops_by_the_row_stock(self, scripted, tenant_ctx):
        product = _product(stock_quantity=Decimal("20"))
        row = _row(product, stock_quantity=Decimal("7"))
        session = scripted(row, 0, product, None)
        await InventoryService(session, tenant_ctx).delete_stock_row(row.id)
        assert product.stock_quantity == Decimal("13")
        assert _sql(session.statements[-1]).startswith("DELETE FROM location_inventory")
        assert session.commits == 1

    async def test_product_total_never_goes_below_zero(self, scripted, tenant_ctx):
        product = _product(stock_quantity=Decimal("5"))
        row = _row(product, stock_quantity=Decimal("7"))
        session = scripted(row, 0, product, None)
        await InventoryService(session, tenant_ctx).delete_stock_row(row.id)
        assert product.stock_quantity == Decimal("0")

    async def test_row_with_active_reservations_is_kept(self, scripted, tenant_ctx):
        product = _product(stock_quantity=Decimal("20"))
        row = _row(product, stock_quantity=Decimal("7"))
        session = scripted(row, 2)
        with pytest.raises(BusinessRuleError, match="active reservations"):
            await InventoryService(session, tenant_ctx).delete_stock_row(row.id)
        assert product.stock_quantity == Decimal("20")


class TestSoftDeletedRecords:
    async def test_deleted_invoice_is_not_found(self, scripted, tenant_ctx):
        session = scripted(None)
        with pytest.raises(NotFoundError) as exc:
            await InvoiceService(session, tenant_ctx).get_document(uuid.uuid4())
        assert exc.value.status_code == 404
        assert "invoices.is_active IS true" in _sql(session.statements[0])

    async def test_deleted_product_takes_no_adjustments(self, scripted, tenant_ctx):
        session = scripted(None)
        payload = StockAdjustmentCreate(adjustment_type="ADD", quantity=Decimal("5"))
        with pytest.raises(NotFoundError):
            await ProductService(session, tenant_ctx).adjust_stock(uuid.uuid4(), payload)
        assert session.added == []
        assert "products.is_active IS true" in _sql(session.statements[0])


class TestOtherCompanyIds:
    async def test_bill_of_another_company_is_a_404(self, scripted, tenant_ctx):
        session = scripted(None)
        with pytest.raises(NotFoundError) as exc:
            await BillService(session, tenant_ctx).update_status(uuid.uuid4(), "RECEIVED")
        assert exc.value.status_code == 404
        compiled = session.statements[0].compile(dialect=postgresql.dialect())
        assert "bills.company_id = " in str(compiled)
        assert tenant_ctx.company_id in compiled.params.values()
        assert session.commits == 0


class TestOrderStatus:
    async def test_undeclared_move_is_refused(self, scripted, tenant_ctx):
        order = Order(id=uuid.uuid4(), order_code="SO001", status="DRAFT")
        session = scripted(order)
        with pytest.raises(BusinessRuleError, match="Invalid status transition from DRAFT to SHIPPED"):
            await OrderService(session, tenant_ctx).update_status("SO001", OrderStatusUpdate(status="SHIPPED"))
        assert order.status == "DRAFT"
        assert session.commits == 0

    async def test_shipping_details_ride_along(self, scripted, tenant_ctx):
        order = Order(id=uuid.uuid4(), order_code="SO002", status="READY_TO_SHIP")
        session = scripted(order)
        payload = OrderStatusUpdate(status="SHIPPED", shipping_carrier="BlueDart", tracking_number="AWB123")
        shipped = await OrderService(session, tenant_ctx).update_status("SO002", payload)
        assert shipped.status == "SHIPPED"
        assert shipped.shipping_carrier == "BlueDart"
        assert shipped.tracking_number == "AWB123"
        assert shipped.delivery_date is None
        assert session.commits == 1


async def test_generated_sku_skips_custom_codes(scripted, tenant_ctx):
    session = scripted("CS-0007")
    sku = await ProductService(session, tenant_ctx)._generate_sku("Cotton Shirting")
    assert sku == "CS-0008"
    assert "products.sku ~ " in _sql(session.statements[0])



async def test_duplicate_category_name_is_a_conflict(scripted, tenant_ctx):
    session = scripted(ProductCategory(id=uuid.uuid4(), name="Yarn"))
    with pytest.raises(ConflictError):
        await ProductService(session, tenant_ctx).create_category(CategoryCreate(name="Yarn"))
    sql = _sql(session.statements[0])
    assert "product_categories.name = " in sql
    assert "product_categories.company_id = " in sql
    assert session.commits == 0

_TABLES = re.compile(r"(?:FROM|JOIN) (\w+)")


@pytest.mark.parametrize(
    "method,args",
    [
        ("invoices", (None, None)),
        ("revenue_lines", (None, None)),
        ("bill_line_total", (None, None)),
        ("open_invoices", ()),
        ("open_bills", ()),
        ("product_stock", ()),
        ("location_stock", (STORE,)),
        ("movements", (None, None)),
        ("machine_utilization", ()),
        ("checkpoint_statuses", (None, None)),
        ("defects", (None, None)),
    ],
)
async def test_report_queries_filter_every_table_by_company(scripted, tenant_ctx, method, args):
    session = scripted([])
    await getattr(ReportRepository(session, tenant_ctx.company_id), method)(*args)
    (stmt,) = session.statements
    sql = _sql(stmt)
    tables = set(_TABLES.findall(sql))
    assert tables
    for table in tables:
        assert f"{table}.company_id = " in sql, f"{method}: {table} is not filtered by company"
