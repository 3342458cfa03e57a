import re
import uuid
from unittest.mock import MagicMock

from sqlalchemy.dialects import postgresql

from textile_erp.repositories.base import numbered_code
from textile_erp.repositories.catalog import ProductRepository
from textile_erp.repositories.finance import InvoiceRepository
from textile_erp.repositories.inventory import LocationInventoryRepository, StockMovementRepository

COMPANY = uuid.UUID("5d7e0c11-2b3a-4f5e-8d9c-0a1b2c3d4e5f")


def _compile(stmt):
    return stmt.compile(dialect=postgresql.dialect())


def test_scoped_select_filters_by_company():
    compiled = _compile(ProductRepository(MagicMock(), COMPANY).scoped())
    assert "products.company_id = " in str(compiled)
    assert COMPANY in compiled.params.values()


def test_scoped_select_keeps_filter_with_extra_criteria():
    repo = StockMovementRepository(MagicMock(), COMPANY)
    compiled = _compile(repo.scoped().where(repo.model.movement_type == "SALE"))
    assert "stock_movements.company_id = " in str(compiled)
    assert "stock_movements.movement_type = " in str(compiled)
    assert COMPANY in compiled.params.values()


def test_stamp_sets_company():
    repo = ProductRepository(MagicMock(), COMPANY)
    product = repo.model(name="Poplin")
    assert repo.stamp(product).company_id == COMPANY


class RecordingSession:
    """Stands in for AsyncSession; keeps every statement it is asked to run."""

    def __init__(self):
        self.statements = []
        self.added = []

    async def execute(self, statement, params=None):
        self.statements.append(statement)
        result = MagicMock()
        result.rowcount = 1
        result.scalar_one_or_none.return_value = None
        return result

    def add(self, entity):
        self.added.append(entity)

    async def flush(self):
        pass


def _where_sql(session):
    return [str(_compile(stmt)) for stmt in session.statements]


async def test_get_from_another_company_is_filtered():
    session = RecordingSession()
    found = await ProductRepository(session, COMPANY).get(uuid.uuid4())
    assert found is None
    (sql,) = _where_sql(session)
    assert "products.company_id = " in sql


async def test_update_and_delete_are_scoped():
    session = RecordingSession()
    repo = ProductRepository(session, COMPANY)
    assert await repo.update_by_id(uuid.uuid4(), {"name": "Renamed"}) == 1
    assert await repo.delete_by_id(uuid.uuid4()) == 1
    update_sql, delete_sql = _where_sql(session)
    assert update_sql.startswith("UPDATE products") and "products.company_id = " in update_sql
    assert delete_sql.startswith("DELETE FROM products") and "products.company_id = " in delete_sql


async def test_update_without_values_runs_nothing():
    session = RecordingSession()
    assert await ProductRepository(session, COMPANY).update_by_id(uuid.uuid4(), {}) == 0
    assert session.statements == []


async def test_code_lookup_stays_in_company():
    session = RecordingSession()
    repo = StockMovementRepository(session, COMPANY)
    await repo.last_code(repo.model.movement_code, "MOV")
    (sql,) = _where_sql(session)
    assert "stock_movements.company_id = " in sql
    assert "stock_movements.movement_code ~ " in sql


async def test_create_stamps_company_before_insert():
    session = RecordingSession()
    repo = ProductRepository(session, COMPANY)
    product = await repo.create(repo.model(name="Poplin"))
    assert session.added == [product]
    assert product.company_id == COMPANY


def test_numbered_code_ignores_hand_entered_codes():
    (pattern,) = _compile(numbered_code(ProductRepository.model.sku, "CS-")).params.values()
    assert re.fullmatch(pattern, "CS-0007")
    assert re.fullmatch(pattern, "CS-12345")
    assert not re.fullmatch(pattern, "CS-RED-XL")
    assert not re.fullmatch(pattern, "CS-")


async def test_last_sku_only_considers_generated_codes():
    session = RecordingSession()
    repo = ProductRepository(session, COMPANY)
    await repo.last_code(repo.model.sku, "CS-")
    (stmt,) = session.statements
    compiled = _compile(stmt)
    assert "products.sku ~ " in str(compiled)
    assert "^CS\\-[0-9]+$" in compiled.params.values()


async def test_get_active_skips_soft_deleted_rows():
    session = RecordingSession()
    assert await InvoiceRepository(session, COMPANY).get_active(uuid.uuid4()) is None
    (sql,) = _where_sql(session)
    assert "invoices.company_id = " in sql
    assert "invoices.is_active IS true" in sql


async def test_low_stock_uses_row_level_then_product_level(scripted):
    session = scripted([])
    assert await LocationInventoryRepository(session, COMPANY).list_inventory(low_stock=True) == []
    (sql,) = _where_sql(session)
    assert "coalesce(location_inventory.reorder_level, products.reorder_level)" in sql
    assert "products.company_id = " in sql
    assert "location_inventory.company_id = " in sql
