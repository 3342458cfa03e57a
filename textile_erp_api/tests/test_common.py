from textile_erp.core.errors import NotFoundError
from textile_erp.schemas.common import enum_options, ok
from textile_erp.schemas.enums import ReservationType


def test_enum_options_title_case_labels():
    options = enum_options(ReservationType)
    assert options[0].value == "ORDER"
    assert options[0].label == "Order"


def test_ok_envelope():
    body = ok({"id": 1}, "Created").model_dump()
    assert body == {"success": True, "data": {"id": 1}, "message": "Created"}


def test_not_found_message_names_the_entity():
    err = NotFoundError("Product", "PRD001")
    assert err.status_code == 404
    assert err.code == "not_found"
    assert err.message == "Product 'PRD001' not found"
