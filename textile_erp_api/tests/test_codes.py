from textile_erp.services.codes import (
    ORDER_CODE,
    format_code,
    next_code_from,
    parse_code_number,
    sku_prefix,
    slugify,
)


def test_first_code_when_nothing_issued():
    assert next_code_from(None, *ORDER_CODE) == "SO001"


def test_next_code_increments_last_number():
    assert next_code_from("SO041", "SO", 3) == "SO042"
    assert next_code_from("MCH0009", "MCH", 4) == "MCH0010"


def test_code_grows_past_its_width():
    assert format_code("SO", 1000, 3) == "SO1000"
    assert next_code_from("SO999", "SO", 3) == "SO1000"


def test_foreign_or_malformed_codes_count_as_zero():
    assert parse_code_number("INV007", "SO") == 0
    assert parse_code_number("SO-A1", "SO") == 0
    assert next_code_from("CUST-abc", "CUST-", 3) == "CUST-001"


def test_slugify():
    assert slugify("Acme Textiles Pvt. Ltd.") == "acme-textiles-pvt-ltd"
    assert slugify("  Sri  Balaji -- Mills ") == "sri-balaji-mills"


def test_sku_prefix_uses_first_three_initials():
    assert sku_prefix("Cotton Poplin White Premium") == "CPW"
    assert sku_prefix("yarn") == "Y"
    assert sku_prefix("   ") == "SKU"
