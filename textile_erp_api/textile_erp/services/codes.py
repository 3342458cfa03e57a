"""Human-readable business codes (SO001, MCH0001, CUST-001, ...) and slugs."""

from __future__ import annotations

import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# prefix, zero-pad width
ORDER_CODE = ("SO", 3)
MACHINE_CODE = ("MCH", 4)
TICKET_CODE = ("TKT", 4)
SCHEDULE_CODE = ("SCH", 4)
RECORD_CODE = ("REC", 4)
INSPECTION_CODE = ("INS", 3)
CHECKPOINT_CODE = ("QC", 3)
DEFECT_CODE = ("DEF", 3)
METRIC_CODE = ("QM", 3)
COMPLIANCE_CODE = ("CR", 3)
INVOICE_CODE = ("INV", 3)
BILL_CODE = ("BILL", 3)
PAYMENT_CODE = ("PAY", 4)
PURCHASE_ORDER_CODE = ("PO", 3)
CUSTOMER_CODE = ("CUST-", 3)
SUPPLIER_CODE = ("SUPP-", 3)
LOCATION_CODE = ("L", 3)
COMPANY_CODE = ("C", 3)
PRODUCT_CODE = ("PRD", 3)
ADJUSTMENT_CODE = ("ADJ", 3)
MOVEMENT_CODE = ("MOV", 3)
RESERVATION_CODE = ("RES", 3)
ALERT_CODE = ("ALT", 3)


# PUBLIC_INTERFACE
def format_code(prefix: str, number: int, width: int) -> str:
    """format_code('SO', 7, 3) -> 'SO007'. Numbers wider than `width` are kept whole."""
    return f"{prefix}{number:0{width}d}"


# PUBLIC_INTERFACE
def parse_code_number(code: Optional[str], prefix: str) -> int:
    """Numeric part after the prefix; 0 when absent or not numeric."""
    if not code or not code.startswith(prefix):
        return 0
    tail = code[len(prefix):]
    return int(tail) if tail.isdigit() else 0


# PUBLIC_INTERFACE
def next_code_from(last_code: Optional[str], prefix: str, width: int) -> str:
    return format_code(prefix, parse_code_number(last_code, prefix) + 1, width)


# PUBLIC_INTERFACE
def slugify(name: str) -> str:
    """'Acme Textiles Pvt. Ltd.' -> 'acme-textiles-pvt-ltd'."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


# PUBLIC_INTERFACE
def sku_prefix(name: str) -> str:
    """Uppercase initials of the first three words of a product name."""
    words = [w for w in name.split() if w]
    return "".join(w[0] for w in words[:3]).upper() or "SKU"
