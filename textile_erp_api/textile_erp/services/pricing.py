"""
Money math shared by orders, invoices and bills.

All amounts are Decimal and rounded half-up to 2 places at each step:

    base     = quantity * unit_price
    discount = base * discount_percent / 100
    tax      = (base - discount) * tax_rate / 100
    line     = base - discount + tax
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineAmounts:
    base: Decimal
    discount: Decimal
    tax: Decimal
    line: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    shipping_charges: Decimal
    total_amount: Decimal


# PUBLIC_INTERFACE
def compute_line(quantity, unit_price, discount_percent=ZERO, tax_rate=ZERO) -> LineAmounts:
    """Amounts for one item line."""
    qty = Decimal(str(quantity))
    price = Decimal(str(unit_price))
    base = money(qty * price)
    discount = money(base * Decimal(str(discount_percent or 0)) / HUNDRED)
    tax = money((base - discount) * Decimal(str(tax_rate or 0)) / HUNDRED)
    return LineAmounts(base=base, discount=discount, tax=tax, line=money(base - discount + tax))


# PUBLIC_INTERFACE
def compute_totals(lines: Iterable[LineAmounts], shipping_charges: Optional[Decimal] = None) -> DocumentTotals:
    """Header totals: total = subtotal - discount + tax + shipping."""
    items = list(lines)
    subtotal = money(sum((ln.base for ln in items), ZERO))
    discount = money(sum((ln.discount for ln in items), ZERO))
    tax = money(sum((ln.tax for ln in items), ZERO))
    shipping = money(shipping_charges or ZERO)
    return DocumentTotals(
        subtotal=subtotal,
        discount_amount=discount,
        tax_amount=tax,
        shipping_charges=shipping,
        total_amount=money(subtotal - discount + tax + shipping),
    )


# PUBLIC_INTERFACE
def markup_percent(cost_price, selling_price) -> Optional[Decimal]:
    """(selling - cost) / cost * 100, or None when cost is not positive."""
    cost = Decimal(str(cost_price or 0))
    if cost <= 0:
        return None
    return money((Decimal(str(selling_price or 0)) - cost) / cost * HUNDRED)
