"""
core/fields.py - Structured DataContext fields resolved once for both renderers.

Structural elements (bill rows, item tables, totals) read fixed keys out of
the data context. The fallback chains, discount branching and column
budgets live here so the markup and ESC/POS output cannot drift apart.
Nothing in this module raises on missing or malformed data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from .formatting import (
    CURRENCY_SYMBOL,
    format_currency,
    format_date,
    format_number_limited,
    format_time,
    to_display,
    to_number,
)

NOT_AVAILABLE = "N/A"

# Fixed width budgets of the item table money columns.
PRICE_BUDGET = 7
AMOUNT_BUDGET = 8

ITEM_HEADERS = ("#", "Item", "Qty", "Price", "Amount")

PERCENTAGE_TYPES = ("percentage", "percent")
TAX_KINDS = ("cgst", "sgst", "igst")


def first_of(data: Mapping[str, Any], keys: Sequence[str], default: Any = None) -> Any:
    """First truthy value among *keys*, else *default* (bill_number -> billNumber -> N/A)."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return default


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


# ---------- header rows ----------

@dataclass(frozen=True)
class BillInfo:
    number: str
    date: str
    time: str


def bill_info(data: Mapping[str, Any]) -> BillInfo:
    when = first_of(data, ("bill_date", "billDate"))
    return BillInfo(
        number=to_display(first_of(data, ("bill_number", "billNumber"), NOT_AVAILABLE)),
        date=format_date(when),
        time=format_time(when),
    )


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    mobile: str


def customer_info(data: Mapping[str, Any]) -> CustomerInfo:
    return CustomerInfo(
        name=to_display(first_of(data, ("customer_name", "customerName"), NOT_AVAILABLE)),
        mobile=to_display(first_of(data, ("customer_mobile", "customerMobile"), NOT_AVAILABLE)),
    )


@dataclass(frozen=True)
class PaymentInfo:
    transaction_type: str
    payment_type: str
    cashier: Optional[str]          # None when no cashier is recorded


def payment_info(data: Mapping[str, Any]) -> PaymentInfo:
    cashier = to_display(first_of(data, ("cashier",), NOT_AVAILABLE))
    return PaymentInfo(
        transaction_type=to_display(first_of(data, ("transaction_type", "transactionType"), "Sale")),
        payment_type=to_display(first_of(data, ("payment_type", "paymentType"), "Cash")),
        cashier=None if cashier == NOT_AVAILABLE else cashier,
    )


# ---------- items ----------

@dataclass(frozen=True)
class LineItem:
    sl_no: Any
    name: str
    qty: Any
    rate: Any
    amount: Any
    sku: Optional[str] = None

    @property
    def price_text(self) -> str:
        return format_number_limited(self.rate, PRICE_BUDGET)

    @property
    def amount_text(self) -> str:
        return format_number_limited(self.amount, AMOUNT_BUDGET)


def line_items(data: Mapping[str, Any]) -> List[LineItem]:
    raw = data.get("items")
    if not isinstance(raw, list):
        return []
    items = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            continue
        sl_no = item.get("slNo")
        sku = item.get("sku")
        items.append(LineItem(
            sl_no=index + 1 if sl_no is None else sl_no,
            name=to_display(item.get("name") or "Item"),
            qty=item.get("qty") or 0,
            rate=item.get("rate") or 0,
            amount=item.get("amount") or 0,
            sku=to_display(sku) if sku else None,
        ))
    return items


@dataclass(frozen=True)
class QuantitySummary:
    total_qty: str
    total_items: int


def quantity_summary(data: Mapping[str, Any]) -> QuantitySummary:
    items = line_items(data)
    return QuantitySummary(
        total_qty=to_display(sum(to_number(i.qty) for i in items)),
        total_items=len(items),
    )


# ---------- discount / tax / totals ----------

@dataclass(frozen=True)
class Discount:
    raw: Any
    value: float
    is_percentage: bool


def discount(data: Mapping[str, Any]) -> Optional[Discount]:
    """The discount when one applies (value > 0), else None."""
    raw = data.get("discount") or 0
    value = to_number(raw)
    if value <= 0:
        return None
    kind = str(first_of(data, ("discount_type", "discountType"), "amount")).lower()
    return Discount(raw=raw, value=value, is_percentage=kind in PERCENTAGE_TYPES)


@dataclass(frozen=True)
class TotalRow:
    label: str
    value: str
    final: bool = False


def total_rows(data: Mapping[str, Any]) -> List[TotalRow]:
    """
    Rows of the full totals block, in print order.

    Subtotal and TOTAL always appear; the discount row only when a discount
    applies and each tax row only when its amount is positive.
    """
    subtotal = data.get("subtotal") or 0
    rows = [TotalRow("Subtotal:", format_currency(subtotal))]

    disc = discount(data)
    if disc is not None:
        if disc.is_percentage:
            label = f"Discount -{to_display(disc.raw)}%:"
            amount = to_number(subtotal) * disc.value / 100
        else:
            label = f"Discount ({CURRENCY_SYMBOL}):"
            amount = disc.value
        rows.append(TotalRow(label, format_currency(amount)))

    tax = _mapping(data.get("tax"))
    for kind in TAX_KINDS:
        entry = _mapping(tax.get(kind))
        if to_number(entry.get("amount")) > 0:
            rows.append(TotalRow(
                f"{kind.upper()} @ {to_display(entry.get('rate'))}%:",
                format_currency(entry.get("amount")),
            ))

    rows.append(grand_total_row(data))
    return rows


def grand_total_row(data: Mapping[str, Any]) -> TotalRow:
    return TotalRow("TOTAL:", format_currency(data.get("total") or 0), final=True)


def qr_payload(value: Optional[str], data: Mapping[str, Any]) -> str:
    """QR content: the element's own (already substituted) value, else qr_data."""
    if value:
        return value
    return to_display(data.get("qr_data") or "")
