"""
render/markup.py - Template -> HTML preview markup.

The class names emitted here (receipt-*, text-*, font-*, item-*, total-*,
calculation-*, qr-*) are consumed by an external stylesheet and must stay
stable. All data-derived text goes through markupsafe escaping.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

from markupsafe import Markup

from ..core.calculation import calculation_lines, display_steps
from ..core.fields import (
    ITEM_HEADERS,
    TotalRow,
    bill_info,
    customer_info,
    grand_total_row,
    line_items,
    payment_info,
    qr_payload,
    quantity_summary,
    total_rows,
)
from ..core.formatting import to_display
from ..core.models import Element, ElementType, FontSize, Template
from ..core.sample_data import default_sample_data
from ..core.variables import substitute

logger = logging.getLogger(__name__)

EMPTY_TEMPLATE = Markup('<div class="receipt-empty">No template elements to preview</div>')
EMPTY_OUTPUT = Markup('<div class="receipt-empty">Empty template</div>')

FOOTER_MESSAGE = "Thank you for shopping with us! Visit again"
QR_CAPTION = "SCAN TO PAY"

ITEM_CELL_CLASSES = ("item-sno", "item-name", "item-qty", "item-price", "item-amount")

Renderer = Callable[[Element, Mapping[str, Any], int], str]


def _text_block(css: str, element: Element, value: str, size: Optional[FontSize] = None) -> Markup:
    return Markup('<div class="{} text-{} font-{} font-{}">{}</div>').format(
        css,
        element.resolved_alignment.value.lower(),
        (size or element.font_size).value.lower(),
        element.font_weight.value.lower(),
        value,
    )


def _plain_line(value: str) -> Markup:
    return Markup('<div class="receipt-text text-left font-normal font-normal">{}</div>').format(value)


# ---------- text ----------

def render_text(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    return _text_block("receipt-text", element, substitute(element.value or "", data))


def render_static_text(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    return _text_block("receipt-static-text", element, element.value or "")


def render_separator(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    # The rule itself is drawn by the stylesheet.
    return Markup('<div class="receipt-separator"></div>')


def render_newline(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    return Markup('<div class="receipt-newline"></div>')


def render_placeholder_block(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    """Reserved space for a logo above the business name."""
    return Markup(
        '<div class="receipt-placeholder-block">'
        '<div class="placeholder-box" style="height: {}px;">'
        '<div class="placeholder-text">Logo/Image</div>'
        '</div>'
        '</div>'
    ).format(element.height)


# ---------- header rows ----------

def render_bill_date_row(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    info = bill_info(data)
    return Markup(
        '<div class="receipt-bill-date-row">'
        '<span>Bill No: {}</span>'
        '<div class="receipt-date-time-row">'
        '<span class="bill-date">Date: {}</span>'
        '<span class="bill-time">Time: {}</span>'
        '</div>'
        '</div>'
    ).format(info.number, info.date, info.time)


def render_customer_info_row(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    info = customer_info(data)
    return Markup('<div class="customer-info">{}{}</div>').format(
        _plain_line(f"Customer: {info.name}"),
        _plain_line(f"Mobile No: {info.mobile}"),
    )


def render_transaction_payment_row(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    info = payment_info(data)
    cashier = Markup("")
    if info.cashier is not None:
        cashier = Markup("<span>Cashier: {}</span>").format(info.cashier)
    return Markup(
        '<div class="receipt-transaction-payment-row">'
        '<div class="receipt-transaction-info">'
        '<div class="receipt-type-payment-row">'
        '<span class="transaction-type">Type: {}</span>'
        '<span class="payment-type">Payment: {}</span>'
        '</div>'
        '{}'
        '</div>'
        '</div>'
    ).format(info.transaction_type, info.payment_type, cashier)


# ---------- calculations ----------

def _calculation_container(css: str, element: Element, inner: str, body: Markup) -> Markup:
    return Markup('<div class="{} text-{} font-{}"><div class="{}">{}</div></div>').format(
        css,
        element.resolved_alignment.value.lower(),
        element.font_size.value.lower(),
        inner,
        body,
    )


def render_transaction_calculation(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    """Multiplication on one line per item, discount as a subtraction line."""
    body = Markup("")
    for line in calculation_lines(data):
        css = "calculation-subtract" if line.startswith("- ") else "calculation-multiply"
        body += Markup('<div class="{}">{}</div>').format(css, line)
    return _calculation_container("receipt-transaction-calculation", element, "calculation-items", body)


def render_transaction_calculation_v2(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    """One row per step: operator on the left, operand on the right."""
    body = Markup("")
    for step in display_steps(data):
        body += Markup(
            '<div class="calculation-step">'
            '<span class="calculation-operator">{}</span>'
            '<span class="calculation-operand">{}</span>'
            '</div>'
        ).format(step.operator, step.operand)
    return _calculation_container("receipt-transaction-calculation-v2", element, "calculation-steps", body)


# ---------- items ----------

def _cells(values) -> Markup:
    out = Markup("")
    for css, value in zip(ITEM_CELL_CLASSES, values):
        out += Markup('<span class="{}">{}</span>').format(css, value)
    return out


def render_item_header_row(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    return Markup(
        '<div class="receipt-item-header-row"><div class="item-table">'
        '<div class="item-header-row">{}</div>'
        '</div></div>'
    ).format(_cells(ITEM_HEADERS))


def render_bill_items(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    rows = Markup("")
    for item in line_items(data):
        rows += Markup('<div class="bill-item-row">{}</div>').format(_cells((
            to_display(item.sl_no),
            item.name,
            to_display(item.qty),
            item.price_text,
            item.amount_text,
        )))
    return Markup('<div class="receipt-bill-items"><div class="item-table">{}</div></div>').format(rows)


def render_total_qty_items_row(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    summary = quantity_summary(data)
    return Markup(
        '<div class="receipt-total-qty-items-row">'
        '<div class="total-row"><span>Total Qty: {}</span><span>Total Items: {}</span></div>'
        '</div>'
    ).format(summary.total_qty, summary.total_items)


# ---------- totals ----------

def _total_row(row: TotalRow) -> Markup:
    css = "total-row total-final" if row.final else "total-row"
    return Markup('<div class="{}"><span>{}</span><span>{}</span></div>').format(css, row.label, row.value)


def render_total_amount_row(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    body = Markup("").join(_total_row(row) for row in total_rows(data))
    return Markup('<div class="receipt-total-amount-row">{}</div>').format(body)


def render_total_amount_row_simple(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    return Markup('<div class="receipt-total-amount-row">{}</div>').format(_total_row(grand_total_row(data)))


# ---------- footer / QR / paper ----------

def render_footer_message(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    message = substitute(element.value, data) if element.value else FOOTER_MESSAGE
    return Markup('<div class="receipt-footer-message">{}</div>').format(
        _text_block("receipt-static-text", element, message, size=FontSize.SMALL)
    )


def render_qr_code(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    payload = qr_payload(substitute(element.value, data) if element.value else None, data)
    return Markup(
        '<div class="receipt-qr-code">'
        '<div class="qr-placeholder qr-{}" data-qr="{}">'
        '<div class="qr-text">QR Code</div>'
        '</div>'
        '<div class="receipt-static-text text-center font-normal font-normal">{}</div>'
        '</div>'
    ).format(element.size.lower(), payload, QR_CAPTION)


def render_cut_paper(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    return ""


RENDERERS: Dict[ElementType, Renderer] = {
    ElementType.TEXT: render_text,
    ElementType.STATIC_TEXT: render_static_text,
    ElementType.SEPARATOR: render_separator,
    ElementType.NEWLINE: render_newline,
    ElementType.PLACEHOLDER_BLOCK: render_placeholder_block,
    ElementType.BILL_DATE_ROW: render_bill_date_row,
    ElementType.CUSTOMER_INFO_ROW: render_customer_info_row,
    ElementType.TRANSACTION_PAYMENT_ROW: render_transaction_payment_row,
    ElementType.TRANSACTION_CALCULATION: render_transaction_calculation,
    ElementType.TRANSACTION_CALCULATION_V2: render_transaction_calculation_v2,
    ElementType.ITEM_HEADER_ROW: render_item_header_row,
    ElementType.BILL_ITEMS: render_bill_items,
    ElementType.TOTAL_QTY_ITEMS_ROW: render_total_qty_items_row,
    ElementType.TOTAL_AMOUNT_ROW: render_total_amount_row,
    ElementType.TOTAL_AMOUNT_ROW_SIMPLE: render_total_amount_row_simple,
    ElementType.FOOTER_MESSAGE: render_footer_message,
    ElementType.QR_CODE: render_qr_code,
    ElementType.CUT_PAPER: render_cut_paper,
}


def render_element(element: Element, data: Mapping[str, Any], character_width: int) -> str:
    """Markup for one element; an unknown type renders as an empty string."""
    kind = element.kind
    renderer = RENDERERS.get(kind) if kind is not None else None
    if renderer is None:
        logger.warning("Unknown element type: %r", element.type)
        return ""
    try:
        return str(renderer(element, data, character_width))
    except Exception:
        logger.exception("Failed to render %s element", element.type)
        return ""


def render_preview(
    template: Union[Template, Mapping[str, Any], None],
    data: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Render the whole template as one HTML string.

    With no data the built-in sample receipt is used, so a template can be
    previewed before any real data exists.
    """
    if not isinstance(data, Mapping):
        data = default_sample_data()
    if not isinstance(template, Template):
        template = Template.from_dict(template)
    if not template.elements:
        return str(EMPTY_TEMPLATE)

    html = "".join(render_element(e, data, template.character_width) for e in template.elements)
    return html or str(EMPTY_OUTPUT)
