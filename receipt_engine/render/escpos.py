"""
render/escpos.py - Template -> ESC/POS command stream.

Each element is written through its own ``ElementWriter``, which tracks
alignment and font while the element runs and resets both before the next
element starts. Printer state therefore never leaks between elements and
a generator can be shared between threads.

Usage:
    commands = EscPosGenerator().generate(template, data)
    backend.send(commands)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..core.calculation import calculation_lines, display_steps
from ..core.fields import (
    bill_info,
    customer_info,
    grand_total_row,
    line_items,
    payment_info,
    qr_payload,
    quantity_summary,
    total_rows,
)
from ..core.models import Alignment, Element, ElementType, FontSize, FontWeight, Template
from ..core.variables import substitute
from .layout import justify, preset_for, wrap_text

logger = logging.getLogger(__name__)

ESC = 0x1B
GS = 0x1D

FEED_BEFORE_CUT = 3
PLACEHOLDER_LINE_PX = 30
QR_CAPTION = "SCAN TO PAY"
FOOTER_MESSAGE = "Thank you for shopping with us! Visit again"


class Align(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class FontStyle(IntEnum):
    FONT_A = 0x00
    FONT_A_BOLD = 0x08             # emphasized
    FONT_B_BOLD_DOUBLE = 0x19      # font B + emphasized + double height


ALIGNMENTS = {
    Alignment.LEFT: Align.LEFT,
    Alignment.CENTER: Align.CENTER,
    Alignment.RIGHT: Align.RIGHT,
}

QR_SIZES = {"SMALL": 3, "MEDIUM": 6, "LARGE": 8}
QR_ERROR_CORRECTION = {"L": 0x30, "M": 0x31, "Q": 0x32, "H": 0x33}


def font_style(size: FontSize, weight: FontWeight) -> FontStyle:
    """SMALL has no printer font of its own and prints as normal text."""
    if weight is FontWeight.BOLD:
        if size is FontSize.LARGE:
            return FontStyle.FONT_B_BOLD_DOUBLE
        return FontStyle.FONT_A_BOLD
    return FontStyle.FONT_A


def encode_text(text: str) -> bytes:
    """
    UTF-8 limited to 1-3 byte sequences.

    Characters outside the Basic Multilingual Plane (and lone surrogates)
    are printed as "?"; receipt printers have no glyphs for them.
    """
    out = bytearray()
    for ch in text:
        if ord(ch) > 0xFFFF:
            out += b"?"
        else:
            out += ch.encode("utf-8", errors="replace")
    return bytes(out)


# ---------- commands ----------

@dataclass(frozen=True)
class Command:
    name: str
    data: bytes


def initialize() -> Command:
    return Command("init", bytes([ESC, 0x40]))                 # ESC @


def set_alignment(align: Align) -> Command:
    return Command("align", bytes([ESC, 0x61, int(align)]))    # ESC a n


def set_font(style: FontStyle) -> Command:
    return Command("font", bytes([ESC, 0x21, int(style)]))     # ESC ! n


def feed(lines: int = 1) -> Command:
    return Command("feed", bytes([ESC, 0x64, max(0, min(255, lines))]))  # ESC d n


def cut(partial: bool = False) -> Command:
    return Command("cut", bytes([GS, 0x56, 0x01 if partial else 0x00]))  # GS V m


def text(value: str) -> Command:
    return Command("text", encode_text(value))


def qr_commands(payload: str, size: str = "MEDIUM", error_correction: str = "M") -> List[Command]:
    """GS ( k sequence: model 2, module size, error correction, store, print."""
    data = encode_text(payload)
    store_len = len(data) + 3
    return [
        Command("qr_model", bytes([GS, 0x28, 0x6B, 0x04, 0x00, 0x31, 0x41, 0x32, 0x00])),
        Command("qr_size", bytes([GS, 0x28, 0x6B, 0x03, 0x00, 0x31, 0x43, QR_SIZES.get(size, 6)])),
        Command("qr_error_correction", bytes([
            GS, 0x28, 0x6B, 0x03, 0x00, 0x31, 0x45, QR_ERROR_CORRECTION.get(error_correction, 0x31),
        ])),
        Command("qr_store", bytes([
            GS, 0x28, 0x6B, store_len & 0xFF, (store_len >> 8) & 0xFF, 0x31, 0x50, 0x30,
        ]) + data),
        Command("qr_print", bytes([GS, 0x28, 0x6B, 0x03, 0x00, 0x31, 0x51, 0x30])),
    ]


def encode(commands: Iterable[Command]) -> bytes:
    return b"".join(c.data for c in commands)


# ---------- per-element state ----------

@dataclass
class PrinterState:
    alignment: Align = Align.LEFT
    font: FontStyle = FontStyle.FONT_A


@dataclass
class ElementWriter:
    """Command buffer for one element; owns the printer state while it is written."""
    width: int
    state: PrinterState = field(default_factory=PrinterState)
    commands: List[Command] = field(default_factory=list)

    def align(self, align: Align) -> None:
        if align is not self.state.alignment:
            self.commands.append(set_alignment(align))
            self.state.alignment = align

    def font(self, style: FontStyle) -> None:
        if style is not self.state.font:
            self.commands.append(set_font(style))
            self.state.font = style

    def line(self, value: str) -> None:
        self.commands.append(text(value))
        self.commands.append(feed(1))

    def lines(self, values: Iterable[str]) -> None:
        for value in values:
            self.line(value)

    def emit(self, *commands: Command) -> None:
        self.commands.extend(commands)

    def close(self) -> List[Command]:
        """Reset font, then alignment, and hand back the element's commands."""
        self.font(FontStyle.FONT_A)
        self.align(Align.LEFT)
        return self.commands


Handler = Callable[[Element, Mapping[str, Any], ElementWriter], None]


class EscPosGenerator:
    """
    Convert receipt templates to ESC/POS commands.

    generate(template, data) -> bytes
        ESC @, every element in order, 3 line feeds, full cut.
    """

    def __init__(self):
        self._handlers: Dict[ElementType, Handler] = {
            ElementType.TEXT: self._text,
            ElementType.STATIC_TEXT: self._static_text,
            ElementType.SEPARATOR: self._separator,
            ElementType.NEWLINE: self._newline,
            ElementType.PLACEHOLDER_BLOCK: self._placeholder_block,
            ElementType.BILL_DATE_ROW: self._bill_date_row,
            ElementType.CUSTOMER_INFO_ROW: self._customer_info_row,
            ElementType.TRANSACTION_PAYMENT_ROW: self._transaction_payment_row,
            ElementType.TRANSACTION_CALCULATION: self._transaction_calculation,
            ElementType.TRANSACTION_CALCULATION_V2: self._transaction_calculation_v2,
            ElementType.ITEM_HEADER_ROW: self._item_header_row,
            ElementType.BILL_ITEMS: self._bill_items,
            ElementType.TOTAL_QTY_ITEMS_ROW: self._total_qty_items_row,
            ElementType.TOTAL_AMOUNT_ROW: self._total_amount_row,
            ElementType.TOTAL_AMOUNT_ROW_SIMPLE: self._total_amount_row_simple,
            ElementType.FOOTER_MESSAGE: self._footer_message,
            ElementType.QR_CODE: self._qr_code,
            ElementType.CUT_PAPER: self._cut_paper,
        }

    # ---------------- public API ----------------

    def commands(
        self,
        template: Union[Template, Mapping[str, Any], None],
        data: Optional[Mapping[str, Any]] = None,
    ) -> List[Command]:
        if not isinstance(template, Template):
            template = Template.from_dict(template)
        if not isinstance(data, Mapping):
            data = {}

        out = [initialize()]
        for element in template.elements:
            out.extend(self.process_element(element, data, template.character_width))
        out.append(feed(FEED_BEFORE_CUT))
        out.append(cut())
        return out

    def generate(
        self,
        template: Union[Template, Mapping[str, Any], None],
        data: Optional[Mapping[str, Any]] = None,
    ) -> bytes:
        return encode(self.commands(template, data))

    def process_element(
        self, element: Element, data: Mapping[str, Any], character_width: int
    ) -> List[Command]:
        """
        Commands for a single element, starting and ending in the default
        printer state. Unknown types produce nothing.
        """
        kind = element.kind
        handler = self._handlers.get(kind) if kind is not None else None
        if handler is None:
            logger.warning("Unknown element type: %r", element.type)
            return []

        writer = ElementWriter(width=character_width)
        try:
            handler(element, data, writer)
        except Exception:
            logger.exception("Failed to render %s element", element.type)
            return []
        return writer.close()

    # ---------------- text ----------------

    def _styled_text(self, element: Element, value: str, w: ElementWriter) -> None:
        w.align(ALIGNMENTS[element.resolved_alignment])
        w.font(font_style(element.font_size, element.font_weight))
        w.lines(wrap_text(value, w.width))

    def _text(self, element, data, w):
        self._styled_text(element, substitute(element.value or "", data), w)

    def _static_text(self, element, data, w):
        self._styled_text(element, element.value or "", w)

    def _footer_message(self, element, data, w):
        message = substitute(element.value, data) if element.value else FOOTER_MESSAGE
        self._styled_text(element, message, w)

    def _separator(self, element, data, w):
        char = "-" if element.style == "DASHED" else "="
        w.align(ALIGNMENTS[element.resolved_alignment])
        w.line(char * (element.length or w.width))

    def _newline(self, element, data, w):
        w.emit(feed(1))

    def _placeholder_block(self, element, data, w):
        w.emit(feed(max(1, element.height // PLACEHOLDER_LINE_PX)))

    # ---------------- header rows ----------------

    def _bill_date_row(self, element, data, w):
        info = bill_info(data)
        w.line(f"Bill No: {info.number}")
        w.lines(justify(f"Date: {info.date}", f"Time: {info.time}", w.width))

    def _customer_info_row(self, element, data, w):
        info = customer_info(data)
        w.lines(wrap_text(f"Customer: {info.name}", w.width))
        w.lines(wrap_text(f"Mobile No: {info.mobile}", w.width))

    def _transaction_payment_row(self, element, data, w):
        info = payment_info(data)
        w.lines(justify(f"Type: {info.transaction_type}", f"Payment: {info.payment_type}", w.width))
        if info.cashier is not None:
            w.line(f"Cashier: {info.cashier}")

    # ---------------- calculations ----------------

    def _transaction_calculation(self, element, data, w):
        w.align(ALIGNMENTS[element.resolved_alignment])
        for line in calculation_lines(data):
            w.lines(wrap_text(line, w.width))

    def _transaction_calculation_v2(self, element, data, w):
        w.align(ALIGNMENTS[element.resolved_alignment])
        for step in display_steps(data):
            w.lines(justify(step.operator, step.operand, w.width))

    # ---------------- items ----------------

    def _item_header_row(self, element, data, w):
        w.font(FontStyle.FONT_A_BOLD)
        w.line(preset_for(w.width).header_line())

    def _bill_items(self, element, data, w):
        preset = preset_for(w.width)
        for item in line_items(data):
            w.line(preset.item_line(item))

    def _total_qty_items_row(self, element, data, w):
        summary = quantity_summary(data)
        w.lines(justify(f"Total Qty: {summary.total_qty}", f"Total Items: {summary.total_items}", w.width))

    # ---------------- totals ----------------

    def _total_amount_row(self, element, data, w):
        for row in total_rows(data):
            if row.final:
                w.font(FontStyle.FONT_B_BOLD_DOUBLE)
            w.lines(justify(row.label, row.value, w.width))

    def _total_amount_row_simple(self, element, data, w):
        row = grand_total_row(data)
        w.font(FontStyle.FONT_B_BOLD_DOUBLE)
        w.lines(justify(row.label, row.value, w.width))

    # ---------------- QR / paper ----------------

    def _qr_code(self, element, data, w):
        payload = qr_payload(substitute(element.value, data) if element.value else None, data)
        w.align(ALIGNMENTS[element.resolved_alignment])
        w.emit(*qr_commands(payload, element.size, element.error_correction))
        w.emit(feed(1))
        w.line(QR_CAPTION)

    def _cut_paper(self, element, data, w):
        # generate() always finishes with feed + cut
        pass


def generate(
    template: Union[Template, Mapping[str, Any], None],
    data: Optional[Mapping[str, Any]] = None,
) -> bytes:
    return EscPosGenerator().generate(template, data)
