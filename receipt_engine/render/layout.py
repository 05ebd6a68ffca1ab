"""
render/layout.py - Fixed-width text layout for character-cell printers.

Greedy word wrapping, two-sided (label/value) rows, and the item table
column presets for 32 and 48 character paper.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..core.fields import ITEM_HEADERS, LineItem
from ..core.formatting import to_display


def wrap_text(text: str, width: int) -> List[str]:
    """
    Greedy word wrap to *width* characters.

    Words are accumulated while the line fits; an overflowing word starts a
    new line, and a single word longer than the width is cut to the width.
    Explicit newlines always break.
    """
    width = max(1, width)
    lines: List[str] = []
    for paragraph in (text or "").split("\n"):
        lines.extend(_wrap_paragraph(paragraph, width))
    return lines


def _wrap_paragraph(text: str, width: int) -> List[str]:
    if len(text) <= width:
        return [text]

    lines: List[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = word[:width]
    if current:
        lines.append(current)
    return lines or [text[:width]]


def justify(left: str, right: str, width: int) -> List[str]:
    """
    Put *left* and *right* on one line separated by padding.

    Falls back to two lines (left, then right-aligned right) when both do
    not fit with at least one space between them.
    """
    if len(left) + 1 + len(right) <= width:
        return [left + " " * (width - len(left) - len(right)) + right]
    return wrap_text(left, width) + [line.rjust(width) for line in wrap_text(right, width)]


# ---------- item table ----------

@dataclass(frozen=True)
class ColumnPreset:
    """
    Widths of the item table columns: #, Item, Qty, Price, Amount.

    The first two are left aligned, the rest right aligned. Every cell keeps
    one column free as a gutter, so Price and Amount hold the 7 and 8
    character money budgets.
    """
    width: int
    sl_no: int
    name: int
    qty: int
    price: int
    amount: int

    def __post_init__(self):
        if self.sl_no + self.name + self.qty + self.price + self.amount != self.width:
            raise ValueError(f"column widths do not add up to {self.width}")

    @property
    def columns(self) -> Tuple[int, int, int, int, int]:
        return (self.sl_no, self.name, self.qty, self.price, self.amount)

    def format_row(self, cells: Sequence[str]) -> str:
        out = []
        for index, (cell, size) in enumerate(zip(cells, self.columns)):
            cell = cell[:size - 1]
            out.append(cell.ljust(size) if index < 2 else cell.rjust(size))
        return "".join(out)

    def header_line(self) -> str:
        return self.format_row(ITEM_HEADERS)

    def item_line(self, item: LineItem) -> str:
        return self.format_row((
            to_display(item.sl_no),
            item.name,
            to_display(item.qty),
            item.price_text,
            item.amount_text,
        ))


NARROW_PRESET = ColumnPreset(width=32, sl_no=3, name=8, qty=4, price=8, amount=9)
WIDE_PRESET = ColumnPreset(width=48, sl_no=4, name=22, qty=5, price=8, amount=9)


def preset_for(character_width: int) -> ColumnPreset:
    """32 characters selects the narrow preset; any other width is treated as 48."""
    return NARROW_PRESET if character_width == NARROW_PRESET.width else WIDE_PRESET
