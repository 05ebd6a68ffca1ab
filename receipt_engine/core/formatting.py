"""
core/formatting.py - Pure display formatters shared by both renderers.

Every function here is fail-soft: bad input produces a zero value or the
original string, never an exception. Preview and printer output must agree
character for character, so neither renderer formats numbers on its own.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any

CURRENCY_SYMBOL = "₹"

_LEADING_NUMBER = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")
_CENT = Decimal("0.01")
_CONTEXT = Context(prec=400)  # enough digits for any finite float


def to_number(value: Any) -> float:
    """
    Best-effort numeric coercion.

    Numbers pass through, strings are parsed from their leading numeric
    prefix ("12.5kg" -> 12.5). Booleans, None, non-finite values and
    anything unparseable become 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        if not match:
            return 0.0
        number = float(match.group(0))
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def to_display(value: Any) -> str:
    """Render a scalar the way it reads in a data file (1040.0 -> "1040")."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _fixed2(value: Any) -> Decimal:
    # Decimal(float) is exact, so 99999.995 (stored as 99999.99499...) rounds down.
    number = to_number(value)
    if number == 0:
        number = 0.0  # drop negative zero
    return Decimal(number).quantize(_CENT, rounding=ROUND_HALF_UP, context=_CONTEXT)


def _western(value: Any) -> str:
    return format(_fixed2(value), ",.2f")


def format_currency(value: Any) -> str:
    """Currency glyph + 2 decimals + Western 3-digit grouping."""
    return CURRENCY_SYMBOL + _western(value)


def format_indian_number(value: Any) -> str:
    """
    2 decimals with Indian digit grouping.

    The rightmost three integer digits form one group, then groups of two
    moving left: 1234567.5 -> "12,34,567.50". For integer parts of at most
    three digits this is the same as the Western grouping.
    """
    fixed = format(_fixed2(value), ".2f")
    sign = ""
    if fixed.startswith("-"):
        sign, fixed = "-", fixed[1:]
    integer, _, decimals = fixed.partition(".")

    if len(integer) > 3:
        head, tail = integer[:-3], integer[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        integer = ",".join(groups + [tail])

    return f"{sign}{integer}.{decimals or '00'}"


def format_number_limited(value: Any, max_length: int) -> str:
    """
    Western-grouped 2-decimal string cut to at most ``max_length`` characters.

    The cut is a plain character truncation, not rounding: a value that
    does not fit loses its rightmost characters.
    """
    formatted = _western(value)
    if max_length < 0:
        max_length = 0
    if len(formatted) > max_length:
        return formatted[:max_length]
    return formatted


def _parse_iso(iso: str) -> datetime:
    text = iso.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: f"{m.group(1)}.{(m.group(2) + '00000')[:6]}", text)
    return datetime.fromisoformat(text)


def format_date(iso: Any) -> str:
    """ISO-8601 timestamp -> DD/MM/YYYY. Unparseable input is returned as-is."""
    if iso is None or iso == "":
        return ""
    if not isinstance(iso, str):
        return to_display(iso)
    try:
        return _parse_iso(iso).strftime("%d/%m/%Y")
    except ValueError:
        return iso


def format_time(iso: Any) -> str:
    """ISO-8601 timestamp -> HH:MM:SS (24-hour). Unparseable input is returned as-is."""
    if iso is None or iso == "":
        return ""
    if not isinstance(iso, str):
        return to_display(iso)
    try:
        return _parse_iso(iso).strftime("%H:%M:%S")
    except ValueError:
        return iso
