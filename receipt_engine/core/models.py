from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Any, Dict, Mapping


# ---------- Enumerations ----------

class ElementType(str, Enum):
    TEXT = "text"
    STATIC_TEXT = "static_text"
    SEPARATOR = "separator"
    NEWLINE = "newline"
    PLACEHOLDER_BLOCK = "placeholder_block"
    BILL_DATE_ROW = "bill_date_row"
    CUSTOMER_INFO_ROW = "customer_info_row"
    TRANSACTION_PAYMENT_ROW = "transaction_payment_row"
    TRANSACTION_CALCULATION = "transaction_calculation"
    TRANSACTION_CALCULATION_V2 = "transaction_calculation_v2"
    ITEM_HEADER_ROW = "item_header_row"
    BILL_ITEMS = "bill_items"
    TOTAL_QTY_ITEMS_ROW = "total_qty_items_row"
    TOTAL_AMOUNT_ROW = "total_amount_row"
    TOTAL_AMOUNT_ROW_SIMPLE = "total_amount_row_simple"
    FOOTER_MESSAGE = "footer_message"
    QR_CODE = "qr_code"
    CUT_PAPER = "cut_paper"

    @classmethod
    def parse(cls, raw: Any) -> Optional["ElementType"]:
        try:
            return cls(raw)
        except ValueError:
            return None


class Alignment(str, Enum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


class FontSize(str, Enum):
    SMALL = "SMALL"
    NORMAL = "NORMAL"
    LARGE = "LARGE"


class FontWeight(str, Enum):
    NORMAL = "NORMAL"
    BOLD = "BOLD"


def _parse_enum(enum_cls, raw: Any, default):
    if isinstance(raw, str):
        try:
            return enum_cls(raw.upper())
        except ValueError:
            pass
    return default


# Alignment used when an element does not carry one. Shared by both
# renderers so preview and paper agree.
DEFAULT_ALIGNMENT: Dict[ElementType, Alignment] = {
    ElementType.STATIC_TEXT: Alignment.CENTER,
    ElementType.SEPARATOR: Alignment.CENTER,
    ElementType.PLACEHOLDER_BLOCK: Alignment.CENTER,
    ElementType.FOOTER_MESSAGE: Alignment.CENTER,
    ElementType.QR_CODE: Alignment.CENTER,
    ElementType.TRANSACTION_CALCULATION: Alignment.RIGHT,
    ElementType.TRANSACTION_CALCULATION_V2: Alignment.RIGHT,
}

DEFAULT_CHARACTER_WIDTH = 32
DEFAULT_PAPER_WIDTH_MM = 58
MIN_CHARACTER_WIDTH = 16
MAX_CHARACTER_WIDTH = 64

# Operators that represent a running or grand total rather than a step.
FINALIZING_OPERATORS = frozenset({"=", "%", "GT", "M+", "M-"})


# ---------- Core element model ----------

@dataclass(frozen=True)
class Element:
    type: str                       # raw tag, see ElementType
    alignment: Optional[Alignment] = None
    font_size: FontSize = FontSize.NORMAL
    font_weight: FontWeight = FontWeight.NORMAL
    value: Optional[str] = None     # text with ${var} placeholders

    # variant specific
    style: str = "DASHED"           # separator: DASHED | anything else => "="
    length: Optional[int] = None    # separator length, defaults to character width
    height: int = 90                # placeholder_block height in px
    size: str = "MEDIUM"            # qr_code: SMALL | MEDIUM | LARGE
    error_correction: str = "M"     # qr_code: L | M | Q | H

    # unknown keys for forward-compat
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> Optional[ElementType]:
        return ElementType.parse(self.type)

    @property
    def resolved_alignment(self) -> Alignment:
        if self.alignment is not None:
            return self.alignment
        return DEFAULT_ALIGNMENT.get(self.kind, Alignment.LEFT)

    # ---- helpers used by loaders / persistence ----
    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.type}
        if self.alignment is not None:
            d["alignment"] = self.alignment.value
        if self.font_size is not FontSize.NORMAL:
            d["font_size"] = self.font_size.value
        if self.font_weight is not FontWeight.NORMAL:
            d["font_weight"] = self.font_weight.value
        if self.value is not None:
            d["value"] = self.value
        kind = self.kind
        if kind is ElementType.SEPARATOR:
            d["style"] = self.style
            if self.length is not None:
                d["length"] = self.length
        elif kind is ElementType.PLACEHOLDER_BLOCK:
            d["height"] = self.height
        elif kind is ElementType.QR_CODE:
            d["size"] = self.size
            d["error_correction"] = self.error_correction
        d.update(self.extra)
        return d

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Element":
        known = {
            "type", "alignment", "font_size", "font_weight", "value",
            "style", "length", "height", "size", "error_correction",
        }
        value = d.get("value")
        length = d.get("length")
        height = d.get("height")
        return Element(
            type=str(d.get("type", "")),
            alignment=_parse_enum(Alignment, d.get("alignment"), None),
            font_size=_parse_enum(FontSize, d.get("font_size"), FontSize.NORMAL),
            font_weight=_parse_enum(FontWeight, d.get("font_weight"), FontWeight.NORMAL),
            value=value if isinstance(value, str) else None,
            style=str(d.get("style") or "DASHED").upper(),
            length=length if isinstance(length, int) and length > 0 else None,
            height=int(height) if isinstance(height, (int, float)) and height >= 1 else 90,
            size=str(d.get("size") or "MEDIUM").upper(),
            error_correction=str(d.get("error_correction") or "M").upper(),
            extra={k: v for k, v in d.items() if k not in known},
        )


@dataclass(frozen=True)
class CalculationStep:
    operator: str
    operand: str
    is_final: bool = False

    @property
    def is_finalizing(self) -> bool:
        return self.is_final or self.operator in FINALIZING_OPERATORS

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "CalculationStep":
        operator = d.get("operator")
        operand = d.get("operand")
        return CalculationStep(
            operator="" if operator is None else str(operator),
            operand="" if operand is None else str(operand),
            is_final=d.get("isFinal") is True,
        )


# ---------- Template / document ----------

@dataclass(frozen=True)
class Template:
    character_width: int = DEFAULT_CHARACTER_WIDTH
    paper_width: int = DEFAULT_PAPER_WIDTH_MM
    elements: List[Element] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "receipt_template": {
                "characterWidth": self.character_width,
                "paperWidth": self.paper_width,
                "elements": [e.to_dict() for e in self.elements],
            }
        }

    @staticmethod
    def from_dict(d: Optional[Mapping[str, Any]]) -> "Template":
        """
        Build a Template from a template document.

        Accepts the wrapped form ``{"receipt_template": {...}}`` or the inner
        mapping. Anything malformed degrades to defaults; the validator is
        the place that reports structural problems.
        """
        if not isinstance(d, Mapping):
            return Template()
        body = d.get("receipt_template", d)
        if not isinstance(body, Mapping):
            return Template()

        width = body.get("characterWidth")
        if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
            width = DEFAULT_CHARACTER_WIDTH
        width = max(MIN_CHARACTER_WIDTH, min(MAX_CHARACTER_WIDTH, width))

        paper = body.get("paperWidth")
        if isinstance(paper, bool) or not isinstance(paper, (int, float)) or paper <= 0:
            paper = DEFAULT_PAPER_WIDTH_MM

        raw_elements = body.get("elements")
        if not isinstance(raw_elements, list):
            raw_elements = []

        return Template(
            character_width=width,
            paper_width=int(paper),
            elements=[Element.from_dict(e) for e in raw_elements if isinstance(e, Mapping)],
        )
