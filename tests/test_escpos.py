"""
Tests for the ESC/POS command generator and fixed-width layout helpers.

They verify:
  1) Stream framing (init ... feed, cut) and per-element state reset.
  2) QR code sub-command bytes.
  3) Word wrap, justification and item table column presets.
"""
from __future__ import annotations

import pytest

from receipt_engine.core.fields import LineItem
from receipt_engine.core.models import Alignment, Element, ElementType, FontSize, FontWeight, Template
from receipt_engine.core.sample_data import default_sample_data
from receipt_engine.render.escpos import (
    Align,
    EscPosGenerator,
    FontStyle,
    encode,
    encode_text,
    font_style,
    generate,
    qr_commands,
)
from receipt_engine.render.layout import (
    NARROW_PRESET,
    WIDE_PRESET,
    justify,
    preset_for,
    wrap_text,
)
from receipt_engine.render.markup import render_preview

INIT = b"\x1b@"
TRAILER = b"\x1bd\x03" + b"\x1dV\x00"

ALL_TYPES = [
    "text", "static_text", "separator", "newline", "placeholder_block",
    "bill_date_row", "customer_info_row", "transaction_payment_row",
    "transaction_calculation", "transaction_calculation_v2", "item_header_row",
    "bill_items", "total_qty_items_row", "total_amount_row", "total_amount_row_simple",
    "footer_message", "qr_code", "cut_paper",
]


@pytest.fixture()
def generator():
    return EscPosGenerator()


@pytest.fixture()
def full_template():
    """One element of every kind, with styles that force state changes."""
    elements = [{"type": t} for t in ALL_TYPES]
    elements[0].update(value="Hello ${shop_name}", alignment="RIGHT", font_size="LARGE", font_weight="BOLD")
    return Template.from_dict({"receipt_template": {"characterWidth": 32, "elements": elements}})


def _texts(commands):
    return [c.data.decode("utf-8") for c in commands if c.name == "text"]


# ---------------------------------------------------------------------------
# 1) Framing and state
# ---------------------------------------------------------------------------

class TestFraming:
    def test_empty_template(self):
        doc = {"receipt_template": {"characterWidth": 32, "elements": []}}
        assert generate(doc, {}) == INIT + TRAILER

    def test_none_template_and_data(self):
        assert generate(None, None) == INIT + TRAILER

    def test_text_element_bytes(self):
        doc = {"receipt_template": {"elements": [
            {"type": "text", "value": "Hello ${name}", "alignment": "CENTER", "font_weight": "BOLD"},
        ]}}
        assert generate(doc, {"name": "World"}) == (
            INIT
            + b"\x1ba\x01"          # align center
            + b"\x1b!\x08"          # emphasized
            + b"Hello World"
            + b"\x1bd\x01"
            + b"\x1b!\x00"          # font reset
            + b"\x1ba\x00"          # align reset
            + TRAILER
        )

    def test_default_style_emits_no_state_commands(self, generator):
        cmds = generator.process_element(Element(type="text", value="plain"), {}, 32)
        assert [c.name for c in cmds] == ["text", "feed"]

    def test_every_element_returns_to_default_state(self, generator, full_template):
        """Simulate the printer: after each element it is back at LEFT / Font A."""
        data = default_sample_data()
        for element in full_template.elements:
            align, font = Align.LEFT, FontStyle.FONT_A
            for cmd in generator.process_element(element, data, full_template.character_width):
                if cmd.name == "align":
                    align = Align(cmd.data[2])
                elif cmd.name == "font":
                    font = FontStyle(cmd.data[2])
            assert (align, font) == (Align.LEFT, FontStyle.FONT_A), element.type

    def test_font_reset_precedes_alignment_reset(self, generator):
        element = Element(type="text", value="x", alignment=Alignment.RIGHT, font_weight=FontWeight.BOLD)
        names = [c.name for c in generator.process_element(element, {}, 32)]
        assert names[-2:] == ["font", "align"]

    def test_unknown_and_cut_paper_emit_nothing(self, generator):
        assert generator.process_element(Element(type="barcode"), {}, 32) == []
        assert generator.process_element(Element(type="cut_paper"), {}, 32) == []

    def test_broken_element_is_skipped(self, generator, monkeypatch):
        def boom(element, data, writer):
            raise RuntimeError("bad element")

        monkeypatch.setitem(generator._handlers, ElementType.NEWLINE, boom)
        doc = {"receipt_template": {"elements": [
            {"type": "newline"},
            {"type": "text", "value": "after"},
        ]}}
        assert generator.generate(doc, {}) == INIT + b"after\x1bd\x01" + TRAILER

    def test_idempotent(self, generator, full_template):
        data = default_sample_data()
        assert generator.generate(full_template, data) == generator.generate(full_template, data)


class TestFonts:
    @pytest.mark.parametrize("size, weight, expected", [
        (FontSize.NORMAL, FontWeight.NORMAL, FontStyle.FONT_A),
        (FontSize.SMALL, FontWeight.NORMAL, FontStyle.FONT_A),
        (FontSize.LARGE, FontWeight.NORMAL, FontStyle.FONT_A),
        (FontSize.NORMAL, FontWeight.BOLD, FontStyle.FONT_A_BOLD),
        (FontSize.LARGE, FontWeight.BOLD, FontStyle.FONT_B_BOLD_DOUBLE),
    ])
    def test_font_style(self, size, weight, expected):
        assert font_style(size, weight) is expected

    def test_encode_text(self):
        assert encode_text("₹") == b"\xe2\x82\xb9"
        assert encode_text("é") == b"\xc3\xa9"
        assert encode_text("a\U0001F600b") == b"a?b"


# ---------------------------------------------------------------------------
# 2) QR code
# ---------------------------------------------------------------------------

class TestQrCode:
    def test_sub_commands(self):
        cmds = qr_commands("abc", "SMALL", "H")
        assert [c.name for c in cmds] == [
            "qr_model", "qr_size", "qr_error_correction", "qr_store", "qr_print",
        ]
        assert cmds[0].data == b"\x1d(k\x04\x00\x31\x41\x32\x00"
        assert cmds[1].data == b"\x1d(k\x03\x00\x31\x43\x03"
        assert cmds[2].data == b"\x1d(k\x03\x00\x31\x45\x33"
        assert cmds[3].data == b"\x1d(k\x06\x00\x31\x50\x30abc"
        assert cmds[4].data == b"\x1d(k\x03\x00\x31\x51\x30"

    def test_store_length_counts_bytes(self):
        store = qr_commands("₹1")[3].data
        assert store[3] == len("₹1".encode("utf-8")) + 3
        assert store[4] == 0

    def test_long_payload_length_prefix(self):
        store = qr_commands("x" * 300)[3].data
        assert store[3] + 256 * store[4] == 303

    def test_defaults(self):
        cmds = qr_commands("abc", "HUGE", "Z")
        assert cmds[1].data[-1] == 6
        assert cmds[2].data[-1] == 0x31

    def test_qr_element(self, generator):
        element = Element(type="qr_code", value="upi://${vpa}")
        cmds = generator.process_element(element, {"vpa": "a@b"}, 32)
        assert [c.name for c in cmds] == [
            "align", "qr_model", "qr_size", "qr_error_correction", "qr_store", "qr_print",
            "feed", "text", "feed", "align",
        ]
        assert cmds[4].data.endswith(b"upi://a@b")
        assert _texts(cmds) == ["SCAN TO PAY"]


# ---------------------------------------------------------------------------
# 3) Layout
# ---------------------------------------------------------------------------

class TestWrap:
    def test_greedy_wrap(self):
        assert wrap_text("The quick brown fox jumps over the lazy dog", 16) == [
            "The quick brown",
            "fox jumps over",
            "the lazy dog",
        ]

    def test_fits(self):
        assert wrap_text("short", 32) == ["short"]

    def test_long_word_is_cut(self):
        assert wrap_text("abcdefghijklmnopqrstuvwxyz", 10) == ["abcdefghij"]
        assert wrap_text("a verylongwordhere b", 8) == ["a", "verylong", "b"]

    def test_explicit_newlines_break(self):
        assert wrap_text("one\ntwo", 32) == ["one", "two"]

    @pytest.mark.parametrize("width", [16, 20, 32, 48])
    def test_lines_never_exceed_width(self, width):
        text = "Thank you for shopping with us! Visit again supercalifragilisticexpialidocious"
        assert all(len(line) <= width for line in wrap_text(text, width))

    def test_wrapped_text_element(self, generator):
        element = Element(type="text", value="The quick brown fox jumps over the lazy dog")
        assert _texts(generator.process_element(element, {}, 16)) == [
            "The quick brown", "fox jumps over", "the lazy dog",
        ]


class TestJustify:
    def test_one_line(self):
        assert justify("Subtotal:", "₹1,000.00", 32) == ["Subtotal:" + " " * 14 + "₹1,000.00"]

    def test_overflow_splits(self):
        assert justify("a" * 20, "b" * 20, 32) == ["a" * 20, " " * 12 + "b" * 20]


class TestColumnPresets:
    def test_presets_fill_width(self):
        assert sum(NARROW_PRESET.columns) == 32
        assert sum(WIDE_PRESET.columns) == 48

    def test_preset_selection(self):
        assert preset_for(32) is NARROW_PRESET
        assert preset_for(48) is WIDE_PRESET
        assert preset_for(40) is WIDE_PRESET

    def test_header_line(self):
        assert NARROW_PRESET.header_line() == "#  Item     Qty   Price   Amount"

    def test_item_line(self):
        item = LineItem(sl_no=1, name="Product A", qty=2, rate=100, amount=200)
        line = NARROW_PRESET.item_line(item)
        assert line == "1  Product    2  100.00   200.00"
        assert len(line) == 32

    def test_item_line_wide(self):
        item = LineItem(sl_no=12, name="Masala Chai Large Cup", qty=10, rate=99999.995, amount=1234567.891)
        line = WIDE_PRESET.item_line(item)
        assert len(line) == 48
        assert "99,999." in line
        assert "1,234,56" in line
        assert "Masala Chai Large Cup" in line

    def test_bill_items_element(self, generator):
        cmds = generator.process_element(Element(type="bill_items"), default_sample_data(), 32)
        assert _texts(cmds) == [
            "1  Product    2  100.00   200.00",
            "2  Product    3  150.00   450.00",
        ]

    def test_header_is_bold(self, generator):
        cmds = generator.process_element(Element(type="item_header_row"), {}, 48)
        assert [c.name for c in cmds] == ["font", "text", "feed", "font"]
        assert cmds[0].data == b"\x1b!\x08"
        assert len(_texts(cmds)[0]) == 48


class TestStructuralRows:
    def test_bill_date_row(self, generator):
        cmds = generator.process_element(Element(type="bill_date_row"), default_sample_data(), 32)
        assert _texts(cmds) == [
            "Bill No: BILL-2025-001",
            "Date: 15/01/2025  Time: 14:30:00",
        ]

    def test_total_amount_row(self, generator):
        data = {"subtotal": 1000, "discount": 50, "discount_type": "percentage", "total": 500}
        cmds = generator.process_element(Element(type="total_amount_row"), data, 32)
        lines = _texts(cmds)
        assert lines[0] == "Subtotal:" + " " * 14 + "₹1,000.00"
        assert lines[1].startswith("Discount -50%:")
        assert lines[1].endswith("₹500.00")
        assert lines[-1].startswith("TOTAL:")
        assert all(len(line) == 32 for line in lines)
        font_cmds = [c.data for c in cmds if c.name == "font"]
        assert font_cmds == [b"\x1b!\x19", b"\x1b!\x00"]

    def test_separator(self, generator):
        cmds = generator.process_element(Element(type="separator"), {}, 32)
        assert _texts(cmds) == ["-" * 32]
        double = generator.process_element(Element(type="separator", style="DOUBLE", length=10), {}, 32)
        assert _texts(double) == ["=" * 10]

    def test_placeholder_block_feeds(self, generator):
        cmds = generator.process_element(Element(type="placeholder_block", height=90), {}, 32)
        assert encode(cmds) == b"\x1bd\x03"
        small = generator.process_element(Element(type="placeholder_block", height=10), {}, 32)
        assert encode(small) == b"\x1bd\x01"

    def test_final_calculation_step_not_printed(self, generator):
        cmds = generator.process_element(
            Element(type="transaction_calculation_v2"), default_sample_data(), 32,
        )
        lines = _texts(cmds)
        assert len(lines) == 5
        assert not any("1,040.00" in line for line in lines)


class TestBackendParity:
    def test_money_strings_match_preview(self, generator):
        data = default_sample_data()
        doc = {"receipt_template": {"characterWidth": 32, "elements": [
            {"type": "bill_items"},
            {"type": "total_amount_row"},
        ]}}
        html = render_preview(doc, data)
        printed = generator.generate(doc, data).decode("utf-8", errors="ignore")
        for money in ("100.00", "450.00", "₹1,000.00", "₹50.00", "₹45.00", "₹1,040.00"):
            assert money in html
            assert money in printed
