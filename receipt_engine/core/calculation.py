"""
core/calculation.py - Step-wise calculation display.

Both calculation elements are fed by ``synthesize_steps``: the compact
element joins each rate/qty pair on one line, the step-wise element prints
one row per step. Sharing the synthesis keeps the two texts identical.
"""

from __future__ import annotations

from typing import Any, List, Mapping

from .fields import discount, line_items
from .formatting import format_indian_number
from .models import CalculationStep

MULTIPLY = "x"
SUBTRACT = "-"


def synthesize_steps(data: Mapping[str, Any]) -> List[CalculationStep]:
    """
    Build steps from the item list: rate and qty per item, then the discount.

    No final "=" step is produced; the grand total belongs to the totals row.
    """
    items = line_items(data)
    if not items:
        return []

    steps: List[CalculationStep] = []
    for item in items:
        steps.append(CalculationStep(MULTIPLY, format_indian_number(item.rate)))
        steps.append(CalculationStep(MULTIPLY, format_indian_number(item.qty)))

    disc = discount(data)
    if disc is not None:
        operand = format_indian_number(disc.value)
        if disc.is_percentage:
            operand += "%"
        steps.append(CalculationStep(SUBTRACT, operand))
    return steps


def calculation_steps(data: Mapping[str, Any]) -> List[CalculationStep]:
    """Steps supplied by the data context, or synthesised from items when absent."""
    raw = data.get("calculation_steps")
    if isinstance(raw, list) and raw:
        return [CalculationStep.from_dict(s) for s in raw if isinstance(s, Mapping)]
    return synthesize_steps(data)


def display_steps(data: Mapping[str, Any]) -> List[CalculationStep]:
    """Steps shown row by row; finalizing steps (=, %, GT, M+, M-) are dropped."""
    return [step for step in calculation_steps(data) if not step.is_finalizing]


def calculation_lines(data: Mapping[str, Any]) -> List[str]:
    """
    Compact form: "rate x qty" per item, then "- discount" (with "%" for
    percentage discounts).
    """
    steps = synthesize_steps(data)
    lines: List[str] = []
    i = 0
    while i < len(steps):
        step = steps[i]
        if step.operator == MULTIPLY and i + 1 < len(steps):
            lines.append(f"{step.operand} {MULTIPLY} {steps[i + 1].operand}")
            i += 2
        else:
            lines.append(f"{step.operator} {step.operand}")
            i += 1
    return lines
