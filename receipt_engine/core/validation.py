"""
core/validation.py - Structural checks on a raw template document.

This is the only component that reports problems; the renderers degrade
silently on the same input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .models import (
    DEFAULT_CHARACTER_WIDTH,
    DEFAULT_PAPER_WIDTH_MM,
    MAX_CHARACTER_WIDTH,
    MIN_CHARACTER_WIDTH,
    ElementType,
    Template,
)


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


def validate(template: Any) -> ValidationResult:
    """
    Validate a template document ``{"receipt_template": {...}}`` or a
    ``Template`` instance.

    Errors: missing document, missing ``receipt_template``, missing or
    non-list ``elements``. Everything that has a usable default
    (character/paper width, odd element entries) is only a warning.
    """
    result = ValidationResult()

    if isinstance(template, Template):
        template = template.to_dict()
    if template is None:
        result.errors.append("Template is null or undefined")
        return result
    if not isinstance(template, Mapping):
        result.errors.append("Template must be an object")
        return result

    body = template.get("receipt_template")
    if not isinstance(body, Mapping):
        result.errors.append('Missing "receipt_template" property')
        body = {}

    elements = body.get("elements")
    if elements is None:
        result.errors.append('Missing "receipt_template.elements" array')
    elif not isinstance(elements, list):
        result.errors.append('"receipt_template.elements" must be an array')

    width = body.get("characterWidth")
    if not width:
        result.warnings.append(
            f'Missing "characterWidth" property, defaulting to {DEFAULT_CHARACTER_WIDTH}'
        )
    elif isinstance(width, bool) or not isinstance(width, int) \
            or not MIN_CHARACTER_WIDTH <= width <= MAX_CHARACTER_WIDTH:
        result.warnings.append(
            f'"characterWidth" should be an integer between {MIN_CHARACTER_WIDTH} '
            f'and {MAX_CHARACTER_WIDTH}, got {width!r}'
        )

    if not body.get("paperWidth"):
        result.warnings.append(
            f'Missing "paperWidth" property, defaulting to {DEFAULT_PAPER_WIDTH_MM}'
        )

    if isinstance(elements, list):
        for index, elem in enumerate(elements):
            if not isinstance(elem, Mapping):
                result.warnings.append(f"Element {index} is not an object and will be skipped")
            elif not elem.get("type"):
                result.warnings.append(f'Element {index} has no "type" and renders nothing')
            elif ElementType.parse(elem.get("type")) is None:
                result.warnings.append(
                    f'Element {index} has unknown type {elem.get("type")!r} and renders nothing'
                )

    return result
