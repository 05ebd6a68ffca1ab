"""
core/variables.py - ${name} placeholder substitution and discovery.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Set, Union

from .formatting import to_display
from .models import Template


# ${name}; the name is any run of characters other than "}" and is trimmed.
PLACEHOLDER_PATTERN = re.compile(r'\$\{([^}]+)\}')


def substitute(text: Any, context: Mapping[str, Any]) -> Any:
    """
    Replace ${name} tokens with values from *context*.

    Missing or None values leave the original token in place so an
    unresolved placeholder stays visible on the receipt. Replacement
    values are never scanned again.
    """
    if not text or not isinstance(text, str):
        return text

    def _replace(match: re.Match) -> str:
        value = context.get(match.group(1).strip()) if context else None
        if value is None:
            return match.group(0)
        return to_display(value)

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def _as_template(template: Union[Template, Mapping[str, Any], None]) -> Template:
    if isinstance(template, Template):
        return template
    return Template.from_dict(template)


def extract_variables(template: Union[Template, Mapping[str, Any], None]) -> Set[str]:
    """
    Scan every element value for ${name} tokens.
    Returns a set of unique variable names found.
    """
    used: Set[str] = set()
    for elem in _as_template(template).elements:
        if elem.value:
            used.update(name.strip() for name in PLACEHOLDER_PATTERN.findall(elem.value))
    used.discard("")
    return used


# ---------- Variable documentation ----------

@dataclass(frozen=True)
class VariableDoc:
    type: str
    description: str
    required: bool = True


def infer_type(name: str) -> str:
    if "items" in name:
        return "array"
    if "date" in name or "time" in name:
        return "string (date/time)"
    if any(k in name for k in ("amount", "rate", "total", "subtotal", "discount")):
        return "number (currency)"
    if "qty" in name or "count" in name:
        return "number"
    return "string"


def describe(name: str) -> str:
    """'customer_mobile' -> 'Customer mobile', 'billNumber' -> 'Bill Number'."""
    last = name.split(".")[-1]
    readable = re.sub(r'([A-Z])', r' \1', last).replace("_", " ").strip()
    return readable[:1].upper() + readable[1:]


def describe_variables(template: Union[Template, Mapping[str, Any], None]) -> Dict[str, VariableDoc]:
    """Documentation stub for every variable a template references, sorted by name."""
    return {
        name: VariableDoc(type=infer_type(name), description=describe(name))
        for name in sorted(extract_variables(template))
    }
