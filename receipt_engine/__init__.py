"""
receipt_engine - render receipt templates to HTML preview markup and ESC/POS bytes.

    from receipt_engine import Template, render_preview, generate

    template = Template.from_dict(json.load(open("template.json")))
    html = render_preview(template, data)
    payload = generate(template, data)
"""

from .core.formatting import (
    format_currency,
    format_date,
    format_indian_number,
    format_number_limited,
    format_time,
)
from .core.models import CalculationStep, Element, ElementType, Template
from .core.sample_data import default_sample_data
from .core.validation import ValidationResult, validate
from .core.variables import describe_variables, extract_variables, substitute
from .render.escpos import Command, EscPosGenerator, generate
from .render.markup import render_element, render_preview

__version__ = "1.0.0"
