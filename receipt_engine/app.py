"""
Command-line entry point.

Usage:
    python -m receipt_engine template.json --data data.json --html preview.html
    python -m receipt_engine template.json --escpos receipt.bin
    python -m receipt_engine template.json --validate --variables
    python -m receipt_engine template.json --data data.json --print --host 192.168.1.50
    python -m receipt_engine template.json --print --profile "Front Desk 58mm"
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .core.models import Template
from .core.sample_data import default_sample_data
from .core.validation import validate
from .core.variables import describe_variables
from .printing.exceptions import PrintError, map_exception
from .printing.transport import send_job
from .render.escpos import EscPosGenerator
from .render.markup import render_preview

logger = logging.getLogger(__name__)


class TemplateLoadError(Exception):
    """A template or data file could not be read as JSON."""


def load_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        raise TemplateLoadError(f"Cannot load {path}: {e}") from e


def _has_character_width(document: Any) -> bool:
    body = document.get("receipt_template") if isinstance(document, dict) else None
    return isinstance(body, dict) and bool(body.get("characterWidth"))


def _printer_config(args: argparse.Namespace, base: Optional[dict] = None) -> dict:
    """Printer config from a saved profile (if any) with explicit CLI options on top."""
    cfg = {"interface": "network", **(base or {})}
    if args.interface:
        cfg["interface"] = args.interface
    if args.host:
        cfg["host"] = args.host
    if args.port:
        cfg["port"] = args.port
    if args.serial_port:
        cfg["serial_port"] = args.serial_port
    if args.dry_run:
        cfg["interface"] = "dry_run"
    return cfg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="receipt_engine",
        description="Render a receipt template to HTML preview markup and/or ESC/POS bytes.",
    )
    parser.add_argument("template", help="template JSON ({\"receipt_template\": {...}})")
    parser.add_argument("--data", help="data context JSON (default: built-in sample data)")
    parser.add_argument("--html", help="write preview markup to this file ('-' for stdout)")
    parser.add_argument("--escpos", help="write the ESC/POS command stream to this file")
    parser.add_argument("--validate", action="store_true", help="report template errors/warnings")
    parser.add_argument("--variables", action="store_true", help="list the ${variables} the template uses")

    printing = parser.add_argument_group("printing")
    printing.add_argument("--print", dest="send", action="store_true", help="send the receipt to a printer")
    printing.add_argument("--profile", help="named printer profile from the saved settings")
    printing.add_argument("--interface", choices=["network", "serial", "usb"])
    printing.add_argument("--host", help="printer host for the network interface")
    printing.add_argument("--port", type=int, help="printer TCP port (default 9100)")
    printing.add_argument("--serial-port", help="serial device, e.g. /dev/ttyUSB0 or COM3")
    printing.add_argument("--dry-run", action="store_true", help="render and 'send' without hardware")

    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        document = load_json(args.template)
        data = load_json(args.data) if args.data else default_sample_data()
    except TemplateLoadError as e:
        logger.error("%s", e)
        return 1

    result = validate(document)
    if args.validate or not result.valid:
        for message in result.errors:
            logger.error("%s", message)
        for message in result.warnings:
            logger.warning("%s", message)
    if not result.valid:
        return 1

    if args.variables:
        for name, doc in describe_variables(document).items():
            print(f"{name}\t{doc.type}\t{doc.description}")

    template = Template.from_dict(document)
    cfg = _printer_config(args)

    if args.profile:
        from .printing.profiles import find_profile  # Qt is only needed for saved profiles

        profile = find_profile(args.profile)
        if profile is None:
            logger.error("No printer profile named %r", args.profile)
            return 1
        cfg = _printer_config(args, profile.config)
        if not _has_character_width(document):
            template = dataclasses.replace(template, character_width=profile.character_width)

    if args.html:
        html = render_preview(template, data)
        if args.html == "-":
            print(html)
        else:
            Path(args.html).write_text(html, encoding="utf-8")
            logger.info("Wrote preview to %s", args.html)

    if args.escpos or args.send:
        job = EscPosGenerator().generate(template, data)
        if args.escpos:
            Path(args.escpos).write_bytes(job)
            logger.info("Wrote %d bytes of ESC/POS to %s", len(job), args.escpos)
        if args.send:
            try:
                send_job(cfg, job)
            except Exception as e:
                error: PrintError = map_exception(e)
                logger.error("Printing failed: %s", error)
                return 1
            logger.info("Sent %d bytes to %s printer", len(job), cfg.get("interface"))

    return 0


if __name__ == "__main__":
    sys.exit(main())
