# receipt_engine/printing/exceptions.py
"""
Error types for sending rendered receipts to a printer.

Rendering itself never raises; these cover the transport side only
(opening a connection, configuration, writing the ESC/POS job).
No Qt dependencies, so the CLI and tests can use them directly.
"""
from __future__ import annotations


class PrintError(Exception):
    """Base exception for all printing errors."""


class PrinterConnectionError(PrintError):
    """Failed to reach the printer (network, serial, USB)."""


class PrinterConfigError(PrintError):
    """Invalid or incomplete printer configuration."""


class PrintJobError(PrintError):
    """The printer was reached but the job could not be sent."""


# ---------------------------------------------------------------------------
# Error-mapping helpers
# ---------------------------------------------------------------------------

_CONNECTION_PATTERNS: list[tuple[type, str]] = [
    (ConnectionRefusedError, "Printer refused the connection. Is it powered on?"),
    (ConnectionResetError, "Connection to printer was reset unexpectedly."),
    (TimeoutError, "Printer connection timed out. Check network/cable."),
    (OSError, "Could not communicate with the printer."),
]

_CONFIG_KEYWORDS = ("not installed", "missing", "requires", "unknown interface", "not found")


def map_exception(exc: BaseException) -> PrintError:
    """
    Wrap a low-level exception into the matching ``PrintError`` subclass
    with a short message, keeping the original as ``__cause__``.

    A ``PrintError`` is returned unchanged.
    """
    if isinstance(exc, PrintError):
        return exc

    mapped: PrintError
    for exc_type, message in _CONNECTION_PATTERNS:
        if isinstance(exc, exc_type):
            mapped = PrinterConnectionError(message)
            break
    else:
        text = str(exc).lower()
        if isinstance(exc, (ValueError, KeyError)):
            mapped = PrinterConfigError(str(exc))
        elif isinstance(exc, RuntimeError) and any(kw in text for kw in _CONFIG_KEYWORDS):
            mapped = PrinterConfigError(str(exc))
        else:
            mapped = PrintJobError(str(exc) or type(exc).__name__)

    mapped.__cause__ = exc
    return mapped


def friendly_message(exc: BaseException) -> str:
    """Short description of *exc* suitable for a status line."""
    return str(map_exception(exc))
