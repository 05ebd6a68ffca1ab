"""
Sending a rendered ESC/POS job to a printer.

python-escpos is the preferred transport; the raw byte sinks in
``backends`` are used when it is not installed and for dry runs.
"""
from __future__ import annotations

import logging
from typing import Optional

from .backends import BaseBackend, make_backend

_ESC_POS_AVAILABLE = True
try:
    from escpos.printer import Network, Serial, Usb  # type: ignore
except ImportError:
    _ESC_POS_AVAILABLE = False

logger = logging.getLogger(__name__)


def get_escpos_printer(cfg: dict):
    """python-escpos printer for the configured interface."""
    profile = cfg.get("profile") or "default"
    timeout = float(cfg.get("timeout", 30.0))
    iface = (cfg.get("interface") or "network").lower()

    if iface == "network":
        return Network(cfg.get("host", "127.0.0.1"), int(cfg.get("port", 9100)),
                       timeout=timeout, profile=profile)
    if iface == "usb":
        vid = cfg.get("usb_vid")
        pid = cfg.get("usb_pid")
        if vid is None or pid is None:
            raise RuntimeError("USB interface requires usb_vid and usb_pid in printer config.")
        return Usb(
            idVendor=int(str(vid), 16),
            idProduct=int(str(pid), 16),
            timeout=0,
            in_ep=int(str(cfg.get("usb_in", "0x82")), 16),
            out_ep=int(str(cfg.get("usb_out", "0x01")), 16),
            profile=profile,
        )
    if iface == "serial":
        return Serial(cfg.get("serial_port", "COM1"), baudrate=int(cfg.get("baudrate", 19200)),
                      timeout=timeout, profile=profile)
    raise RuntimeError(f"Unknown interface: {iface}")


def send_job(cfg: dict, job: bytes) -> Optional[BaseBackend]:
    """
    Send *job* using the printer config *cfg*.

    Returns the raw backend when one was used (always for ``dry_run``),
    or None when python-escpos carried the job.
    """
    iface = (cfg.get("interface") or "network").lower()
    logger.debug("send_job interface=%s bytes=%d escpos_available=%s",
                 iface, len(job), _ESC_POS_AVAILABLE)

    if iface != "dry_run" and _ESC_POS_AVAILABLE:
        printer = get_escpos_printer(cfg)
        try:
            printer._raw(job)
        finally:
            printer.close()
        return None

    backend = make_backend(cfg)
    backend.send(job)
    return backend
