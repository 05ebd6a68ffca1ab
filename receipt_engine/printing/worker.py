from __future__ import annotations

import logging

from PySide6 import QtCore

from ..render.escpos import cut, encode, feed, initialize
from .backends import DryRunBackend
from .exceptions import PrintJobError, friendly_message
from .transport import send_job

logger = logging.getLogger(__name__)


class WorkerSignals(QtCore.QObject):
    finished = QtCore.Signal()       # no-arg; UI just shows "done"
    error = QtCore.Signal(str)       # error message
    progress = QtCore.Signal(int)    # 0-100


class PrinterWorker(QtCore.QThread):
    """
    Thread that sends an already rendered ESC/POS job to a printer.

    payload = {
        "data": bytes                    # for action="print" (EscPosGenerator.generate)
        "config": {
            interface: "network"|"usb"|"serial"|"dry_run",
            host/port or serial/usb settings,
            timeout: float,
            profile: str,                # python-escpos capability profile
            cut_mode: "full"|"partial"|"none",   # for action="cut"
        }
    }
    """
    def __init__(self, action: str, payload=None, parent=None, *, dry_run: bool = False):
        super().__init__(parent)
        self.action = (action or "").lower()
        self.payload = payload or {}
        self.signals = WorkerSignals()
        self.dry_run = dry_run
        self.dry_run_backend = None  # set after run() if dry_run is True

    # ---------------- job bytes ----------------

    def _job_bytes(self, cfg: dict) -> bytes:
        if self.action == "print":
            data = self.payload.get("data")
            if not data:
                raise PrintJobError("No ESC/POS data supplied to PrinterWorker for action='print'.")
            return bytes(data)
        if self.action == "feed":
            return encode([initialize(), feed(3)])
        if self.action == "cut":
            return encode([initialize(), self._cut_command(cfg)])
        raise PrintJobError(f"Unknown print action: {self.action}")

    @staticmethod
    def _cut_command(cfg: dict):
        mode = (cfg.get("cut_mode") or "full").lower()
        if mode == "none":
            return feed(0)
        return cut(partial=(mode == "partial"))

    # ---------------- thread entry ----------------

    def run(self):
        try:
            cfg = dict(self.payload.get("config") or {})
            job = self._job_bytes(cfg)
            self.signals.progress.emit(10)

            logger.debug("worker action=%s bytes=%d dry_run=%s", self.action, len(job), self.dry_run)

            if self.dry_run:
                cfg["interface"] = "dry_run"
            backend = send_job(cfg, job)
            if isinstance(backend, DryRunBackend):
                self.dry_run_backend = backend

            self.signals.progress.emit(100)
        except Exception as e:
            logger.exception("Print action %r failed", self.action)
            self.signals.error.emit(friendly_message(e))
        finally:
            self.signals.finished.emit()
