from __future__ import annotations

import logging
import socket
from typing import List, Optional

from .exceptions import PrinterConfigError

try:
    import serial  # pyserial
except ImportError:
    serial = None

try:
    import usb.core  # pyusb
    import usb.util
except ImportError:
    usb = None  # type: ignore

logger = logging.getLogger(__name__)


class BaseBackend:
    """A raw byte sink for a rendered ESC/POS job."""

    def send(self, data: bytes) -> None:
        raise NotImplementedError


class NetworkBackend(BaseBackend):
    # Raw TCP, "JetDirect" style (port 9100).
    def __init__(self, host: str, port: int = 9100, timeout: float = 5.0):
        self.host = host
        self.port = int(port)
        self.timeout = float(timeout)

    def send(self, data: bytes) -> None:
        logger.debug("Sending %d bytes to %s:%d", len(data), self.host, self.port)
        with socket.create_connection((self.host, self.port), timeout=self.timeout) as s:
            s.settimeout(self.timeout)
            s.sendall(data)


class SerialBackend(BaseBackend):
    def __init__(self, port: str, baudrate: int = 19200, timeout: float = 2.0):
        if serial is None:
            raise PrinterConfigError(
                "pyserial not installed. `pip install pyserial` to use the serial backend."
            )
        self.port = port
        self.baudrate = int(baudrate)
        self.timeout = float(timeout)

    def send(self, data: bytes) -> None:
        logger.debug("Sending %d bytes to %s @ %d baud", len(data), self.port, self.baudrate)
        ser = serial.Serial(self.port, self.baudrate, timeout=self.timeout)
        try:
            ser.write(data)
            ser.flush()
        finally:
            ser.close()


class USBBackend(BaseBackend):
    """ESC/POS over USB via PyUSB. Needs VID/PID; the OUT endpoint is discovered if omitted."""

    CHUNK = 16384

    def __init__(
        self,
        vendor_id: int,
        product_id: int,
        out_endpoint: Optional[int] = None,
        interface: Optional[int] = None,
    ):
        if usb is None:
            raise PrinterConfigError(
                "pyusb not installed. `pip install pyusb` and install libusb to use USB."
            )
        self.vendor_id = int(vendor_id)
        self.product_id = int(product_id)
        self.out_ep = out_endpoint
        self.interface = interface
        self._ep_out = None
        self._open()

    def _open(self):
        dev = usb.core.find(idVendor=self.vendor_id, idProduct=self.product_id)
        if dev is None:
            raise PrinterConfigError(
                f"USB device {hex(self.vendor_id)}:{hex(self.product_id)} not found."
            )

        dev.set_configuration()
        cfg = dev.get_active_configuration()
        intf = cfg[(self.interface or 0, 0)]

        # Linux: the usblp driver may hold the interface
        if dev.is_kernel_driver_active(intf.bInterfaceNumber):
            dev.detach_kernel_driver(intf.bInterfaceNumber)

        if self.out_ep is not None:
            self._ep_out = usb.util.find_descriptor(intf, bEndpointAddress=self.out_ep)
        else:
            self._ep_out = next(
                (ep for ep in intf
                 if usb.util.endpoint_direction(ep.bEndpointAddress) == usb.util.ENDPOINT_OUT),
                None,
            )
        if self._ep_out is None:
            raise PrinterConfigError("Could not locate a USB OUT endpoint for printer.")

    def send(self, data: bytes) -> None:
        for i in range(0, len(data), self.CHUNK):
            self._ep_out.write(data[i:i + self.CHUNK])


class DryRunBackend(BaseBackend):
    """Keeps every job in memory instead of talking to hardware."""

    def __init__(self):
        self.sent_chunks: List[bytes] = []

    def send(self, data: bytes) -> None:
        self.sent_chunks.append(bytes(data))

    @property
    def total_bytes(self) -> int:
        return sum(len(c) for c in self.sent_chunks)

    @property
    def output(self) -> bytes:
        return b"".join(self.sent_chunks)


def _int(value, base: int = 10) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    return int(str(value), base)


def make_backend(cfg: dict) -> BaseBackend:
    """Build a byte sink from a printer config dict (``interface`` selects the kind)."""
    iface = (cfg.get("interface") or "network").lower()
    if iface == "network":
        return NetworkBackend(
            cfg.get("host", "127.0.0.1"),
            int(cfg.get("port", 9100)),
            float(cfg.get("timeout", 5.0)),
        )
    if iface == "serial":
        return SerialBackend(cfg.get("serial_port", "COM1"), int(cfg.get("baudrate", 19200)))
    if iface == "usb":
        vid = _int(cfg.get("usb_vid"), 16)
        pid = _int(cfg.get("usb_pid"), 16)
        if not (vid and pid):
            raise PrinterConfigError("USB backend requires usb_vid and usb_pid in config.")
        return USBBackend(
            vid,
            pid,
            out_endpoint=_int(cfg.get("usb_out"), 16),
            interface=_int(cfg.get("usb_interface")),
        )
    if iface == "dry_run":
        return DryRunBackend()
    raise PrinterConfigError(f"Unknown interface: {iface}")
