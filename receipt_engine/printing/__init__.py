from .exceptions import PrintError, PrinterConnectionError, PrinterConfigError, PrintJobError
from .backends import make_backend, BaseBackend, DryRunBackend, NetworkBackend, SerialBackend, USBBackend
from .transport import send_job
