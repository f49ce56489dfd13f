"""TTY Power Relay Python Interface"""

from .constants import FRAME_DELAY, PRODUCT_ID, VENDOR_ID
from .controller import TTYRelay, get_relay
from .discovery import find_tty, resolve
from .exceptions import (
    DeviceNotFoundError,
    OpenFailedError,
    RelayError,
    ValidationError,
    WriteFailedError,
)
from .protocol import Action, Polarity

__all__ = [
    "Action",
    "DeviceNotFoundError",
    "FRAME_DELAY",
    "OpenFailedError",
    "PRODUCT_ID",
    "Polarity",
    "RelayError",
    "TTYRelay",
    "VENDOR_ID",
    "ValidationError",
    "WriteFailedError",
    "find_tty",
    "get_relay",
    "resolve",
]
__version__ = "0.1.0"
