"""
Locate the serial device that belongs to the relay board.

The relay enumerates as a CH340 USB-serial bridge.  When no path is given
explicitly, the available serial ports are scanned for the first one whose
USB descriptors match the expected vendor/product pair.
"""

from __future__ import annotations

import logging

import serial.tools.list_ports

from .constants import PRODUCT_ID, VENDOR_ID
from .exceptions import DeviceNotFoundError

logger = logging.getLogger(__name__)


def find_tty(vendor_id: int, product_id: int) -> str | None:
    """Return the device path of the first port matching *vendor_id*/*product_id*.

    Ports that do not expose USB metadata (``vid is None``) are skipped.
    Returns ``None`` when nothing matches or the ports cannot be listed.
    """
    try:
        ports = serial.tools.list_ports.comports()
    except OSError as exc:
        logger.warning("Cannot enumerate serial ports: %s", exc)
        return None

    for port in ports:
        if port.vid is None or port.pid is None:
            continue
        if port.vid == vendor_id and port.pid == product_id:
            return port.device

    return None


def resolve(
    explicit_path: str | None = None,
    vendor_id: int = VENDOR_ID,
    product_id: int = PRODUCT_ID,
) -> str:
    """Return the serial path to use for this invocation.

    An explicit path is returned as-is; checking that it exists is left to
    the caller.

    Raises:
        DeviceNotFoundError: If no path was given and no port matches.
    """
    if explicit_path is not None:
        logger.debug("Using serial port by path %s", explicit_path)
        return explicit_path

    logger.debug("Looking for serial port with vid=%04x pid=%04x", vendor_id, product_id)
    path = find_tty(vendor_id, product_id)
    if path is None:
        raise DeviceNotFoundError(
            f"Compatible TTY device not found (with vid:pid {vendor_id:04x}:{product_id:04x})"
        )

    logger.info("Serial port found at %s", path)
    return path
