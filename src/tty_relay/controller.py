"""
TTY Power Relay Interface

Python API for switching a CH340-based USB serial power relay.

Protocol details:
    - Baud: 9600, 8N1
    - Fixed 4-byte frames: F0 <b1> <b2> <opcode>
    - No acknowledgement; each frame is followed by a 50 ms settle delay
"""

from __future__ import annotations

import logging

from .constants import DEFAULT_BAUD, DEFAULT_TIMEOUT, PRODUCT_ID, VENDOR_ID
from .discovery import resolve
from .protocol import Polarity, RelayProtocol, validate_seconds
from .transport import ByteStream, SerialTransport

logger = logging.getLogger(__name__)


class TTYRelay:
    """Interface for a USB serial power relay.

    Use as a context manager for automatic connection handling::

        with TTYRelay('/dev/ttyUSB0') as relay:
            relay.on()

    Every operation is a fixed sequence of frames.  If a write fails the
    remaining frames are not sent and the board may be left in the mode
    the last successful frame selected.
    """

    def __init__(
        self,
        port: str,
        polarity: Polarity = Polarity.NORMALLY_OPEN,
        baud: int = DEFAULT_BAUD,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._attach(SerialTransport(port, baudrate=baud, timeout=timeout), polarity)

    @classmethod
    def open(
        cls,
        tty_path: str | None = None,
        polarity: Polarity = Polarity.NORMALLY_OPEN,
        vendor_id: int = VENDOR_ID,
        product_id: int = PRODUCT_ID,
    ) -> TTYRelay:
        """Locate the relay (unless *tty_path* is given) and connect to it.

        Raises:
            DeviceNotFoundError: If no path was given and no device matches.
            OpenFailedError: If the port cannot be opened.
        """
        relay = cls(resolve(tty_path, vendor_id, product_id), polarity=polarity)
        relay.connect()
        return relay

    @classmethod
    def from_stream(
        cls,
        stream: ByteStream,
        polarity: Polarity = Polarity.NORMALLY_OPEN,
        port: str = "stub",
    ) -> TTYRelay:
        """Return a relay that writes to an already open *stream*."""
        relay = cls.__new__(cls)
        relay._attach(SerialTransport.from_stream(stream, port), polarity)
        return relay

    def _attach(self, transport: SerialTransport, polarity: Polarity) -> None:
        self._tx = transport
        self._proto = RelayProtocol(transport, polarity)

    # -- Context manager ----------------------------------------------------

    def __enter__(self) -> TTYRelay:
        if not self.is_connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    # -- Connection ---------------------------------------------------------

    @property
    def port(self) -> str:
        return self._tx.port

    @property
    def polarity(self) -> Polarity:
        return self._proto.polarity

    def connect(self) -> None:
        """Open the serial connection."""
        self._tx.open()
        logger.debug("Serial port was opened")

    def disconnect(self) -> None:
        """Close the serial connection (safe to call multiple times)."""
        self._tx.close()

    @property
    def is_connected(self) -> bool:
        """Return True if the serial port is open."""
        return self._tx.is_open

    # -- Power control ------------------------------------------------------

    def on(self) -> None:
        """Switch power on immediately."""
        logger.debug("on command")
        self._proto.control_mode()
        self._proto.send_connect()

    def off(self) -> None:
        """Switch power off immediately."""
        logger.debug("off command")
        self._proto.control_mode()
        self._proto.send_disconnect()

    def toggle(self) -> None:
        """Flip the current power state."""
        logger.debug("toggle command")
        self._proto.control_mode()
        self._proto.send_timer(0)

    def jog(self) -> None:
        """Quick toggle: pulse power through jog mode."""
        logger.debug("jog command")
        self._proto.jog_mode()
        self._proto.send_connect()

    # -- Timed control ------------------------------------------------------
    # The firmware reads the timer as "invert after N seconds", so switching
    # on later means switching off now, and vice versa.

    def timed_on(self, seconds: int) -> None:
        """Switch power off now and back on after *seconds*."""
        validate_seconds(seconds)
        logger.debug("on after %d seconds", seconds)
        self.off()
        self._proto.send_timer(seconds)

    def timed_off(self, seconds: int) -> None:
        """Switch power on now and off again after *seconds*."""
        validate_seconds(seconds)
        logger.debug("off after %d seconds", seconds)
        self.on()
        self._proto.send_timer(seconds)


# ---------------------------------------------------------------------------
# Convenience factory
# ---------------------------------------------------------------------------


def get_relay(tty_path: str | None = None, polarity: Polarity = Polarity.NORMALLY_OPEN) -> TTYRelay:
    """Return a connected relay (use as a context manager).

    Example::

        with get_relay() as relay:
            relay.timed_on(30)
    """
    return TTYRelay.open(tty_path, polarity=polarity)
