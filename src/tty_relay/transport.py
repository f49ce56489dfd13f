"""
Serial transport layer for the TTY power relay.

Owns the byte stream to the device and writes fixed-length command frames,
pausing after each one so the relay firmware can settle.  Knows nothing
about what the frames mean; that's :mod:`protocol`'s job.

The relay never answers, so nothing is ever read back.

Typical usage (via :class:`~tty_relay.controller.TTYRelay`)::

    transport = SerialTransport("/dev/ttyUSB0")
    transport.open()
    transport.write_frame(bytes([0xF0, 0xA0, 0x0C, 0x54]))
    transport.close()
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

import serial

from .constants import DEFAULT_BAUD, DEFAULT_TIMEOUT, FRAME_DELAY, FRAME_LENGTH
from .exceptions import OpenFailedError, WriteFailedError

logger = logging.getLogger(__name__)


class ByteStream(Protocol):
    """The subset of a duplex stream the transport relies on.

    ``serial.Serial`` satisfies it, and so does :class:`io.BytesIO`.
    """

    def write(self, data: bytes) -> int | None: ...

    def close(self) -> None: ...


def format_frame(frame: bytes) -> str:
    """Render *frame* as upper-case hex pairs, e.g. ``F0 A0 0C 54``."""
    return " ".join(f"{b:02X}" for b in frame)


class SerialTransport:
    """Manages the byte stream to a relay board.

    Args:
        port: Serial port path (e.g. ``/dev/ttyUSB0``).
        baudrate: Baud rate (default 9600).
        timeout: Per-operation timeout in seconds passed to pyserial.
        pacing: Seconds to sleep after every frame.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUD,
        timeout: float = DEFAULT_TIMEOUT,
        pacing: float = FRAME_DELAY,
    ) -> None:
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.pacing = pacing
        self._stream: ByteStream | None = None

    @classmethod
    def from_stream(cls, stream: ByteStream, port: str = "stub", **kwargs) -> SerialTransport:
        """Wrap an already open *stream* (loopback device, in-memory buffer)."""
        transport = cls(port, **kwargs)
        transport._stream = stream
        return transport

    # -- Lifecycle ----------------------------------------------------------

    def open(self) -> None:
        """Open the serial port.

        Raises:
            OpenFailedError: If the port cannot be opened.
        """
        logger.info("Opening serial port %s at %d baud", self.port, self.baudrate)
        try:
            self._stream = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.timeout,
                write_timeout=self.timeout,
            )
        except (serial.SerialException, OSError) as exc:
            raise OpenFailedError(f"Failed to open tty {self.port}: {exc}") from exc

    def close(self) -> None:
        """Close the stream (safe to call multiple times)."""
        if self._stream is not None:
            self._stream.close()
            self._stream = None
            logger.info("Serial port %s closed", self.port)

    @property
    def is_open(self) -> bool:
        """Return ``True`` if the stream is currently open."""
        return self._stream is not None

    # -- I/O ----------------------------------------------------------------

    def write_frame(self, frame: bytes) -> None:
        """Write one command *frame*, then wait :attr:`pacing` seconds.

        The delay is applied after every frame, including the last one of a
        multi-frame operation.

        Raises:
            ValueError: If *frame* is not exactly four bytes.
            WriteFailedError: If the stream is closed, the write fails, or
                fewer than four bytes were accepted.
        """
        frame = bytes(frame)
        if len(frame) != FRAME_LENGTH:
            raise ValueError(f"Frame must be {FRAME_LENGTH} bytes, got {len(frame)}")

        stream = self._require_open()
        logger.debug("%s: write %s", self.port, format_frame(frame))

        try:
            written = stream.write(frame)
        except (serial.SerialException, OSError, ValueError) as exc:
            raise WriteFailedError(f"Write to {self.port} failed: {exc}") from exc

        # some file-like objects return None instead of a count
        if written is not None and written != len(frame):
            raise WriteFailedError(
                f"Short write to {self.port}: {written} of {len(frame)} bytes"
            )

        time.sleep(self.pacing)

    # -- Internal -----------------------------------------------------------

    def _require_open(self) -> ByteStream:
        """Return the open stream or raise."""
        if self._stream is None:
            raise WriteFailedError(f"Serial port {self.port} not open; call open() first.")
        return self._stream
