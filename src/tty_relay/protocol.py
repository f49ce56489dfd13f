"""
Relay wire protocol: frame encoding and single-frame commands.

Every command is a fixed four-byte frame::

    F0 <b1> <b2> <opcode>

with opcodes ``0x53`` (connect/disconnect), ``0x54`` (enter control mode),
``0x55`` (enter jog mode) and ``0x57`` (arm timer).

This module sits between the transport (raw byte I/O) and the controller
(user-facing API).  It does **not** own the stream; that belongs to
:class:`~tty_relay.transport.SerialTransport`.
"""

from __future__ import annotations

import sys
from enum import Enum, auto

from .constants import (
    MAX_TIMER_SECONDS,
    MODE_ARG,
    MODE_SELECT,
    OP_ACTION,
    OP_CONTROL_MODE,
    OP_JOG_MODE,
    OP_TIMER,
    PREAMBLE,
)
from .exceptions import ValidationError
from .transport import SerialTransport

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Action(Enum):
    """What the relay contact should do.

    The member values are tags only; :meth:`Polarity.enable_byte` picks the
    wire byte.
    """

    CONNECT = auto()
    DISCONNECT = auto()


class Polarity(Enum):
    """Enable-byte polarity of the relay board.

    Boards are wired either normally open (``no``) or normally closed
    (``nc``); the latter inverts the meaning of the enable byte.
    """

    NORMALLY_OPEN = "no"
    NORMALLY_CLOSED = "nc"

    def enable_byte(self, action: Action) -> int:
        """Return the payload byte that performs *action* on this board."""
        connect = action is Action.CONNECT
        if self is Polarity.NORMALLY_CLOSED:
            connect = not connect
        return 0x01 if connect else 0x00


# ---------------------------------------------------------------------------
# Frame builders
# ---------------------------------------------------------------------------


def control_mode_frame() -> bytes:
    return bytes([PREAMBLE, MODE_SELECT, MODE_ARG, OP_CONTROL_MODE])


def jog_mode_frame() -> bytes:
    return bytes([PREAMBLE, MODE_SELECT, MODE_ARG, OP_JOG_MODE])


def action_frame(action: Action, polarity: Polarity = Polarity.NORMALLY_OPEN) -> bytes:
    return bytes([PREAMBLE, MODE_SELECT, polarity.enable_byte(action), OP_ACTION])


def timer_frame(seconds: int, byteorder: str = sys.byteorder) -> bytes:
    """Build the frame that arms the relay timer for *seconds*.

    The 16-bit value is split in *byteorder* (the host's by default) and
    the two bytes are placed in reverse, so a little-endian host sends the
    high byte first: ``timer_frame(1)`` is ``F0 00 01 57``.

    Raises:
        ValidationError: If *seconds* is not an integer in ``0..65535``.
    """
    validate_seconds(seconds)
    raw = seconds.to_bytes(2, byteorder)
    return bytes([PREAMBLE, raw[1], raw[0], OP_TIMER])


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def validate_seconds(seconds: int) -> None:
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise ValidationError(f"Timer seconds must be an integer, got {seconds!r}")
    if not (0 <= seconds <= MAX_TIMER_SECONDS):
        raise ValidationError(f"Timer seconds must be 0-{MAX_TIMER_SECONDS}, got {seconds}")


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class RelayProtocol:
    """Sends single command frames through a transport.

    Args:
        transport: An open :class:`~tty_relay.transport.SerialTransport`.
        polarity: Enable-byte polarity of the connected board.
    """

    def __init__(
        self,
        transport: SerialTransport,
        polarity: Polarity = Polarity.NORMALLY_OPEN,
    ) -> None:
        self._tx = transport
        self.polarity = polarity

    def control_mode(self) -> None:
        """Switch the board into control mode."""
        self._tx.write_frame(control_mode_frame())

    def jog_mode(self) -> None:
        """Switch the board into jog mode."""
        self._tx.write_frame(jog_mode_frame())

    def send_timer(self, seconds: int) -> None:
        """Arm the timer; ``0`` flips the contact immediately."""
        self._tx.write_frame(timer_frame(seconds))

    def send_action(self, action: Action) -> None:
        self._tx.write_frame(action_frame(action, self.polarity))

    def send_connect(self) -> None:
        self.send_action(Action.CONNECT)

    def send_disconnect(self) -> None:
        self.send_action(Action.DISCONNECT)
