"""Shared pytest fixtures for TTY relay tests."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import serial

from tty_relay import Polarity, TTYRelay
from tty_relay.protocol import RelayProtocol
from tty_relay.transport import SerialTransport


class FakeSerial:
    """Lightweight stand-in for ``serial.Serial``.

    Implements the subset of the pyserial API used by
    :class:`~tty_relay.transport.SerialTransport`: ``write``, ``read``,
    ``close`` and ``is_open``.

    Every write is recorded in :attr:`written`.  Set :attr:`fail_at` to make
    the N-th write (0-based) raise, or :attr:`short_write` to make writes
    report one byte fewer than they were given.
    """

    def __init__(self) -> None:
        self.is_open: bool = True
        self.written: list[bytes] = []
        self.fail_at: int | None = None
        self.short_write: bool = False

    @property
    def data(self) -> bytes:
        """Everything written so far, concatenated."""
        return b"".join(self.written)

    # -- pyserial interface -------------------------------------------------

    def write(self, data: bytes) -> int:
        if self.fail_at is not None and len(self.written) >= self.fail_at:
            raise serial.SerialException("write failed: [Errno 5] Input/output error")
        self.written.append(bytes(data))
        return len(data) - 1 if self.short_write else len(data)

    def read(self, size: int = 1) -> bytes:
        return b""

    def close(self) -> None:
        self.is_open = False


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_serial() -> FakeSerial:
    """Return a fresh ``FakeSerial`` instance."""
    return FakeSerial()


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace the pacing sleep with a recorder and return the recorded delays."""
    calls: list[float] = []
    monkeypatch.setattr("tty_relay.transport.time.sleep", calls.append)
    return calls


@pytest.fixture()
def transport(fake_serial: FakeSerial, sleeps: list[float]) -> SerialTransport:
    """Return a ``SerialTransport`` wired to a fake serial port."""
    with patch("tty_relay.transport.serial.Serial", return_value=fake_serial):
        tx = SerialTransport("/dev/fake")
        tx.open()
        return tx


@pytest.fixture()
def protocol(transport: SerialTransport) -> RelayProtocol:
    """Return a ``RelayProtocol`` wired to a fake transport."""
    return RelayProtocol(transport)


@pytest.fixture()
def relay(fake_serial: FakeSerial, sleeps: list[float]) -> TTYRelay:
    """Return a connected normally-open ``TTYRelay`` on a fake serial port."""
    with patch("tty_relay.transport.serial.Serial", return_value=fake_serial):
        r = TTYRelay("/dev/fake")
        r.connect()
        return r


@pytest.fixture()
def nc_relay(fake_serial: FakeSerial, sleeps: list[float]) -> TTYRelay:
    """Return a connected normally-closed ``TTYRelay`` on a fake serial port."""
    with patch("tty_relay.transport.serial.Serial", return_value=fake_serial):
        r = TTYRelay("/dev/fake", polarity=Polarity.NORMALLY_CLOSED)
        r.connect()
        return r
