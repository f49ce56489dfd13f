"""
Exception hierarchy for the TTY power relay.

All exceptions inherit from :class:`RelayError` so callers can catch
broadly (``except RelayError``) or narrowly (``except OpenFailedError``).
"""


class RelayError(Exception):
    """Base exception for all relay errors."""


class DeviceNotFoundError(RelayError):
    """Raised when no explicit path was given and no matching USB device exists."""


class OpenFailedError(RelayError):
    """Raised when the serial device exists but cannot be opened."""


class WriteFailedError(RelayError):
    """Raised on an I/O error or short write while sending a frame."""


class ValidationError(RelayError):
    """Raised when an argument or config value fails pre-send validation."""
