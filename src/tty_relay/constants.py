"""Shared runtime constants for the TTY power relay.

This is the canonical source of truth for the device identity, serial
settings and frame bytes.  Other modules should import from here rather
than defining their own copies.
"""

# ---------------------------------------------------------------------------
# Device identity (CH340 USB-serial bridge on the relay board)
# ---------------------------------------------------------------------------

VENDOR_ID = 0x1A86
PRODUCT_ID = 0x7523

# ---------------------------------------------------------------------------
# Serial / runtime defaults
# ---------------------------------------------------------------------------

DEFAULT_BAUD = 9600
DEFAULT_TIMEOUT = 0.01  # seconds; responses are never read
FRAME_DELAY = 0.05  # seconds of settling time required after every frame

# ---------------------------------------------------------------------------
# Wire protocol
# ---------------------------------------------------------------------------

FRAME_LENGTH = 4
PREAMBLE = 0xF0
MODE_SELECT = 0xA0
MODE_ARG = 0x0C

OP_ACTION = 0x53
OP_CONTROL_MODE = 0x54
OP_JOG_MODE = 0x55
OP_TIMER = 0x57

MAX_TIMER_SECONDS = 0xFFFF
