"""
Relay configuration loaded from a YAML file.

Lets a machine that always drives the same board pin its device path,
polarity or USB identity once instead of repeating CLI flags::

    tty: /dev/ttyUSB0
    polarity: nc
    vendor_id: 0x1a86
    product_id: 0x7523

Every key is optional.  YAML 1.1 booleans are not resolved, so a bare
``no`` stays the string ``"no"`` and ``off`` is rejected as a polarity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from .constants import PRODUCT_ID, VENDOR_ID
from .exceptions import ValidationError
from .protocol import Polarity

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {"tty", "polarity", "vendor_id", "product_id"}


class _ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps yes/no/on/off as plain strings."""


_ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

_POLARITY_NAMES = {
    "no": Polarity.NORMALLY_OPEN,
    "normally_open": Polarity.NORMALLY_OPEN,
    "nc": Polarity.NORMALLY_CLOSED,
    "normally_closed": Polarity.NORMALLY_CLOSED,
}


@dataclass(frozen=True)
class RelayConfig:
    """Validated relay settings."""

    tty: str | None = None
    polarity: Polarity = Polarity.NORMALLY_OPEN
    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID


def parse_polarity(name: str) -> Polarity:
    """Map a polarity name (``no``, ``nc`` or their long forms) to :class:`Polarity`."""
    try:
        return _POLARITY_NAMES[name.strip().lower()]
    except (KeyError, AttributeError) as exc:
        raise ValidationError(
            f"polarity must be one of {sorted(_POLARITY_NAMES)}, got {name!r}"
        ) from exc


def load_config(path: str | Path) -> RelayConfig:
    """Load and validate a relay configuration from a YAML file.

    Args:
        path: Path to the YAML config file.

    Returns:
        A validated :class:`RelayConfig`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValidationError: If the config is malformed or contains invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.load(f, Loader=_ConfigLoader)
    except yaml.YAMLError as exc:
        raise ValidationError(f"Cannot parse {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Cannot read {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    unknown = set(raw) - _KNOWN_KEYS
    if unknown:
        raise ValidationError(f"Unknown config keys: {', '.join(sorted(map(str, unknown)))}")

    tty = raw.get("tty")
    if tty is not None and (not isinstance(tty, str) or not tty):
        raise ValidationError("'tty' must be a non-empty string")

    polarity = Polarity.NORMALLY_OPEN
    if "polarity" in raw:
        polarity = parse_polarity(raw["polarity"])

    config = RelayConfig(
        tty=tty,
        polarity=polarity,
        vendor_id=_parse_usb_id(raw, "vendor_id", VENDOR_ID),
        product_id=_parse_usb_id(raw, "product_id", PRODUCT_ID),
    )
    logger.debug("Loaded config from %s: %s", path, config)
    return config


def _parse_usb_id(raw: dict, key: str, default: int) -> int:
    """Return a 16-bit USB id from *raw*, falling back to *default*."""
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"'{key}' must be an integer, got {type(value).__name__}")
    if not (0 <= value <= 0xFFFF):
        raise ValidationError(f"'{key}' must be 0-65535, got {value}")
    return value
