"""
Tests for relay configuration loading.

Covers:
* Valid YAML (full, minimal, empty)
* Polarity names, including YAML's bare ``no``
* Malformed, unreadable or undecodable files and bad values
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from tty_relay import PRODUCT_ID, VENDOR_ID, Polarity, ValidationError
from tty_relay.config import RelayConfig, load_config, parse_polarity

# ══════════════════════════════════════════════════════════════════════════
#  Fixtures
# ══════════════════════════════════════════════════════════════════════════


def write_config(path: Path, content: str) -> Path:
    """Write a YAML config file and return its path."""
    config_file = path / "relay.yaml"
    config_file.write_text(textwrap.dedent(content))
    return config_file


FULL_CONFIG = """\
    tty: /dev/ttyUSB1
    polarity: nc
    vendor_id: 0x1a86
    product_id: 29987
"""


# ══════════════════════════════════════════════════════════════════════════
#  Config loading: valid configs
# ══════════════════════════════════════════════════════════════════════════


class TestLoadConfigValid:
    def test_full(self, tmp_path):
        config = load_config(write_config(tmp_path, FULL_CONFIG))
        assert config == RelayConfig(
            tty="/dev/ttyUSB1",
            polarity=Polarity.NORMALLY_CLOSED,
            vendor_id=0x1A86,
            product_id=0x7523,
        )

    def test_accepts_str_path(self, tmp_path):
        config = load_config(str(write_config(tmp_path, FULL_CONFIG)))
        assert config.tty == "/dev/ttyUSB1"

    def test_empty_file_gives_defaults(self, tmp_path):
        config = load_config(write_config(tmp_path, ""))
        assert config == RelayConfig()
        assert config.tty is None
        assert config.polarity is Polarity.NORMALLY_OPEN
        assert (config.vendor_id, config.product_id) == (VENDOR_ID, PRODUCT_ID)

    def test_polarity_only(self, tmp_path):
        config = load_config(write_config(tmp_path, "polarity: normally_closed\n"))
        assert config.polarity is Polarity.NORMALLY_CLOSED
        assert config.tty is None

    def test_bare_no_is_normally_open(self, tmp_path):
        config = load_config(write_config(tmp_path, "polarity: no\n"))
        assert config.polarity is Polarity.NORMALLY_OPEN

    def test_quoted_no(self, tmp_path):
        config = load_config(write_config(tmp_path, 'polarity: "no"\n'))
        assert config.polarity is Polarity.NORMALLY_OPEN


# ══════════════════════════════════════════════════════════════════════════
#  Config loading: invalid configs
# ══════════════════════════════════════════════════════════════════════════


class TestLoadConfigInvalid:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ValidationError, match="mapping"):
            load_config(write_config(tmp_path, "- /dev/ttyUSB0\n"))

    def test_unparseable_yaml(self, tmp_path):
        with pytest.raises(ValidationError, match="Cannot parse"):
            load_config(write_config(tmp_path, "tty: [unclosed\n"))

    def test_unknown_key(self, tmp_path):
        with pytest.raises(ValidationError, match="Unknown config keys: baud"):
            load_config(write_config(tmp_path, "baud: 115200\n"))

    def test_empty_tty(self, tmp_path):
        with pytest.raises(ValidationError, match="tty"):
            load_config(write_config(tmp_path, 'tty: ""\n'))

    def test_non_string_tty(self, tmp_path):
        with pytest.raises(ValidationError, match="tty"):
            load_config(write_config(tmp_path, "tty: 3\n"))

    def test_bad_polarity(self, tmp_path):
        with pytest.raises(ValidationError, match="polarity"):
            load_config(write_config(tmp_path, "polarity: sideways\n"))

    def test_boolean_true_polarity(self, tmp_path):
        with pytest.raises(ValidationError, match="polarity"):
            load_config(write_config(tmp_path, "polarity: yes\n"))

    @pytest.mark.parametrize("value", ["off", "OFF", "false", "False", "on"])
    def test_yaml_boolean_words_are_not_polarities(self, tmp_path, value):
        with pytest.raises(ValidationError, match="polarity"):
            load_config(write_config(tmp_path, f"polarity: {value}\n"))

    def test_directory_path(self, tmp_path):
        with pytest.raises(ValidationError, match="Cannot read"):
            load_config(tmp_path)

    def test_invalid_utf8(self, tmp_path):
        config_file = tmp_path / "relay.yaml"
        config_file.write_bytes(b"polarity: \xff\xfe\n")
        with pytest.raises(ValidationError, match="Cannot read"):
            load_config(config_file)

    @pytest.mark.parametrize("value", ["-1", "65536", "'0x1a86'", "true"])
    def test_bad_vendor_id(self, tmp_path, value):
        with pytest.raises(ValidationError, match="vendor_id"):
            load_config(write_config(tmp_path, f"vendor_id: {value}\n"))

    def test_bad_product_id(self, tmp_path):
        with pytest.raises(ValidationError, match="product_id"):
            load_config(write_config(tmp_path, "product_id: 70000\n"))


class TestParsePolarity:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("no", Polarity.NORMALLY_OPEN),
            ("NO", Polarity.NORMALLY_OPEN),
            ("normally_open", Polarity.NORMALLY_OPEN),
            ("nc", Polarity.NORMALLY_CLOSED),
            (" normally_closed ", Polarity.NORMALLY_CLOSED),
        ],
    )
    def test_names(self, name, expected):
        assert parse_polarity(name) is expected

    def test_unknown(self):
        with pytest.raises(ValidationError):
            parse_polarity("open")
