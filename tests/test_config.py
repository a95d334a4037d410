"""
tests/test_config.py — Config Loader Tests
===========================================
"""

from __future__ import annotations

import pytest

from weedtime.config import WeedTimeConfig, load_config
from weedtime.constants import KEYCAP_DIGITS


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="config.yaml.example"):
        load_config(tmp_path / "nope.yaml")


def test_empty_file_uses_defaults(tmp_path):
    assert load_config(_write(tmp_path, "")) == WeedTimeConfig()


def test_overrides(tmp_path):
    cfg = load_config(_write(tmp_path, (
        'bot_prefix: "!"\n'
        "trigger_hour: 7\n"
        "trigger_minute: 10\n"
        'marker_phrase: "blaze it"\n'
        "enforce_unique_participants: false\n"
        "first_continuation_is_new_chain: true\n"
        'weed_image_path: "img/a.png"\n'
    )))

    assert cfg.bot_prefix == "!"
    assert (cfg.trigger_hour, cfg.trigger_minute) == (7, 10)
    assert cfg.marker_phrase == "blaze it"
    assert cfg.enforce_unique_participants is False
    assert cfg.first_continuation_is_new_chain is True
    assert cfg.weed_image_path == "img/a.png"
    assert cfg.crime_image_path == "assets/420_jail.jpg"
    assert cfg.combo_digits == KEYCAP_DIGITS


def test_custom_combo_digits(tmp_path):
    lines = "".join(f'  - "<:c{d}:{d}>"\n' for d in range(10))
    cfg = load_config(_write(tmp_path, "combo_digits:\n" + lines))
    assert cfg.combo_digits[4] == "<:c4:4>"


@pytest.mark.parametrize(
    "text",
    [
        "trigger_hour: 12\n",
        "trigger_hour: -1\n",
        "trigger_minute: 60\n",
        'combo_digits: ["0", "1", "2"]\n',
        'enforce_unique_participants: "false"\n',
        "first_continuation_is_new_chain: 1\n",
    ],
)
def test_malformed_values_rejected(tmp_path, text):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, text))
