"""
weedtime.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for the bot's soft settings: the trigger window,
the marker phrase, chain policy, and the image/emoji assets.  Secrets
(``DISCORD_TOKEN``, ``DATABASE_URL``, ``DEV_GUILD_ID``) live in ``.env``.

Usage::

    from weedtime.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.trigger_hour)      # 4
    print(cfg.marker_phrase)     # "weed time"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from weedtime.constants import COMBO_PREFIX, CRIME_MESSAGE, KEYCAP_DIGITS


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class WeedTimeConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Discord
    bot_prefix: str = "~"

    # Trigger
    trigger_hour: int = 4      # 12-hour clock: 4 → 04:xx and 16:xx
    trigger_minute: int = 20
    marker_phrase: str = "weed time"

    # Chain policy
    enforce_unique_participants: bool = True
    first_continuation_is_new_chain: bool = False

    # Assets
    weed_image_path: str = "assets/420.png"
    crime_image_path: str = "assets/420_jail.jpg"
    crime_message: str = CRIME_MESSAGE
    combo_prefix: str = COMBO_PREFIX
    combo_digits: tuple[str, ...] = KEYCAP_DIGITS


def _flag(raw: dict, key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> WeedTimeConfig:
    """Read *path* and return a :class:`WeedTimeConfig` instance.

    Every key is optional; missing keys keep their defaults.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If a setting has the wrong type or is out of range.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = WeedTimeConfig()

    trigger_hour = int(raw.get("trigger_hour", defaults.trigger_hour))
    trigger_minute = int(raw.get("trigger_minute", defaults.trigger_minute))
    if not 0 <= trigger_hour < 12:
        raise ValueError(f"trigger_hour must be 0–11 (12-hour clock), got {trigger_hour}")
    if not 0 <= trigger_minute < 60:
        raise ValueError(f"trigger_minute must be 0–59, got {trigger_minute}")

    combo_digits = tuple(str(d) for d in raw.get("combo_digits") or defaults.combo_digits)
    if len(combo_digits) != 10:
        raise ValueError(f"combo_digits must list exactly 10 entries, got {len(combo_digits)}")

    return WeedTimeConfig(
        bot_prefix=str(raw.get("bot_prefix", defaults.bot_prefix)),
        trigger_hour=trigger_hour,
        trigger_minute=trigger_minute,
        marker_phrase=str(raw.get("marker_phrase", defaults.marker_phrase)),
        enforce_unique_participants=_flag(
            raw, "enforce_unique_participants", defaults.enforce_unique_participants
        ),
        first_continuation_is_new_chain=_flag(
            raw, "first_continuation_is_new_chain", defaults.first_continuation_is_new_chain
        ),
        weed_image_path=str(raw.get("weed_image_path", defaults.weed_image_path)),
        crime_image_path=str(raw.get("crime_image_path", defaults.crime_image_path)),
        crime_message=str(raw.get("crime_message", defaults.crime_message)),
        combo_prefix=str(raw.get("combo_prefix", defaults.combo_prefix)),
        combo_digits=combo_digits,
    )
