"""
weedtime.constants — Shared Constants & Helpers
================================================

Presentation constants and the combo renderer.  Import from here instead
of duplicating in cogs and services.
"""

from __future__ import annotations

from collections.abc import Sequence

# ---------------------------------------------------------------------------
# Combo digits: keycap emoji 0️⃣ … 9️⃣ (override in config.yaml with custom
# server emoji such as "<:combo4:1083097659360944168>")
# ---------------------------------------------------------------------------
KEYCAP_DIGITS: tuple[str, ...] = tuple(f"{d}\ufe0f\u20e3" for d in "0123456789")

COMBO_PREFIX = "4\ufe0f\u20e32\ufe0f\u20e30\ufe0f\u20e3 \u2716\ufe0f "  # 4️⃣2️⃣0️⃣ ✖️

STATS_COLOR = 0x25FE03

CRIME_MESSAGE = "WEED CRIME!"


# ---------------------------------------------------------------------------
# Combo rendering
# ---------------------------------------------------------------------------
def combo_to_emojis(combo: int, digits: Sequence[str] = KEYCAP_DIGITS) -> str:
    """Render *combo* one emoji per decimal digit, most significant first.

    >>> combo_to_emojis(12, "0123456789")
    '12'
    """
    if combo < 0:
        raise ValueError(f"combo must be non-negative, got {combo}")
    if len(digits) != 10:
        raise ValueError("digits must hold exactly ten entries")
    return "".join(digits[int(ch)] for ch in str(combo))


def format_combo(
    combo: int,
    prefix: str = COMBO_PREFIX,
    digits: Sequence[str] = KEYCAP_DIGITS,
) -> str:
    """Message text for a chain of length *combo*."""
    return f"{prefix}{combo_to_emojis(combo, digits)}"
