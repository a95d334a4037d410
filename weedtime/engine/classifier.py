"""
weedtime.engine.classifier — Message Classification
====================================================

Pure functions.  No Discord I/O, no DB I/O.

A message is *in window* when its community-local time reads 4:20
(AM or PM), and it carries the *marker* when its case-folded text
contains "weed time".  Rules, checked in order:

1. not in window + marker   → ``WEED_CRIME``
2. not in window, no marker → ``IGNORED``
3. in window                → ``WEED_TIME`` (the chain tracker decides the event)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone

from weedtime.engine.events import MessageClass

DEFAULT_MARKER = "weed time"


@dataclass(frozen=True, slots=True)
class TriggerWindow:
    """The recurring time of day that counts as weed time.

    ``hour`` is on a 12-hour clock, so 4 matches both 04:xx and 16:xx.
    """

    hour: int = 4
    minute: int = 20

    def __post_init__(self) -> None:
        if not 0 <= self.hour < 12:
            raise ValueError(f"trigger hour must be in [0, 12), got {self.hour}")
        if not 0 <= self.minute < 60:
            raise ValueError(f"trigger minute must be in [0, 60), got {self.minute}")


DEFAULT_WINDOW = TriggerWindow()


def to_local(timestamp: datetime, utc_offset_seconds: int) -> datetime:
    """Convert *timestamp* to community-local time.

    Naive timestamps are taken to be UTC, as Discord reports them.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(timezone(timedelta(seconds=utc_offset_seconds)))


def is_weed_time(
    timestamp: datetime,
    utc_offset_seconds: int = 0,
    window: TriggerWindow = DEFAULT_WINDOW,
) -> bool:
    """True when the local hour (mod 12) and minute match *window*."""
    local = to_local(timestamp, utc_offset_seconds)
    return local.hour % 12 == window.hour and local.minute == window.minute


def has_marker(text: str, marker: str = DEFAULT_MARKER) -> bool:
    """Case-insensitive substring check for the trigger phrase."""
    return marker.casefold() in text.casefold()


def same_occurrence(a: datetime, b: datetime, utc_offset_seconds: int = 0) -> bool:
    """True when *a* and *b* fall in the same local date and hour."""
    la = to_local(a, utc_offset_seconds)
    lb = to_local(b, utc_offset_seconds)
    return la.date() == lb.date() and la.hour == lb.hour


def classify_message(
    timestamp: datetime,
    utc_offset_seconds: int,
    text: str,
    is_from_self: bool,
    *,
    window: TriggerWindow = DEFAULT_WINDOW,
    marker: str = DEFAULT_MARKER,
) -> MessageClass:
    """Classify a single inbound message."""
    if is_from_self:
        return MessageClass.IGNORED

    if is_weed_time(timestamp, utc_offset_seconds, window):
        return MessageClass.WEED_TIME
    if has_marker(text, marker):
        return MessageClass.WEED_CRIME
    return MessageClass.IGNORED
