"""Time helper utilities."""
from __future__ import annotations

import time
from typing import Callable

import pandas as pd

Clock = Callable[[], float]


def now_ms(clock: Clock = time.time) -> int:
    return int(clock() * 1000)


def check_timezone(tz: str) -> str:
    """Return ``tz`` if pandas can localize to it, else raise ValueError."""

    try:
        pd.Timestamp(0).tz_localize(tz)
    except (KeyError, TypeError, ValueError) as exc:
        # zoneinfo and pytz report unknown zones as KeyError subclasses
        raise ValueError(f"Unknown time zone: {tz!r}") from exc
    return tz


def to_epoch_ms(value: str, tz: str = "UTC") -> int:
    """Parse a naive provider timestamp string in ``tz`` into epoch millis."""

    stamp = pd.Timestamp(value)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize(tz, ambiguous="NaT", nonexistent="NaT")
    if pd.isna(stamp):
        raise ValueError(f"Unresolvable local timestamp: {value} ({tz})")
    return int(stamp.tz_convert("UTC").value // 1_000_000)
