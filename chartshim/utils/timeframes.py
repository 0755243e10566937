"""Utilities for working with legacy period codes."""
from __future__ import annotations

from typing import Tuple

# Minute based period codes understood by the legacy chart widget.
SUPPORTED_PERIODS: Tuple[str, ...] = ("1", "5", "15", "30", "60", "240", "1440")
DEFAULT_PERIOD = "60"


def normalize_period(period: object) -> str:
    """Return a supported period code, defaulting to one hour.

    Accepts ints, numeric strings (``"60"``, ``" 15 "``, ``"240.0"``) and
    ``None``. Anything that is not one of :data:`SUPPORTED_PERIODS` maps to
    :data:`DEFAULT_PERIOD`; the function never raises.
    """

    if period is None or isinstance(period, bool):
        return DEFAULT_PERIOD
    raw = str(period).strip()
    if not raw:
        return DEFAULT_PERIOD
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_PERIOD
    if not value.is_integer():
        return DEFAULT_PERIOD
    code = str(int(value))
    if code in SUPPORTED_PERIODS:
        return code
    return DEFAULT_PERIOD
