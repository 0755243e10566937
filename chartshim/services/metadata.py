"""Static payloads for the ``common/*`` legacy endpoints."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..config import Instrument


def instruments_payload(instruments: Iterable[Instrument]) -> List[Dict[str, str]]:
    return [{"id": item.id, "name": item.name} for item in instruments]


def timezones_payload(zones: Iterable[str], current: Optional[str], default: str = "UTC") -> Dict[str, object]:
    return {
        "timezones": [{"id": zone, "name": zone} for zone in zones],
        "current": (current or "").strip() or default,
    }


def disclaimer_payload() -> Dict[str, object]:
    return {}
