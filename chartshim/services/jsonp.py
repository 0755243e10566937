"""JSONP wrapping for the legacy chart widget."""
from __future__ import annotations

import json
import re
from typing import Any, Optional

DEFAULT_CALLBACK = "callback"

# Dotted JavaScript identifiers such as ``cb`` or ``jQuery123.handle``.
_CALLBACK_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z_$][A-Za-z0-9_$]*)*$")


def is_callback_name(name: str) -> bool:
    return bool(name) and len(name) <= 128 and _CALLBACK_PATTERN.match(name) is not None


def resolve_callback(name: Optional[str], default: str = DEFAULT_CALLBACK) -> str:
    """Return ``name`` if it is a safe callback identifier, else ``default``."""

    candidate = (name or "").strip()
    if is_callback_name(candidate):
        return candidate
    return default


def wrap_jsonp(payload: Any, callback: Optional[str] = None) -> str:
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return f"{resolve_callback(callback)}({body})"
