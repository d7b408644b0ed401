"""
src/ssforecast/common/utils.py

Small helpers for reading loosely typed config values.
"""

from __future__ import annotations

from typing import Any


def safe_int(value: Any, default: int) -> int:
    """Best-effort int conversion with fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def safe_float(value: Any, default: float) -> float:
    """Best-effort float conversion with fallback."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def get_option(section: Any, key: str, default: Any = None) -> Any:
    """Support both dict-style and attribute-style config sections."""
    if section is None:
        return default
    if isinstance(section, dict):
        v = section.get(key, default)
    else:
        v = getattr(section, key, default)
    return default if v is None else v
