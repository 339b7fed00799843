"""Generic helper utilities used across the project."""
from __future__ import annotations

import os
from typing import Optional


def resolve_path(value: str, base_dir: str) -> str:
    """Resolve a path relative to base_dir when value is not absolute."""
    if not os.path.isabs(value):
        return os.path.join(base_dir, value)
    return value


def parse_int_env(
    name: str,
    default: int,
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    """Parse an integer environment variable with optional bounds."""
    try:
        value = int(os.getenv(name, str(default)))
    except ValueError:
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def split_path_list(value: str) -> list[str]:
    """Split a comma or os.pathsep separated list, dropping blanks."""
    normalized = value.replace(os.pathsep, ",")
    return [item.strip() for item in normalized.split(",") if item.strip()]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
