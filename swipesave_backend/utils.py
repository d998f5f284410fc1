"""
Lenient scalar parsing for query strings, JSON bodies and environment variables.
"""
from __future__ import annotations

import os
from typing import Any

_TRUTHY = frozenset({"1", "true", "yes", "on", "enabled"})
_FALSY = frozenset({"0", "false", "no", "off", "disabled", ""})


def parse_bool(value: Any, default: bool = False) -> bool:
    """`"on"`, `"Yes"`, `1` and `True` are true; unrecognized text yields `default`."""
    if isinstance(value, (bool, int, float)):
        return bool(value)
    if not isinstance(value, str):
        return default
    word = value.strip().lower()
    if word in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    return default


def parse_int(value: Any, default: int | None = None) -> int | None:
    # bool is an int subclass; `"quantity": true` must not read as 1.
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    return default if raw is None else parse_bool(raw, default)
