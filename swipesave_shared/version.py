"""Version and release channel reported by `/api/version`."""
from __future__ import annotations

import os
import re
from importlib import metadata
from pathlib import Path
from typing import TypedDict

DIST_NAME = "swipe-save"
_PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"
_VERSION_LINE = re.compile(r'^version\s*=\s*"([^"]+)"', re.MULTILINE)


class VersionInfo(TypedDict):
    version: str
    channel: str


def _checkout_version() -> str:
    try:
        text = _PYPROJECT.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""
    found = _VERSION_LINE.search(text)
    return found.group(1).strip() if found else ""


def _installed_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return ""


def get_version_info() -> VersionInfo:
    # An editable checkout's pyproject.toml beats possibly stale dist metadata.
    return {
        "version": _checkout_version() or _installed_version() or "0.0.0",
        "channel": os.environ.get("SWIPESAVE_CHANNEL", "").strip() or "stable",
    }
