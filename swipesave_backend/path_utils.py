"""
Keep client-supplied filenames inside the configured output directory.
"""
from __future__ import annotations

from pathlib import Path, PurePosixPath


def safe_rel_path(value: str | None) -> Path | None:
    """
    Parse `value` as a relative path below some root.

    Backslashes are treated as separators. Returns `Path("")` for an empty value
    and None for anything absolute, drive-qualified, containing `..` or a NUL.
    """
    text = "" if value is None else str(value).strip()
    if "\x00" in text:
        return None
    pure = PurePosixPath(text.replace("\\", "/"))
    if pure.is_absolute() or ".." in pure.parts:
        return None
    if pure.parts and pure.parts[0].endswith(":"):
        return None
    return Path(*pure.parts) if pure.parts else Path("")


def is_within_root(candidate: Path, root: Path) -> bool:
    """Both paths must exist; symlinks are followed before comparing."""
    try:
        real_root = root.resolve(strict=True)
        real_candidate = candidate.resolve(strict=True)
    except (OSError, RuntimeError):
        return False
    return real_candidate == real_root or real_root in real_candidate.parents


def resolve_in_root(root: Path, filename: str | None) -> Path | None:
    """`root / filename` when it exists and stays under `root`, else None."""
    rel = safe_rel_path(filename)
    if rel is None or not rel.parts:
        return None
    candidate = root / rel
    return candidate if is_within_root(candidate, root) else None
