"""
Configuration for the Swipe Save backend.

Everything is environment driven; `AppConfig.from_env()` snapshots the current
environment so tests can build isolated configs without touching module state.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, TypeVar

from .utils import env_bool

logger = logging.getLogger(__name__)

DEFAULT_COMFYUI_URL = "http://127.0.0.1:8188"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8081
DEFAULT_COMFY_TIMEOUT_S = 30.0
DEFAULT_HEALTH_TTL_S = 30.0
DEFAULT_OBJECT_INFO_TTL_S = 300.0
DEFAULT_MAX_QUANTITY = 50
DEFAULT_MAX_JSON_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_SEED_MODE = "randomize"

N = TypeVar("N", int, float)


def _first_env(*names: str) -> tuple[str, str] | None:
    """First non-blank `(name, value)` among `names`, checked in order."""
    for name in names:
        value = (os.environ.get(name) or "").strip()
        if value:
            return name, value
    return None


def _env_number(
    cast: Callable[[str], N],
    default: N,
    *names: str,
    lo: N | None = None,
    hi: N | None = None,
) -> N:
    found = _first_env(*names)
    if found is None:
        return default
    name, text = found
    try:
        value = cast(text)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a %s); keeping %s", name, text, cast.__name__, default)
        return default
    bounded = value
    if lo is not None and bounded < lo:
        bounded = lo
    if hi is not None and bounded > hi:
        bounded = hi
    if bounded != value:
        logger.warning("%s=%s is outside [%s, %s]; using %s", name, value, lo, hi, bounded)
    return bounded


def _normalize_base_url(value: str) -> str:
    url = str(value or "").strip().rstrip("/")
    if not url:
        return DEFAULT_COMFYUI_URL
    return url if "://" in url else f"http://{url}"


def _resolve_output_dir(raw: str | None) -> Path:
    if raw:
        try:
            return Path(raw).expanduser().resolve()
        except (OSError, RuntimeError):
            logger.warning("Cannot resolve output directory %r; falling back to ./output", raw)
    return (Path.cwd() / "output").resolve()


@dataclass(frozen=True)
class AppConfig:
    comfyui_url: str = DEFAULT_COMFYUI_URL
    output_dir: Path = Path("output")
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    comfy_timeout_s: float = DEFAULT_COMFY_TIMEOUT_S
    health_ttl_s: float = DEFAULT_HEALTH_TTL_S
    object_info_ttl_s: float = DEFAULT_OBJECT_INFO_TTL_S
    max_quantity: int = DEFAULT_MAX_QUANTITY
    max_json_bytes: int = DEFAULT_MAX_JSON_BYTES
    default_seed_mode: str = DEFAULT_SEED_MODE
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        found = _first_env("SWIPESAVE_DEFAULT_SEED_MODE")
        seed_mode = found[1].lower() if found else DEFAULT_SEED_MODE
        if seed_mode not in ("original", "randomize", "increment"):
            logger.warning("Unknown SWIPESAVE_DEFAULT_SEED_MODE=%r; using %s", seed_mode, DEFAULT_SEED_MODE)
            seed_mode = DEFAULT_SEED_MODE
        url = _first_env("SWIPESAVE_COMFYUI_URL", "COMFYUI_URL")
        out = _first_env("SWIPESAVE_OUTPUT_DIR", "OUTPUT_DIR")
        host = _first_env("SWIPESAVE_HOST")
        return cls(
            comfyui_url=_normalize_base_url(url[1] if url else DEFAULT_COMFYUI_URL),
            output_dir=_resolve_output_dir(out[1] if out else None),
            host=host[1] if host else DEFAULT_HOST,
            port=_env_number(int, DEFAULT_PORT, "SWIPESAVE_PORT", "PORT", lo=1, hi=65535),
            comfy_timeout_s=_env_number(float, DEFAULT_COMFY_TIMEOUT_S, "SWIPESAVE_COMFY_TIMEOUT_S", lo=1.0, hi=600.0),
            health_ttl_s=_env_number(float, DEFAULT_HEALTH_TTL_S, "SWIPESAVE_HEALTH_TTL_S", lo=0.0, hi=3600.0),
            object_info_ttl_s=_env_number(float, DEFAULT_OBJECT_INFO_TTL_S, "SWIPESAVE_OBJECT_INFO_TTL_S", lo=1.0, hi=86400.0),
            max_quantity=_env_number(int, DEFAULT_MAX_QUANTITY, "SWIPESAVE_MAX_QUANTITY", lo=1, hi=1000),
            max_json_bytes=_env_number(int, DEFAULT_MAX_JSON_BYTES, "SWIPESAVE_MAX_JSON_SIZE", lo=1024),
            default_seed_mode=seed_mode,
            debug=env_bool("SWIPESAVE_DEBUG", False),
        )

    def with_overrides(self, **changes: object) -> "AppConfig":
        """Return a copy with non-None overrides applied (CLI flags)."""
        clean = {k: v for k, v in changes.items() if v is not None}
        if "comfyui_url" in clean:
            clean["comfyui_url"] = _normalize_base_url(str(clean["comfyui_url"]))
        if "output_dir" in clean:
            clean["output_dir"] = _resolve_output_dir(str(clean["output_dir"]))
        return replace(self, **clean)  # type: ignore[arg-type]
