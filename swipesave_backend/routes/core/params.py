"""
Request parameter parsing shared by the queue and health handlers.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from ...config import AppConfig
from ...shared import ControlMode, ErrorCode, Result, SeedMode
from ...utils import parse_bool, parse_int


def _parse_comfy_url(raw: Any) -> Result[str | None]:
    """Optional per-request ComfyUI base URL; only http(s) URLs are accepted."""
    if raw is None or str(raw).strip() == "":
        return Result.Ok(None)
    value = str(raw).strip().rstrip("/")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return Result.Err(ErrorCode.INVALID_INPUT, "comfyUrl must be an http(s) URL")
    return Result.Ok(value)


def _parse_seed_mode(body: dict, config: AppConfig) -> Result[SeedMode]:
    if body.get("seedMode") not in (None, ""):
        try:
            return Result.Ok(SeedMode.parse(body.get("seedMode"), strict=True))
        except ValueError as exc:
            return Result.Err(ErrorCode.INVALID_INPUT, str(exc))
    if "modifySeeds" in body:
        # Legacy boolean flag from older clients.
        return Result.Ok(SeedMode.RANDOMIZE if parse_bool(body.get("modifySeeds")) else SeedMode.ORIGINAL)
    return Result.Ok(SeedMode.parse(config.default_seed_mode))


def _parse_control_mode(raw: Any) -> Result[ControlMode | None]:
    if raw in (None, "", False):
        return Result.Ok(None)
    try:
        return Result.Ok(ControlMode(str(raw).strip().lower()))
    except ValueError:
        allowed = ", ".join(m.value for m in ControlMode)
        return Result.Err(ErrorCode.INVALID_INPUT, f"controlAfterGenerate must be one of: {allowed}")


def _parse_submission_options(body: dict, config: AppConfig) -> Result[dict]:
    """
    Normalize `{seedMode|modifySeeds, controlAfterGenerate, quantity, baseSeed, comfyUrl}`.
    """
    seed_mode = _parse_seed_mode(body, config)
    if not seed_mode.ok:
        return seed_mode
    control = _parse_control_mode(body.get("controlAfterGenerate"))
    if not control.ok:
        return control
    comfy_url = _parse_comfy_url(body.get("comfyUrl"))
    if not comfy_url.ok:
        return comfy_url

    raw_quantity = body.get("quantity")
    quantity = 1 if raw_quantity in (None, "") else parse_int(raw_quantity)
    if quantity is None or quantity < 1 or quantity > config.max_quantity:
        return Result.Err(ErrorCode.INVALID_INPUT, f"quantity must be between 1 and {config.max_quantity}")

    base_seed = None
    if body.get("baseSeed") not in (None, ""):
        base_seed = parse_int(body.get("baseSeed"))
        if base_seed is None or base_seed < 0:
            return Result.Err(ErrorCode.INVALID_INPUT, "baseSeed must be a non-negative integer")

    return Result.Ok(
        {
            "seed_mode": seed_mode.data,
            "control_mode": control.data,
            "quantity": quantity,
            "base_seed": base_seed,
            "comfy_url": comfy_url.data,
        }
    )
