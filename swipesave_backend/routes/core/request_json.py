"""
Size-limited JSON body reader for the workflow and queue handlers.

ComfyUI workflow exports run to several megabytes, so the ceiling comes from
`AppConfig.max_json_bytes`; anything larger, malformed or not an object comes
back as a `Result.Err` instead of an exception.
"""
from __future__ import annotations

import json
from typing import Optional

from aiohttp import web

from ...config import DEFAULT_MAX_JSON_BYTES
from ...shared import ErrorCode, Result

MIN_JSON_BYTES = 1024
_CHUNK = 64 * 1024


def _too_large(limit: int, size: int, exact: bool = True) -> Result:
    shown = f"{size} > {limit}" if exact else f"> {limit}"
    return Result.Err(ErrorCode.INVALID_INPUT, f"JSON body too large ({shown})", limit=limit, size=size)


def _declared_size_error(request: web.Request, limit: int) -> Optional[Result[dict]]:
    """Reject early on an oversized Content-Length; unparseable headers are ignored."""
    try:
        declared = int(request.headers.get("Content-Length") or 0)
    except ValueError:
        return None
    return _too_large(limit, declared) if declared > limit else None


async def _read_limited(request: web.Request, limit: int) -> Result[bytes]:
    received = bytearray()
    try:
        async for chunk in request.content.iter_chunked(_CHUNK):
            received += chunk
            if len(received) > limit:
                return _too_large(limit, len(received), exact=False)
    except (OSError, RuntimeError) as exc:
        return Result.Err(ErrorCode.INVALID_JSON, f"Failed to read request body: {exc}")
    return Result.Ok(bytes(received))


def _parse_object(raw: bytes) -> Result[dict]:
    """Empty bodies read as `{}`; arrays and scalars are rejected."""
    if not raw:
        return Result.Ok({})
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        return Result.Err(ErrorCode.INVALID_JSON, f"Invalid UTF-8 JSON body: {exc}")
    except ValueError as exc:
        return Result.Err(ErrorCode.INVALID_JSON, f"Invalid JSON body: {exc}")
    if not isinstance(parsed, dict):
        return Result.Err(ErrorCode.INVALID_JSON, "JSON body must be an object")
    return Result.Ok(parsed)


async def _read_json(request: web.Request, *, max_bytes: Optional[int] = None) -> Result[dict]:
    limit = max(MIN_JSON_BYTES, DEFAULT_MAX_JSON_BYTES if max_bytes is None else int(max_bytes))
    rejected = _declared_size_error(request, limit)
    if rejected is not None:
        return rejected
    body = await _read_limited(request, limit)
    if not body.ok:
        return Result.Err(body.code, body.error or "Invalid request body", **body.meta)
    return _parse_object(body.data or b"")
