"""
Request correlation and timing for the `/api/*` routes.

Every request gets an id (the caller's `X-Request-ID` or a fresh uuid) that is
echoed on the response and stamped on log records via `request_id_var`.
Only failures and slow calls are logged; set `SWIPESAVE_OBS_LOG_ALL=1` to
log everything.
"""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from aiohttp import web

from .shared import get_logger, log_structured, request_id_var
from .utils import env_bool

logger = get_logger(__name__)

API_PREFIX = "/api/"
SLOW_REQUEST_MS = 750.0
# Polled by the UI every few seconds.
_QUIET_PATHS = frozenset({"/api/comfyui/health", "/api/comfyui-queue"})
_INSTALLED = web.AppKey("swipesave_observability_installed", bool)


def _should_log(path: str, status: int | None, duration_ms: float) -> bool:
    if not path.startswith(API_PREFIX):
        return False
    if env_bool("SWIPESAVE_OBS_LOG_ALL", False) or (status or 0) >= 400:
        return True
    return path not in _QUIET_PATHS and duration_ms >= SLOW_REQUEST_MS


def _level_for(status: int | None) -> int:
    code = status or 0
    if code >= 500:
        return logging.ERROR
    return logging.WARNING if code >= 400 else logging.INFO


@web.middleware
async def request_context_middleware(request: web.Request, handler):
    rid = (request.headers.get("X-Request-ID") or "").strip() or uuid4().hex
    request["swipesave_request_id"] = rid
    token = request_id_var.set(rid)
    began = time.perf_counter()
    status: int | None = 500
    failure = ""
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        status = exc.status
        exc.headers["X-Request-ID"] = rid
        raise
    except Exception as exc:
        failure = f"{type(exc).__name__}: {exc}"
        raise
    else:
        status = response.status
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        elapsed = (time.perf_counter() - began) * 1000.0
        request_id_var.reset(token)
        if _should_log(request.path, status, elapsed):
            fields = {"method": request.method, "path": request.path, "status": status, "duration_ms": round(elapsed, 1)}
            if failure:
                fields["error"] = failure
            log_structured(logger, _level_for(status), "request", **fields)


def ensure_observability(app: web.Application) -> None:
    """Install the middleware once per app."""
    if not app.get(_INSTALLED):
        app.middlewares.append(request_context_middleware)
        app[_INSTALLED] = True
