"""
Service lookup for route handlers.

The container is built once by `create_app` and stored on the application
under `SERVICES_KEY`; handlers never reach for module globals.
"""
from typing import Any

from aiohttp import web

from ...shared import ErrorCode, Result

SERVICES_KEY: web.AppKey[dict[str, Any]] = web.AppKey("swipesave_services", dict)


def _require_services(request: web.Request) -> tuple[dict[str, Any] | None, Result[Any] | None]:
    services = request.app.get(SERVICES_KEY)
    if services:
        return services, None
    return None, Result.Err(ErrorCode.SERVICE_UNAVAILABLE, "Services are unavailable")
