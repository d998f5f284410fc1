"""
Single entry point that mounts every handler module on an aiohttp app.
"""

from __future__ import annotations

from aiohttp import web

from ..observability import API_PREFIX, ensure_observability
from ..shared import get_logger
from .handlers import (
    register_health_routes,
    register_queue_routes,
    register_version_routes,
    register_workflow_routes,
)

logger = get_logger(__name__)

_REGISTERED = web.AppKey("swipesave_routes_registered", bool)
_API_HEADERS = {"X-Content-Type-Options": "nosniff", "Cache-Control": "no-store"}


@web.middleware
async def api_headers_middleware(request: web.Request, handler) -> web.StreamResponse:
    response = await handler(request)
    if request.path.startswith(API_PREFIX):
        for name, value in _API_HEADERS.items():
            response.headers.setdefault(name, value)
    return response


def build_route_table() -> web.RouteTableDef:
    routes = web.RouteTableDef()
    for register in (register_workflow_routes, register_queue_routes, register_health_routes, register_version_routes):
        register(routes)
    return routes


def register_routes(app: web.Application) -> None:
    """Add routes and middlewares; a second call on the same app is a no-op."""
    if app.get(_REGISTERED):
        logger.debug("Routes already registered; skipping")
        return
    ensure_observability(app)
    app.middlewares.append(api_headers_middleware)
    routes = build_route_table()
    app.add_routes(routes)
    app[_REGISTERED] = True
    logger.debug("Registered %d routes", len(routes))
