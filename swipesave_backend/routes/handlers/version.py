"""
Version reporting endpoint.
"""
from aiohttp import web

from swipesave_shared.version import get_version_info

from ...shared import Result
from ..core import _json_response


def register_version_routes(routes: web.RouteTableDef) -> None:
    """Expose the installed Swipe Save version."""

    @routes.get("/api/version")
    async def get_version(_request: web.Request) -> web.Response:
        return _json_response(Result.Ok(get_version_info()))
