"""
ComfyUI connectivity check.
"""
from aiohttp import web

from ...utils import parse_bool
from ..core import _json_response, _parse_comfy_url, _require_services


def register_health_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/api/comfyui/health")
    async def comfy_health(request: web.Request) -> web.Response:
        """Probe ComfyUI (cached for SWIPESAVE_HEALTH_TTL_S unless `refresh=1`)."""
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        comfy_url = _parse_comfy_url(request.query.get("comfyUrl"))
        if not comfy_url.ok:
            return _json_response(comfy_url)
        refresh = parse_bool(request.query.get("refresh"), False)
        result = await svc["submission"].health(comfy_url.data, refresh=refresh)
        return _json_response(result)
