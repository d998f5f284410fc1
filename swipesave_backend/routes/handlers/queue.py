"""
Queueing endpoints.

  POST /api/queue-workflow              queue the workflow embedded in an output PNG
  POST /api/queue-workflow-with-edits   queue a client-supplied (edited) workflow
  GET  /api/comfyui-queue               ComfyUI running/pending jobs
  POST /api/comfyui-queue/cancel        clear pending jobs
"""
from __future__ import annotations

from typing import Any

from aiohttp import web

from ...shared import ErrorCode, Result, get_logger
from ...utils import parse_bool
from ..core import (
    _json_response,
    _parse_comfy_url,
    _parse_submission_options,
    _read_json,
    _require_services,
)
from .workflow import _load_file_workflow

logger = get_logger(__name__)


def _cancel_ids(raw: Any) -> list[str] | None:
    """`cancel` may be an id, a list of ids, or anything else meaning 'all pending'."""
    if isinstance(raw, str) and raw.strip():
        return [raw.strip()]
    if isinstance(raw, list):
        ids = [str(x).strip() for x in raw if isinstance(x, (str, int)) and not isinstance(x, bool) and str(x).strip()]
        return ids or None
    return None


def register_queue_routes(routes: web.RouteTableDef) -> None:
    @routes.post("/api/queue-workflow")
    async def queue_workflow(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        config = svc["config"]
        body = await _read_json(request, max_bytes=config.max_json_bytes)
        if not body.ok:
            return _json_response(body)
        payload = body.data or {}
        options = _parse_submission_options(payload, config)
        if not options.ok:
            return _json_response(options)

        loaded = await _load_file_workflow(config.output_dir, payload.get("filename"))
        if not loaded.ok:
            return _json_response(loaded)
        metadata = loaded.data or {}
        # The API prompt is authoritative when present; the GUI export rides along as pnginfo.
        doc = metadata.get("prompt") or metadata.get("workflow")
        if doc is None:
            return _json_response(Result.Err(ErrorCode.NOT_FOUND, "No workflow found in image metadata"))

        result = await svc["submission"].submit_workflow(
            doc,
            source_workflow=metadata.get("workflow"),
            **(options.data or {}),
        )
        if result.ok:
            result.meta["filename"] = payload.get("filename")
        return _json_response(result)

    @routes.post("/api/queue-workflow-with-edits")
    async def queue_workflow_with_edits(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        config = svc["config"]
        body = await _read_json(request, max_bytes=config.max_json_bytes)
        if not body.ok:
            return _json_response(body)
        payload = body.data or {}
        workflow = payload.get("workflow")
        if not isinstance(workflow, dict) or not workflow:
            return _json_response(Result.Err(ErrorCode.INVALID_INPUT, "Pre-edited workflow is required"))
        options = _parse_submission_options(payload, config)
        if not options.ok:
            return _json_response(options)

        result = await svc["submission"].submit_workflow(
            workflow,
            edits=payload.get("edits"),
            node_edits=payload.get("nodeEdits"),
            **(options.data or {}),
        )
        if result.ok:
            result.meta["filename"] = payload.get("filename")
        return _json_response(result)

    @routes.get("/api/comfyui-queue")
    async def get_comfy_queue(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        comfy_url = _parse_comfy_url(request.query.get("comfyUrl"))
        if not comfy_url.ok:
            return _json_response(comfy_url)
        return _json_response(await svc["submission"].get_queue(comfy_url.data))

    @routes.post("/api/comfyui-queue/cancel")
    async def cancel_comfy_queue(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        body = await _read_json(request, max_bytes=svc["config"].max_json_bytes)
        if not body.ok:
            return _json_response(body)
        payload = body.data or {}
        comfy_url = _parse_comfy_url(payload.get("comfyUrl"))
        if not comfy_url.ok:
            return _json_response(comfy_url)
        result = await svc["submission"].cancel(
            _cancel_ids(payload.get("cancel")),
            interrupt=parse_bool(payload.get("interrupt"), False),
            comfy_url=comfy_url.data,
        )
        return _json_response(result)
