"""
Workflow inspection endpoints.

  GET  /api/workflow/{filename}   workflow embedded in an output PNG
  POST /api/workflow/analyze      format + editable fields + summary
  POST /api/workflow/convert      GUI export -> API prompt graph
"""
from __future__ import annotations

import asyncio
from typing import Any

from aiohttp import web

from ...features.metadata import read_png_workflow
from ...features.workflow import (
    UnmappedNodeWarning,
    classify_fields,
    convert_gui_to_api,
    detect_format,
)
from ...shared import ConversionError, ErrorCode, FormatError, Result, WorkflowFormat, get_logger
from ..core import _json_response, _read_json, _require_services, _resolve_output_file, _result_from_exception

logger = get_logger(__name__)


async def _load_file_workflow(output_dir, filename: str | None) -> Result[dict]:
    path = _resolve_output_file(output_dir, filename)
    if not path.ok:
        return path
    return await asyncio.to_thread(read_png_workflow, path.data)


def _pick_document(metadata: dict[str, Any]) -> dict[str, Any] | None:
    return metadata.get("workflow") or metadata.get("prompt")


async def _workflow_from_body(body: dict, output_dir) -> Result[dict]:
    """`{workflow}` wins; otherwise `{filename}` is read from the output directory."""
    workflow = body.get("workflow")
    if workflow is not None:
        if not isinstance(workflow, dict):
            return Result.Err(ErrorCode.INVALID_INPUT, "workflow must be a JSON object")
        return Result.Ok(workflow)
    if body.get("filename"):
        loaded = await _load_file_workflow(output_dir, body.get("filename"))
        if not loaded.ok:
            return loaded
        doc = _pick_document(loaded.data or {})
        if doc is None:
            return Result.Err(ErrorCode.NOT_FOUND, "No workflow found in image metadata")
        return Result.Ok(doc)
    return Result.Err(ErrorCode.INVALID_INPUT, "Provide either 'workflow' or 'filename'")


def register_workflow_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/api/workflow/{filename:.+}")
    async def get_workflow(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        filename = request.match_info.get("filename", "")
        loaded = await _load_file_workflow(svc["config"].output_dir, filename)
        if not loaded.ok:
            return _json_response(loaded)
        metadata = loaded.data or {}
        doc = _pick_document(metadata)
        if doc is None:
            return _json_response(Result.Err(ErrorCode.NOT_FOUND, "No workflow found in image metadata"))
        return _json_response(
            Result.Ok(
                doc,
                format=detect_format(doc).value,
                has_prompt=metadata.get("prompt") is not None,
                has_workflow=metadata.get("workflow") is not None,
            )
        )

    @routes.post("/api/workflow/analyze")
    async def analyze_workflow(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        body = await _read_json(request, max_bytes=svc["config"].max_json_bytes)
        if not body.ok:
            return _json_response(body)
        doc = await _workflow_from_body(body.data or {}, svc["config"].output_dir)
        if not doc.ok:
            return _json_response(doc)

        try:
            classification = classify_fields(doc.data)
        except FormatError as exc:
            return _json_response(_result_from_exception(exc, "Unrecognized workflow"))
        fmt = detect_format(doc.data)
        data = classification.to_dict()
        data["format"] = fmt.value
        return _json_response(Result.Ok(data))

    @routes.post("/api/workflow/convert")
    async def convert_workflow(request: web.Request) -> web.Response:
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        body = await _read_json(request, max_bytes=svc["config"].max_json_bytes)
        if not body.ok:
            return _json_response(body)
        doc = await _workflow_from_body(body.data or {}, svc["config"].output_dir)
        if not doc.ok:
            return _json_response(doc)

        fmt = detect_format(doc.data)
        if fmt is WorkflowFormat.API:
            return _json_response(Result.Ok(doc.data, format=fmt.value, converted=False, warnings=[]))
        if fmt is WorkflowFormat.UNKNOWN:
            return _json_response(Result.Err(ErrorCode.FORMAT_ERROR, "Unrecognized workflow format"))

        warnings: list[UnmappedNodeWarning] = []
        try:
            graph = convert_gui_to_api(doc.data, warnings=warnings)
        except ConversionError as exc:
            return _json_response(_result_from_exception(exc, "Failed to convert workflow format"))
        return _json_response(
            Result.Ok(graph, format=fmt.value, converted=True, warnings=[str(w) for w in warnings])
        )
