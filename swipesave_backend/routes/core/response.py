"""
JSON envelopes for route handlers: `{ok, data, error, code, meta}`.
"""

import json
import math

from aiohttp import web

from ...shared import ConversionError, ErrorCode, FormatError, Result, SubmissionError, sanitize_error_message


def _strict_json(value):
    """Replace NaN and +/-Infinity with None at any depth; tuples become lists."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _strict_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_strict_json(item) for item in value]
    return value


def _json_response(result: Result, status: int = 200) -> web.Response:
    """
    Serialize `result`. Business failures (`ok: false`) still answer HTTP 200;
    callers pass `status` only for real server faults.
    """
    envelope = {
        "ok": result.ok,
        "data": result.data,
        "error": result.error,
        "code": result.code,
        "meta": result.meta,
    }
    return web.json_response(
        _strict_json(envelope),
        status=status,
        dumps=lambda obj: json.dumps(obj, ensure_ascii=False, default=str),
    )


def _result_from_exception(exc: Exception, fallback: str) -> Result:
    """Map workflow engine exceptions to error Results."""
    if isinstance(exc, FormatError):
        return Result.Err(ErrorCode.FORMAT_ERROR, str(exc))
    if isinstance(exc, ConversionError):
        return Result.Err(
            ErrorCode.CONVERSION_ERROR,
            sanitize_error_message(exc, fallback),
            node_id=exc.node_id,
            node_type=exc.node_type,
        )
    if isinstance(exc, SubmissionError):
        code = ErrorCode.COMFY_UNAVAILABLE if exc.status is None else ErrorCode.SUBMISSION_FAILED
        return Result.Err(code, sanitize_error_message(exc, fallback), status=exc.status)
    return Result.Err(ErrorCode.INVALID_INPUT, sanitize_error_message(exc, fallback))
