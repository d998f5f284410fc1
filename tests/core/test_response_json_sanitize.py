import json

from swipesave_backend.routes.core.response import _json_response, _result_from_exception, _strict_json
from swipesave_backend.shared import ConversionError, ErrorCode, FormatError, Result, SubmissionError


def test_sanitize_replaces_non_finite_floats() -> None:
    payload = {"a": float("nan"), "b": [1.5, float("inf"), (float("-inf"),)], "c": {"d": 2}}
    assert _strict_json(payload) == {"a": None, "b": [1.5, None, [None]], "c": {"d": 2}}


def test_json_response_envelope() -> None:
    resp = _json_response(Result.Ok({"x": float("nan")}, format="api"))
    body = json.loads(resp.text)
    assert resp.status == 200
    assert body == {"ok": True, "data": {"x": None}, "error": None, "code": "OK", "meta": {"format": "api"}}


def test_business_errors_are_http_200() -> None:
    resp = _json_response(Result.Err(ErrorCode.NOT_FOUND, "missing"))
    body = json.loads(resp.text)
    assert resp.status == 200
    assert body["ok"] is False
    assert body["code"] == "NOT_FOUND"


def test_result_from_exception_codes() -> None:
    assert _result_from_exception(FormatError("bad"), "x").code == ErrorCode.FORMAT_ERROR

    conversion = _result_from_exception(ConversionError("no type", node_id=4, node_type=None), "Failed")
    assert conversion.code == ErrorCode.CONVERSION_ERROR
    assert conversion.meta == {"node_id": 4, "node_type": None}
    assert conversion.error.startswith("Failed: ")

    assert _result_from_exception(SubmissionError("down"), "x").code == ErrorCode.COMFY_UNAVAILABLE
    rejected = _result_from_exception(SubmissionError("nope", status=400), "x")
    assert rejected.code == ErrorCode.SUBMISSION_FAILED
    assert rejected.meta["status"] == 400

    assert _result_from_exception(ValueError("odd"), "x").code == ErrorCode.INVALID_INPUT
