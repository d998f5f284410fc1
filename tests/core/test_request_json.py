import pytest

from swipesave_backend.routes.core import request_json as rq
from swipesave_backend.shared import ErrorCode


class _DummyContent:
    def __init__(self, chunks, exc=None):
        self._chunks = chunks
        self._exc = exc

    async def iter_chunked(self, _size):
        if self._exc is not None:
            raise self._exc
        for chunk in self._chunks:
            yield chunk


class _DummyRequest:
    def __init__(self, headers=None, chunks=None, exc=None):
        self.headers = headers or {}
        self.content = _DummyContent(chunks or [], exc=exc)


def test_declared_size_errors() -> None:
    assert rq._declared_size_error(_DummyRequest(headers={"Content-Length": "999"}), 100) is not None
    assert rq._declared_size_error(_DummyRequest(headers={"Content-Length": "99"}), 100) is None
    assert rq._declared_size_error(_DummyRequest(headers={"Content-Length": "abc"}), 100) is None
    assert rq._declared_size_error(_DummyRequest(), 100) is None


def test_parse_object() -> None:
    ok = rq._parse_object(b'{"a":1}')
    assert ok.ok and ok.data == {"a": 1}

    assert rq._parse_object(b"").data == {}
    assert rq._parse_object(b"\xff").code == ErrorCode.INVALID_JSON
    assert rq._parse_object(b"{").code == ErrorCode.INVALID_JSON
    assert rq._parse_object(b"[]").code == ErrorCode.INVALID_JSON


@pytest.mark.asyncio
async def test_read_limited_behaviors() -> None:
    ok = await rq._read_limited(_DummyRequest(chunks=[b"ab", b"", b"cd"]), 10)
    assert ok.ok and ok.data == b"abcd"

    too_big = await rq._read_limited(_DummyRequest(chunks=[b"x" * 8, b"y" * 8]), 10)
    assert not too_big.ok
    assert too_big.meta["limit"] == 10

    broken = await rq._read_limited(_DummyRequest(exc=RuntimeError("boom")), 10)
    assert broken.code == ErrorCode.INVALID_JSON


@pytest.mark.asyncio
async def test_read_json_enforces_minimum_limit() -> None:
    body = b'{"workflow": "' + b"x" * 1500 + b'"}'
    result = await rq._read_json(_DummyRequest(chunks=[body]), max_bytes=10)
    assert result.code == ErrorCode.INVALID_INPUT

    small = await rq._read_json(_DummyRequest(chunks=[b'{"a": 2}']), max_bytes=10)
    assert small.ok and small.data == {"a": 2}


@pytest.mark.asyncio
async def test_read_json_rejects_declared_oversize() -> None:
    request = _DummyRequest(headers={"Content-Length": str(rq.MIN_JSON_BYTES + 1)}, chunks=[b"{}"])
    result = await rq._read_json(request, max_bytes=rq.MIN_JSON_BYTES)
    assert result.code == ErrorCode.INVALID_INPUT
    assert result.meta["size"] == rq.MIN_JSON_BYTES + 1
