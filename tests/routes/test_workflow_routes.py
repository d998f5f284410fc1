import pytest

from conftest import write_workflow_png


@pytest.mark.asyncio
async def test_get_workflow_from_png(app_client, workflow_png, gui_workflow) -> None:
    client, _fake = app_client
    resp = await client.get(f"/api/workflow/{workflow_png.name}")
    assert resp.status == 200
    body = await resp.json()
    assert body["ok"] is True
    assert body["data"] == gui_workflow
    assert body["meta"] == {"format": "gui", "has_prompt": True, "has_workflow": True}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_get_workflow_errors(app_client, output_dir) -> None:
    client, _fake = app_client
    missing = await (await client.get("/api/workflow/nothing.png")).json()
    assert missing["code"] == "NOT_FOUND"

    video = await (await client.get("/api/workflow/clip.mp4")).json()
    assert video["code"] == "UNSUPPORTED"

    write_workflow_png(output_dir / "plain.png")
    plain = await (await client.get("/api/workflow/plain.png")).json()
    assert plain["code"] == "PARSE_ERROR"


@pytest.mark.asyncio
async def test_request_id_is_echoed(app_client) -> None:
    client, _fake = app_client
    resp = await client.get("/api/version", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"
    body = await resp.json()
    assert body["data"]["version"]


@pytest.mark.asyncio
async def test_analyze_inline_workflow(app_client, api_workflow) -> None:
    client, _fake = app_client
    resp = await client.post("/api/workflow/analyze", json={"workflow": api_workflow})
    body = await resp.json()
    assert body["ok"] is True
    assert body["data"]["format"] == "api"
    assert body["data"]["summary"]["seed"] == 1
    seed = next(f for f in body["data"]["fields"] if f["category"] == "seed")
    assert seed["path"] == "3.inputs.seed"
    assert seed["value"] == 156680208700286


@pytest.mark.asyncio
async def test_analyze_png_prefers_gui_workflow(app_client, workflow_png) -> None:
    client, _fake = app_client
    body = await (await client.post("/api/workflow/analyze", json={"filename": workflow_png.name})).json()
    assert body["data"]["format"] == "gui"
    assert any(f["path"] == "nodes.4.widgets_values.0" for f in body["data"]["fields"])


@pytest.mark.asyncio
async def test_analyze_rejects_bad_input(app_client) -> None:
    client, _fake = app_client
    empty = await (await client.post("/api/workflow/analyze", json={})).json()
    assert empty["code"] == "INVALID_INPUT"

    unknown = await (await client.post("/api/workflow/analyze", json={"workflow": {"a": 1}})).json()
    assert unknown["code"] == "FORMAT_ERROR"

    not_json = await (await client.post("/api/workflow/analyze", data=b"{oops")).json()
    assert not_json["code"] == "INVALID_JSON"


@pytest.mark.asyncio
async def test_convert_gui_workflow(app_client, gui_workflow, api_workflow) -> None:
    client, _fake = app_client
    body = await (await client.post("/api/workflow/convert", json={"workflow": gui_workflow})).json()
    assert body["ok"] is True
    assert body["meta"]["converted"] is True
    assert body["meta"]["warnings"] == []
    assert body["data"]["3"] == api_workflow["3"]


@pytest.mark.asyncio
async def test_convert_passes_api_through(app_client, api_workflow) -> None:
    client, _fake = app_client
    body = await (await client.post("/api/workflow/convert", json={"workflow": api_workflow})).json()
    assert body["meta"]["converted"] is False
    assert body["data"] == api_workflow


@pytest.mark.asyncio
async def test_convert_reports_structural_errors(app_client) -> None:
    client, _fake = app_client
    body = await (await client.post("/api/workflow/convert", json={"workflow": {"nodes": [{"id": 1}]}})).json()
    assert body["ok"] is False
    assert body["code"] == "CONVERSION_ERROR"
    assert body["meta"]["node_id"] == 1
