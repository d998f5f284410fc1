import copy
import json
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

# tests live at <repo>/tests/ so the repo root is one parent above.
REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


_TXT2IMG_GUI = {
    "last_node_id": 9,
    "last_link_id": 9,
    "nodes": [
        {
            "id": 4,
            "type": "CheckpointLoaderSimple",
            "pos": [26, 474],
            "size": [315, 98],
            "widgets_values": ["sd_xl_base_1.0.safetensors"],
        },
        {
            "id": 6,
            "type": "CLIPTextEncode",
            "pos": [415, 186],
            "size": [422, 164],
            "title": "Positive",
            "widgets_values": ["a photo of a cat, masterpiece, best quality"],
        },
        {
            "id": 7,
            "type": "CLIPTextEncode",
            "pos": [413, 389],
            "size": [425, 180],
            "widgets_values": ["blurry, low quality"],
        },
        {
            "id": 5,
            "type": "EmptyLatentImage",
            "pos": [473, 609],
            "size": [315, 106],
            "widgets_values": [1024, 1024, 1],
        },
        {
            "id": 3,
            "type": "KSampler",
            "pos": [863, 186],
            "size": [315, 262],
            "widgets_values": [156680208700286, "randomize", 20, 8, "euler", "normal", 1],
        },
        {
            "id": 8,
            "type": "VAEDecode",
            "pos": [1209, 188],
            "size": [210, 46],
            "widgets_values": [],
        },
        {
            "id": 9,
            "type": "SaveImage",
            "pos": [1451, 189],
            "size": [210, 58],
            "widgets_values": ["ComfyUI"],
        },
    ],
    "links": [
        [1, 4, 0, 3, 0, "MODEL"],
        [3, 4, 1, 6, 0, "CLIP"],
        [5, 4, 1, 7, 0, "CLIP"],
        [4, 6, 0, 3, 1, "CONDITIONING"],
        [6, 7, 0, 3, 2, "CONDITIONING"],
        [2, 5, 0, 3, 3, "LATENT"],
        [7, 3, 0, 8, 0, "LATENT"],
        [8, 4, 2, 8, 1, "VAE"],
        [9, 8, 0, 9, 0, "IMAGE"],
    ],
    "groups": [],
    "config": {},
    "extra": {},
    "version": 0.4,
}

_TXT2IMG_API = {
    "3": {
        "class_type": "KSampler",
        "inputs": {
            "seed": 156680208700286,
            "steps": 20,
            "cfg": 8,
            "sampler_name": "euler",
            "scheduler": "normal",
            "denoise": 1,
            "model": ["4", 0],
            "positive": ["6", 0],
            "negative": ["7", 0],
            "latent_image": ["5", 0],
        },
    },
    "4": {"class_type": "CheckpointLoaderSimple", "inputs": {"ckpt_name": "sd_xl_base_1.0.safetensors"}},
    "5": {"class_type": "EmptyLatentImage", "inputs": {"width": 1024, "height": 1024, "batch_size": 1}},
    "6": {"class_type": "CLIPTextEncode", "inputs": {"text": "a photo of a cat, masterpiece, best quality", "clip": ["4", 1]}},
    "7": {"class_type": "CLIPTextEncode", "inputs": {"text": "blurry, low quality", "clip": ["4", 1]}},
    "8": {"class_type": "VAEDecode", "inputs": {"samples": ["3", 0], "vae": ["4", 2]}},
    "9": {"class_type": "SaveImage", "inputs": {"filename_prefix": "ComfyUI", "images": ["8", 0]}},
}


@pytest.fixture
def gui_workflow() -> dict:
    """Default ComfyUI text-to-image graph as exported by the GUI."""
    return copy.deepcopy(_TXT2IMG_GUI)


@pytest.fixture
def api_workflow() -> dict:
    """The same graph in execution (API) format."""
    return copy.deepcopy(_TXT2IMG_API)


def write_workflow_png(path: Path, workflow=None, prompt=None) -> Path:
    """Write a tiny PNG carrying ComfyUI's `workflow`/`prompt` text chunks."""
    from PIL import Image
    from PIL.PngImagePlugin import PngInfo

    info = PngInfo()
    if workflow is not None:
        info.add_text("workflow", workflow if isinstance(workflow, str) else json.dumps(workflow))
    if prompt is not None:
        info.add_text("prompt", prompt if isinstance(prompt, str) else json.dumps(prompt))
    Image.new("RGB", (4, 4), (255, 0, 0)).save(path, format="PNG", pnginfo=info)
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    out = tmp_path / "output"
    out.mkdir()
    return out


@pytest.fixture
def workflow_png(output_dir: Path, gui_workflow: dict, api_workflow: dict) -> Path:
    """ComfyUI_00001_.png as SaveImage writes it: both chunks present."""
    return write_workflow_png(output_dir / "ComfyUI_00001_.png", gui_workflow, api_workflow)


class FakeComfy:
    """Records requests and answers like a small ComfyUI server."""

    def __init__(self) -> None:
        self.prompts: list[dict] = []
        self.queue_posts: list[dict] = []
        self.object_info_calls = 0
        self.queue_calls = 0
        self.interrupts = 0
        self.object_info: dict = {"KSampler": {"input": {"required": {}}}}
        self.prompt_responses: list[tuple[int, str]] = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/prompt", self._prompt)
        app.router.add_get("/queue", self._get_queue)
        app.router.add_post("/queue", self._post_queue)
        app.router.add_post("/interrupt", self._interrupt)
        app.router.add_get("/object_info", self._object_info)
        return app

    async def _prompt(self, request: web.Request) -> web.Response:
        self.prompts.append(await request.json())
        if self.prompt_responses:
            status, text = self.prompt_responses.pop(0)
        else:
            number = len(self.prompts)
            status, text = 200, json.dumps({"prompt_id": f"p-{number}", "number": number, "node_errors": {}})
        return web.Response(status=status, text=text, content_type="application/json")

    async def _get_queue(self, request: web.Request) -> web.Response:
        self.queue_calls += 1
        return web.json_response({"queue_running": [["a"]], "queue_pending": [["b"], ["c"]]})

    async def _post_queue(self, request: web.Request) -> web.Response:
        self.queue_posts.append(await request.json())
        return web.Response(status=200)

    async def _interrupt(self, request: web.Request) -> web.Response:
        self.interrupts += 1
        return web.Response(status=200)

    async def _object_info(self, request: web.Request) -> web.Response:
        self.object_info_calls += 1
        return web.json_response(self.object_info)


@pytest_asyncio.fixture
async def comfy():
    """`(FakeComfy, base_url)` served on a random local port."""
    fake = FakeComfy()
    server = TestServer(fake.app())
    await server.start_server()
    try:
        yield fake, str(server.make_url("")).rstrip("/")
    finally:
        await server.close()


@pytest_asyncio.fixture
async def app_client(comfy, output_dir):
    """HTTP client for the full app, wired to the fake ComfyUI."""
    from swipesave_backend.app import create_app
    from swipesave_backend.config import AppConfig
    from swipesave_backend.deps import build_services

    fake, url = comfy
    config = AppConfig(comfyui_url=url, output_dir=output_dir, max_quantity=5, default_seed_mode="original")
    services = build_services(config).unwrap()
    client = TestClient(TestServer(create_app(services=services)))
    await client.start_server()
    try:
        yield client, fake
    finally:
        await client.close()
