"""
aiohttp application factory and CLI entry point.
"""
from __future__ import annotations

import argparse
import logging
from typing import Any

from aiohttp import web

from .config import AppConfig
from .deps import build_services
from .routes import register_routes
from .routes.core import SERVICES_KEY
from .shared import get_logger, set_log_level

logger = get_logger(__name__)


def create_app(services: dict[str, Any] | None = None, config: AppConfig | None = None) -> web.Application:
    """
    Build the application.

    Tests pass a ready `services` dict (usually with a stubbed ComfyUI client);
    otherwise services are built from `config` or the environment.
    """
    if services is None:
        built = build_services(config)
        if not built.ok:
            raise RuntimeError(built.error or "Failed to initialize services")
        services = built.data or {}
    app = web.Application(client_max_size=services["config"].max_json_bytes)
    app[SERVICES_KEY] = services
    register_routes(app)
    return app


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="swipe-save", description="Swipe Save ComfyUI workflow backend")
    parser.add_argument("--host", default=None, help="bind address (SWIPESAVE_HOST)")
    parser.add_argument("--port", type=int, default=None, help="listen port (SWIPESAVE_PORT)")
    parser.add_argument("--comfy-url", default=None, help="ComfyUI base URL (SWIPESAVE_COMFYUI_URL)")
    parser.add_argument("--output-dir", default=None, help="directory holding generated PNGs (SWIPESAVE_OUTPUT_DIR)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    config = AppConfig.from_env().with_overrides(
        host=args.host,
        port=args.port,
        comfyui_url=args.comfy_url,
        output_dir=args.output_dir,
    )
    if config.debug:
        set_log_level(logging.DEBUG)
    app = create_app(config=config)
    logger.info("Listening on http://%s:%s (ComfyUI: %s)", config.host, config.port, config.comfyui_url)
    web.run_app(app, host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
