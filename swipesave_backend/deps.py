"""
Dependency injection - builds services.
Simple, debug-friendly DI without framework magic.
"""

from __future__ import annotations

from typing import Any

from .adapters.comfy import ComfyClient, ObjectInfoCache
from .config import AppConfig
from .features.submission import SubmissionService
from .shared import Result, get_logger, log_success

logger = get_logger(__name__)


def _prepare_output_dir(config: AppConfig) -> None:
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Output directory %s is not writable: %s", config.output_dir, exc)


def build_services(config: AppConfig | None = None, client: ComfyClient | None = None) -> Result[dict[str, Any]]:
    """
    Build the service container.

    Returns:
        Result with a dict holding `config`, `comfy` (ComfyClient) and
        `submission` (SubmissionService).
    """
    config = config or AppConfig.from_env()
    _prepare_output_dir(config)
    if client is None:
        client = ComfyClient(
            config.comfyui_url,
            timeout_s=config.comfy_timeout_s,
            object_info_cache=ObjectInfoCache(config.object_info_ttl_s),
            health_cache=ObjectInfoCache(config.health_ttl_s),
        )
    services = {
        "config": config,
        "comfy": client,
        "submission": SubmissionService(client, config),
    }
    log_success(logger, f"Services ready (ComfyUI at {client.base_url}, output {config.output_dir})")
    return Result.Ok(services)
