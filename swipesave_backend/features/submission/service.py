"""
Submission service - prepares workflows and queues them on ComfyUI.
"""
from __future__ import annotations

from typing import Any, Optional

from ...adapters.comfy import ComfyClient, generate_client_id
from ...config import AppConfig
from ...shared import (
    ControlMode,
    ConversionError,
    ErrorCode,
    FormatError,
    Result,
    SeedMode,
    SubmissionError,
    get_logger,
    log_success,
    sanitize_error_message,
)
from ..workflow import NodeSchemaResolver, prepare_for_submission

logger = get_logger(__name__)


def _submission_error_code(exc: SubmissionError) -> ErrorCode:
    return ErrorCode.COMFY_UNAVAILABLE if exc.status is None else ErrorCode.SUBMISSION_FAILED


class SubmissionService:
    """
    Queues workflows on ComfyUI.

    Batches are submitted one prompt at a time, in order; the first failure
    stops the batch and is reported together with what was already queued.
    """

    def __init__(self, client: ComfyClient, config: AppConfig):
        self.client = client
        self.config = config

    def client_for(self, comfy_url: Optional[str] = None) -> ComfyClient:
        return self.client.with_base_url(comfy_url)

    async def _resolver(self, client: ComfyClient) -> NodeSchemaResolver:
        resolver = NodeSchemaResolver()
        try:
            resolver.extend_from_object_info(await client.get_object_info())
        except SubmissionError as exc:
            # Static table still covers the common nodes.
            logger.warning("Node catalog unavailable, using built-in mappings: %s", exc)
        return resolver

    async def submit_workflow(
        self,
        doc: Any,
        *,
        seed_mode: SeedMode | str = SeedMode.ORIGINAL,
        control_mode: ControlMode | str | None = None,
        quantity: int = 1,
        base_seed: Optional[int] = None,
        edits: Any = None,
        node_edits: Any = None,
        comfy_url: Optional[str] = None,
        source_workflow: Optional[dict[str, Any]] = None,
    ) -> Result[dict]:
        """
        Prepare `doc` and queue `quantity` prompts sequentially.

        `source_workflow` is the GUI export to attach as `extra_pnginfo` when
        `doc` is already an API graph (PNG files carry both).
        """
        if quantity < 1 or quantity > self.config.max_quantity:
            return Result.Err(
                ErrorCode.INVALID_INPUT,
                f"quantity must be between 1 and {self.config.max_quantity}",
            )
        client = self.client_for(comfy_url)
        resolver = await self._resolver(client)

        try:
            prepared = prepare_for_submission(
                doc,
                seed_mode,
                control_mode,
                quantity,
                base_seed,
                edits=edits,
                node_edits=node_edits,
                resolver=resolver,
            )
        except FormatError as exc:
            return Result.Err(ErrorCode.FORMAT_ERROR, str(exc))
        except ConversionError as exc:
            return Result.Err(
                ErrorCode.CONVERSION_ERROR,
                sanitize_error_message(exc, "Failed to convert workflow format"),
                node_id=exc.node_id,
                node_type=exc.node_type,
            )
        except ValueError as exc:
            return Result.Err(ErrorCode.INVALID_INPUT, str(exc))

        client_id = generate_client_id()
        submitted: list[dict[str, Any]] = []
        fallback_pnginfo = {"workflow": source_workflow} if isinstance(source_workflow, dict) else None
        for unit in prepared:
            try:
                response = await client.submit_prompt(
                    unit.prompt, client_id, unit.extra_pnginfo() or fallback_pnginfo
                )
            except SubmissionError as exc:
                logger.error("Submission %d/%d failed: %s", unit.index + 1, len(prepared), exc)
                return Result.Err(
                    _submission_error_code(exc),
                    sanitize_error_message(exc, "Failed to queue workflow"),
                    status=exc.status,
                    payload=exc.payload,
                    submitted=submitted,
                )
            submitted.append(
                {
                    "index": unit.index,
                    "prompt_id": response.get("prompt_id"),
                    "number": response.get("number"),
                    "node_errors": response.get("node_errors") or {},
                    "seeds_mutated": unit.seeds_mutated,
                }
            )

        warnings = [str(w) for w in prepared[0].warnings] if prepared else []
        log_success(logger, f"Queued {len(submitted)} prompt(s) on {client.base_url}")
        return Result.Ok(
            {
                "submitted": submitted,
                "quantity": len(submitted),
                "client_id": client_id,
                "comfy_url": client.base_url,
                "seed_mode": SeedMode.parse(seed_mode).value,
                "control_after_generate": getattr(control_mode, "value", control_mode) or None,
                "warnings": warnings,
            }
        )

    async def get_queue(self, comfy_url: Optional[str] = None) -> Result[dict]:
        client = self.client_for(comfy_url)
        try:
            return Result.Ok(await client.get_queue())
        except SubmissionError as exc:
            return Result.Err(_submission_error_code(exc), sanitize_error_message(exc, "Failed to read ComfyUI queue"))

    async def cancel(
        self,
        prompt_ids: Optional[list[str]] = None,
        *,
        interrupt: bool = False,
        comfy_url: Optional[str] = None,
    ) -> Result[dict]:
        """Remove pending prompts (all when `prompt_ids` is empty) and optionally interrupt the running one."""
        client = self.client_for(comfy_url)
        try:
            await client.clear_queue(prompt_ids or None)
            interrupted = await client.interrupt() if interrupt else False
        except SubmissionError as exc:
            return Result.Err(_submission_error_code(exc), sanitize_error_message(exc, "Failed to cancel queue"))
        logger.info("Cleared ComfyUI queue (%s)", f"{len(prompt_ids)} ids" if prompt_ids else "all pending")
        return Result.Ok({"cleared": prompt_ids or "all", "interrupted": interrupted})

    async def health(self, comfy_url: Optional[str] = None, *, refresh: bool = False) -> Result[dict]:
        client = self.client_for(comfy_url)
        status = await client.health_check(refresh=refresh)
        if status.get("healthy"):
            return Result.Ok(status)
        return Result.Err(ErrorCode.COMFY_UNAVAILABLE, "ComfyUI is not reachable", health=status)
