"""
Read the ComfyUI workflow stored in a PNG's text chunks.

ComfyUI's SaveImage writes two tEXt chunks: `workflow` (GUI export) and
`prompt` (API graph). Either may be missing on images from other tools.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from PIL import Image, UnidentifiedImageError

from ...shared import ErrorCode, Result, get_logger
from ..workflow.formats import parse_workflow_text

logger = get_logger(__name__)

WORKFLOW_KEYS = ("workflow", "Workflow")
PROMPT_KEYS = ("prompt", "Prompt")


def _first_text(info: Dict[str, Any], keys: tuple[str, ...]) -> Optional[Any]:
    for key in keys:
        value = info.get(key)
        if value is not None:
            return value
    return None


def _read_text_chunks(path: Path) -> Dict[str, Any]:
    with Image.open(path) as img:
        info = dict(getattr(img, "info", {}) or {})
        text = getattr(img, "text", None)
        if isinstance(text, dict):
            info.update(text)
    return info


def read_png_workflow(path: str | Path) -> Result[Dict[str, Any]]:
    """
    Returns `{"workflow": dict | None, "prompt": dict | None}`.

    Errors: NOT_FOUND (no file), UNSUPPORTED (not an image), PARSE_ERROR
    (no embedded workflow, or chunks that are not JSON objects).
    """
    p = Path(path)
    if not p.is_file():
        return Result.Err(ErrorCode.NOT_FOUND, f"File not found: {p.name}")
    try:
        info = _read_text_chunks(p)
    except UnidentifiedImageError:
        return Result.Err(ErrorCode.UNSUPPORTED, f"Not a readable image: {p.name}")
    except OSError as exc:
        logger.warning("Failed to open %s: %s", p.name, exc)
        return Result.Err(ErrorCode.UNSUPPORTED, f"Cannot open image: {p.name}")

    raw_workflow = _first_text(info, WORKFLOW_KEYS)
    raw_prompt = _first_text(info, PROMPT_KEYS)
    if raw_workflow is None and raw_prompt is None:
        return Result.Err(ErrorCode.PARSE_ERROR, f"No workflow metadata found in {p.name}")

    workflow = parse_workflow_text(raw_workflow) if raw_workflow is not None else None
    prompt = parse_workflow_text(raw_prompt) if raw_prompt is not None else None
    if workflow is None and prompt is None:
        return Result.Err(ErrorCode.PARSE_ERROR, f"Embedded workflow in {p.name} is not valid JSON")

    logger.debug("Read workflow metadata from %s (workflow=%s, prompt=%s)", p.name, workflow is not None, prompt is not None)
    return Result.Ok({"workflow": workflow, "prompt": prompt}, filename=p.name)
