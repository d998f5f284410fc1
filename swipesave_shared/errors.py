"""
Workflow engine exceptions and helpers for sanitizing error messages before
they reach clients.
"""
from __future__ import annotations

import os
import re
from typing import Any

from .log import get_logger

logger = get_logger(__name__)
_DEBUG_MODE = os.getenv("SWIPESAVE_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")

# Drive letters, UNC shares and absolute POSIX paths. URLs keep their path.
_PATH_PATTERNS = (
    re.compile(r"[A-Za-z]:\\[^\s]+"),
    re.compile(r"\\\\[^\s\\]+\\[^\s]+"),
    re.compile(r"(?<![A-Za-z0-9:/?&=#%])/(?!/)[^\s#?]+"),
)
_MAX_DETAIL = 200


class WorkflowError(Exception):
    """Base class for workflow engine failures."""


class FormatError(WorkflowError):
    """The document is neither a GUI nor an API workflow."""


class ConversionError(WorkflowError):
    """A GUI workflow has a structure the converter cannot translate."""

    def __init__(self, message: str, *, node_id: Any = None, node_type: Any = None):
        self.node_id = node_id
        self.node_type = node_type
        if node_id is not None or node_type is not None:
            message = f"{message} (node {node_id}, type {node_type or 'unknown'})"
        super().__init__(message)


class SubmissionError(WorkflowError):
    """ComfyUI rejected a queued prompt or could not be reached."""

    def __init__(self, message: str, *, status: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


def sanitize_error_message(exc: Any, fallback: str) -> str:
    """
    `"<fallback>: <detail>"` for API responses, with filesystem paths replaced
    by `[path]` and the detail flattened to one line.
    """
    fallback = fallback or "An error occurred"
    detail = "" if exc is None else str(exc)
    if not detail:
        return fallback

    detail = detail.replace(os.getcwd(), "[cwd]")
    for pattern in _PATH_PATTERNS:
        detail = pattern.sub("[path]", detail)
    detail = " ".join(detail.split())
    if not detail:
        return fallback
    if _DEBUG_MODE:
        logger.debug("Sanitized error detail: %s", detail)
    return f"{fallback}: {detail[:_MAX_DETAIL]}"
