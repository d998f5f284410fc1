"""Queueing prepared workflows on ComfyUI."""

from .service import SubmissionService

__all__ = ["SubmissionService"]
