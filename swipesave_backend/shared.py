"""Backend-facing alias for shared utilities.

Backend modules import from here so the shared package can be swapped or
relocated without touching every call site.
"""

from __future__ import annotations

from swipesave_shared import (
    ConversionError,
    ControlMode,
    ErrorCode,
    FieldCategory,
    FormatError,
    Result,
    SeedMode,
    SubmissionError,
    WorkflowError,
    WorkflowFormat,
    get_logger,
    log_structured,
    log_success,
    request_id_var,
    sanitize_error_message,
    set_log_level,
)
from swipesave_shared.types import IMAGE_EXTENSIONS, MAX_SEED, MODEL_EXTENSIONS

__all__ = [
    "Result",
    "ErrorCode",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "sanitize_error_message",
    "set_log_level",
    "WorkflowFormat",
    "SeedMode",
    "ControlMode",
    "FieldCategory",
    "WorkflowError",
    "FormatError",
    "ConversionError",
    "SubmissionError",
    "MAX_SEED",
    "MODEL_EXTENSIONS",
    "IMAGE_EXTENSIONS",
]
