"""Shared utilities for the Swipe Save backend."""
from .errors import ConversionError, FormatError, SubmissionError, WorkflowError, sanitize_error_message
from .log import get_logger, log_structured, log_success, request_id_var, set_log_level
from .result import Result
from .types import ControlMode, ErrorCode, FieldCategory, SeedMode, WorkflowFormat

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "set_log_level",
    "ErrorCode",
    "WorkflowFormat",
    "SeedMode",
    "ControlMode",
    "FieldCategory",
    "WorkflowError",
    "FormatError",
    "ConversionError",
    "SubmissionError",
    "sanitize_error_message",
]
