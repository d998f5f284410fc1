"""
Core utilities for route handlers.
"""
from .params import _parse_comfy_url, _parse_submission_options
from .paths import _resolve_output_file
from .request_json import _read_json
from .response import _json_response, _result_from_exception
from .services import SERVICES_KEY, _require_services

__all__ = [
    "_json_response",
    "_result_from_exception",
    "_read_json",
    "_resolve_output_file",
    "_parse_comfy_url",
    "_parse_submission_options",
    "_require_services",
    "SERVICES_KEY",
]
