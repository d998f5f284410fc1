"""
Shared types, enums, and constants.
"""
from enum import Enum
from typing import Final, Literal

# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Client / validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_JSON = "INVALID_JSON"
    NOT_FOUND = "NOT_FOUND"

    # Feature / service availability
    UNSUPPORTED = "UNSUPPORTED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    COMFY_UNAVAILABLE = "COMFY_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"

    # Workflow engine
    FORMAT_ERROR = "FORMAT_ERROR"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    PARSE_ERROR = "PARSE_ERROR"

    # External submission
    SUBMISSION_FAILED = "SUBMISSION_FAILED"


class WorkflowFormat(str, Enum):
    """ComfyUI workflow serializations."""
    GUI = "gui"          # litegraph export: nodes[] + links[]
    API = "api"          # execution graph: {id: {class_type, inputs}}
    UNKNOWN = "unknown"


class SeedMode(str, Enum):
    """How seeds are rewritten before a workflow is queued."""
    ORIGINAL = "original"
    RANDOMIZE = "randomize"
    INCREMENT = "increment"

    @classmethod
    def parse(cls, value: object, *, strict: bool = False) -> "SeedMode":
        """
        Resolve a user-supplied mode.

        Unknown values map to ORIGINAL unless `strict` is set, in which case
        a ValueError is raised.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        if strict:
            raise ValueError(f"Unknown seed mode: {value!r}")
        return cls.ORIGINAL


class ControlMode(str, Enum):
    """ComfyUI `control_after_generate` values. Only ever written literally."""
    FIXED = "fixed"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    RANDOMIZE = "randomize"


class FieldCategory(str, Enum):
    """Semantic buckets produced by the field classifier."""
    SEED = "seed"
    PROMPT = "prompt"
    MODEL = "model"
    SAMPLING = "sampling"
    DIMENSION = "dimension"
    DROPDOWN = "dropdown"
    BOOLEAN = "boolean"
    IMAGE = "image"
    NUMBER = "number"
    OTHER = "other"


WorkflowKind = Literal["gui", "api"]

# Upper bound for seeds written by the randomizer (2^31 - 1).
MAX_SEED: Final[int] = 2147483647

MODEL_EXTENSIONS: Final[tuple[str, ...]] = (".safetensors", ".ckpt", ".pt", ".pth", ".bin", ".gguf")
IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif")
