"""
Outcome carrier shared by services and route handlers.

Business failures (bad input, unreadable PNG, ComfyUI rejecting a prompt)
travel as `Result.Err` values; handlers turn them into HTTP 200 envelopes.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from .types import ErrorCode

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    ok: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: str = "OK"
    meta: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def Ok(data: T, **meta: Any) -> "Result[T]":
        return Result(ok=True, data=data, meta=meta)

    @staticmethod
    def Err(code: ErrorCode | str, error: str, **meta: Any) -> "Result[T]":
        if isinstance(code, Enum):
            code = code.value
        return Result(ok=False, error=error, code=str(code), meta=meta)

    def unwrap(self) -> T:
        """Return `data`, raising ValueError for failed or empty results."""
        if not self.ok or self.data is None:
            raise ValueError(f"[{self.code}] {self.error}")
        return self.data
