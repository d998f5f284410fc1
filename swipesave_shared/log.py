"""
Console logging for the `swipesave.*` logger tree.

Lines look like `👉 SwipeSave [⚠️] features.workflow.converter [rid]: message`.
"""
import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Final

PREFIX: Final[str] = "👉 SwipeSave"
ROOT_NAME: Final[str] = "swipesave"

SUCCESS_LEVEL: Final[int] = 25
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

LEVEL_EMOJI: Final[dict[int, str]] = {
    logging.DEBUG: "🔍",
    logging.INFO: "ℹ️",
    SUCCESS_LEVEL: "✅",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "🔥",
}

# Set by the request middleware; read back on every record.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class CorrelationFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("")
        return True


class EmojiFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        icon = LEVEL_EMOJI.get(record.levelno, "👉")
        rid = str(getattr(record, "request_id", "") or "").strip()
        where = f"{record.name} [{rid}]" if rid else record.name
        line = f"{PREFIX} [{icon}] {where}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _short_name(name: str) -> str:
    if name == "__main__":
        return "main"
    package, _, module = name.partition(".")
    if package.startswith("swipesave_") and module:
        return module
    return name


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return `swipesave.<module>` with the emoji console handler attached once.

    `swipesave_backend.adapters.comfy.client` becomes
    `swipesave.adapters.comfy.client`.
    """
    logger = logging.getLogger(f"{ROOT_NAME}.{_short_name(name)}")
    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(EmojiFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO if level is None else level)
    elif level is not None:
        logger.setLevel(level)
    return logger


def log_success(logger: logging.Logger, message: str) -> None:
    logger.log(SUCCESS_LEVEL, message)


def log_structured(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log one JSON object: `{"message", "timestamp", "context"}`."""
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    logger.log(
        level,
        json.dumps({"message": message, "timestamp": stamp, "context": context}, ensure_ascii=False, default=str),
    )


def set_log_level(level: int) -> None:
    """Apply `level` to every SwipeSave logger created so far."""
    prefix = f"{ROOT_NAME}."
    for name, candidate in list(logging.Logger.manager.loggerDict.items()):
        if name.startswith(prefix) and isinstance(candidate, logging.Logger):
            candidate.setLevel(level)
