from __future__ import annotations

import json
import logging
import re
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Any, Mapping, MutableMapping, Optional

ROOT_LOGGER = "treetoken"


@dataclass(frozen=True)
class LoggingOptions:
    level: str = "INFO"
    format: str = "text"  # text | json
    file: Optional[str] = None
    redact: bool = True


_SECRET_KEY_FRAGMENTS = (
    "api_key",
    "apikey",
    "authorization",
    "mnemonic",
    "password",
    "private_key",
    "secret",
    "seed",
)

_RE_KV = re.compile(
    r"(?P<key>api[_-]?key|private[_-]?key|mnemonic|password|secret|seed)\s*[:=]\s*(?P<value>[^\s,;]+)",
    flags=re.IGNORECASE,
)

_TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"
_FILE_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context is not None:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _looks_secret_key(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in _SECRET_KEY_FRAGMENTS)


def _redact_str(value: str) -> str:
    return _RE_KV.sub(lambda match: f"{match.group('key')}=[REDACTED]", value)


def _redact_any(value: Any, *, depth: int, max_depth: int) -> Any:
    """Redact secret-like values in nested structures.

    Preconditions:
        - max_depth >= 0

    Postconditions:
        - Secret-like keys have their values replaced with "[REDACTED]"
        - Structures deeper than max_depth are replaced wholesale
    """
    if depth > max_depth:
        return "[REDACTED]"
    if isinstance(value, str):
        return _redact_str(value)
    if isinstance(value, bytes):
        return "[REDACTED]"
    if isinstance(value, Mapping):
        redacted: dict[Any, Any] = {}
        for k, v in value.items():
            if isinstance(k, str) and _looks_secret_key(k):
                redacted[k] = "[REDACTED]"
            else:
                redacted[k] = _redact_any(v, depth=depth + 1, max_depth=max_depth)
        return redacted
    if isinstance(value, (list, tuple)):
        return [_redact_any(v, depth=depth + 1, max_depth=max_depth) for v in value]
    return value


class RedactionFilter(logging.Filter):
    def __init__(self, *, max_depth: int = 4):
        super().__init__()
        self._max_depth = max_depth

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _redact_str(record.msg)
        context = getattr(record, "context", None)
        if isinstance(context, MutableMapping):
            record.context = _redact_any(context, depth=0, max_depth=self._max_depth)
        return True


def _normalize_format(fmt: str) -> str:
    lowered = fmt.strip().lower()
    if lowered in {"text", "json"}:
        return lowered
    raise ValueError(f"Invalid log format: {fmt}")


def _attach(logger: logging.Logger, handler: logging.Handler, fmt: str, text_format: str, redact: bool) -> None:
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(text_format))
    if redact:
        handler.addFilter(RedactionFilter())
    logger.addHandler(handler)


def configure_logging(options: LoggingOptions) -> logging.Logger:
    """Configure the "treetoken" logger hierarchy.

    Postconditions:
        - Logs emit to stderr (and an optional rotating file)
        - Redaction filter attached unless options.redact is False
        - Calling again replaces previously installed handlers
    """
    fmt = _normalize_format(options.format)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, options.level.strip().upper(), logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    _attach(logger, logging.StreamHandler(sys.stderr), fmt, _TEXT_FORMAT, options.redact)
    if options.file:
        file_handler = RotatingFileHandler(options.file, maxBytes=10 * 1024 * 1024, backupCount=3)
        _attach(logger, file_handler, fmt, _FILE_TEXT_FORMAT, options.redact)
    return logger
