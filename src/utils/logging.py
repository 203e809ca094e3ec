from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars


# Client libraries log one line per request; the proxy logs its own upstream events.
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _renderer(log_format: str) -> Any:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(
    *,
    level: str | None = None,
    log_file: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure stdlib logging + structlog for the proxy.

    - LOG_LEVEL (default INFO)
    - LOG_FORMAT: "json" (default) or "console"
    - LOG_FILE: optional JSON-lines file, written next to the console stream
    - request context bound via `bind_request_context` is merged into every event
    """
    lvl = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    fmt = (log_format or os.getenv("LOG_FORMAT") or "json").lower()
    file_path = log_file if log_file is not None else os.getenv("LOG_FILE", "")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(file_path))
    for h in handlers:
        h.setLevel(lvl)
        h.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(lvl)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, lvl, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(**values: Any) -> None:
    clear_contextvars()
    bind_contextvars(**values)


def clear_request_context() -> None:
    clear_contextvars()


def get_logger(**kwargs: Any):
    return structlog.get_logger().bind(**kwargs)
