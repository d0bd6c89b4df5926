from __future__ import annotations

import logging
import sys
from typing import Any, Protocol, runtime_checkable

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.contextvars import bind_contextvars, merge_contextvars

_CONFIGURED = False


@runtime_checkable
class ILogger(Protocol):
    def debug(self, event: str, **kw: Any) -> Any: ...
    def info(self, event: str, **kw: Any) -> Any: ...
    def warning(self, event: str, **kw: Any) -> Any: ...
    def error(self, event: str, **kw: Any) -> Any: ...
    def exception(self, event: str, **kw: Any) -> Any: ...
    def bind(self, **kw: Any) -> "ILogger": ...


def _handler_for(fmt: str) -> tuple[logging.Handler, Any]:
    if fmt == "console":
        # stderr keeps stdout free for the result table
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_path=False,
            log_time_format="%H:%M:%S",
        )
        return handler, structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True)
    return logging.StreamHandler(stream=sys.stdout), structlog.processors.JSONRenderer()


def configure_logging(*, level: str = "INFO", fmt: str = "console") -> None:
    """
    Route structlog through stdlib logging. `fmt` is "console" (rich,
    key=value) or "json" (one object per line). Only the first call counts.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = level.upper()
    handler, renderer = _handler_for(fmt)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str = "css_concat") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind(**values: Any) -> None:
    """Attach values to every log line emitted from this context."""
    bind_contextvars(**values)
