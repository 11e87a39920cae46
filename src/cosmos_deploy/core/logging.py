"""
Structured logging for cosmos-deploy.

Configures structlog with a processor chain that attaches the current run
context (``run_id``, ``step``) to every event. Console rendering is used by
default. JSON output is available for CI log collection.

Configuration is read from environment variables:
- COSMOS_DEPLOY_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: WARNING)
- COSMOS_DEPLOY_LOG_FORMAT: json | console (default: console)

Usage:
    from cosmos_deploy.core.logging import configure_logging, get_logger, log_step

    configure_logging()
    log = get_logger(__name__)

    bind_context(run_id="abc123")
    with log_step("build"):
        ...
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_log_context: ContextVar[dict[str, Any]] = ContextVar("cosmos_deploy_log_context")  # noqa: B039

_configured = False


# ── Context ──────────────────────────────────────────────────────────────


def get_context() -> dict[str, Any]:
    """Get a copy of the current log context."""
    return dict(_log_context.get({}))


def bind_context(**kwargs: Any) -> dict[str, Any]:
    """Merge values into the current log context and return it."""
    ctx = get_context()
    ctx.update({k: v for k, v in kwargs.items() if v is not None})
    _log_context.set(ctx)
    return ctx


def clear_context() -> None:
    """Reset the log context to empty."""
    _log_context.set({})


def add_context_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach the bound context without overriding explicit event fields."""
    for key, value in get_context().items():
        event_dict.setdefault(key, value)
    return event_dict


# ── Configuration ────────────────────────────────────────────────────────


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging.

    Should be called once at startup (the CLI callback does this).
    Subsequent calls are no-ops unless ``force=True``.

    Args:
        level: Log level (overrides COSMOS_DEPLOY_LOG_LEVEL)
        format: Output format (overrides COSMOS_DEPLOY_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("COSMOS_DEPLOY_LOG_LEVEL", "WARNING")).upper()
    log_format = (format or os.environ.get("COSMOS_DEPLOY_LOG_FORMAT", "console")).lower()
    numeric_level = getattr(logging, log_level, logging.WARNING)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_context_processor,
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )
    logging.getLogger("cosmos_deploy").setLevel(numeric_level)

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


# ── Timing ───────────────────────────────────────────────────────────────


@contextmanager
def log_step(step: str, **fields: Any) -> Iterator[dict[str, Any]]:
    """Bind ``step`` to the log context and log start/finish with timing.

    The yielded dict can be filled with metrics that are attached to the
    completion event. The previous context is restored on exit.

    Example:
        with log_step("install", workspaces=3) as metrics:
            metrics["commands"] = 4
    """
    log = get_logger("cosmos_deploy.steps")
    token = _log_context.set({**get_context(), "step": step})
    metrics: dict[str, Any] = {}
    started = time.perf_counter()
    log.info("step.started", **fields)
    try:
        yield metrics
    except BaseException as e:
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        log.error("step.crashed", duration_ms=duration_ms, error=str(e), **fields)
        raise
    else:
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        log.info("step.completed", duration_ms=duration_ms, **fields, **metrics)
    finally:
        _log_context.reset(token)


__all__ = [
    "add_context_processor",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_context",
    "get_logger",
    "is_configured",
    "log_step",
]
