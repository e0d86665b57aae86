"""structlog setup for ccd.

Every CLI invocation calls ``configure_logging`` once from the click group.
Records flow through stdlib logging so each configured output (stderr,
stdout, or a log file) filters at its own level. Console outputs go quiet
while a spinner is drawing; file outputs never do.

Each invocation gets a short run ID that is stamped on every record, so the
lines of one ``ccd rebuild`` can be picked out of a shared log file.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from ccd.config.models import LoggingConfig, LogOutputConfig

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)


def get_run_id() -> str | None:
    return _run_id.get()


def set_run_id(run_id: str | None = None) -> str:
    """Set the run ID for this invocation, generating one when not given."""
    rid = run_id or uuid4().hex[:12]
    _run_id.set(rid)
    return rid


def _add_run_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_run_id():
        event_dict["run_id"] = rid
    return event_dict


class ConsoleSuppressingFilter(logging.Filter):
    """Drops console records while a spinner owns the terminal line."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        # progress imports this module's get_logger
        from ccd.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _level(name: str) -> int:
    return int(getattr(logging, name.upper()))


def _handler_for(output: LogOutputConfig) -> logging.Handler:
    handler: logging.Handler
    if output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif output.destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, mode="a", encoding="utf-8", errors="backslashreplace")
    handler.addFilter(ConsoleSuppressingFilter())
    return handler


def _formatter_for(
    output: LogOutputConfig, shared_processors: list[structlog.types.Processor]
) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        # Only a terminal gets colors; log files and pipes get plain text
        colors = output.destination == "stderr" and sys.stderr.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer, foreign_pre_chain=shared_processors
    )


def configure_logging(config: LoggingConfig | None = None, *, level: str | None = None) -> None:
    """Install structlog and one stdlib handler per configured output.

    ``level`` overrides ``config.level`` (the CLI passes DEBUG for ``-v``).
    Calling this again replaces the handlers from the previous call.
    """
    from ccd.config.models import LoggingConfig

    if config is None:
        config = LoggingConfig()
    default_level = _level(level or config.level)
    output_levels = [
        _level(o.level) if o.level and level is None else default_level for o in config.outputs
    ]
    # The root lets through whatever the most verbose output wants
    min_level = min([default_level, *output_levels])

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_run_id,  # type: ignore[list-item]
    ]
    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers:
        if isinstance(existing.formatter, structlog.stdlib.ProcessorFormatter):
            existing.close()
    root_logger.handlers.clear()
    root_logger.setLevel(min_level)

    for output, output_level in zip(config.outputs, output_levels, strict=True):
        handler = _handler_for(output)
        handler.setLevel(output_level)
        handler.setFormatter(_formatter_for(output, shared_processors))
        root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
