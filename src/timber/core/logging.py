# src/timber/core/logging.py
"""Diagnostic logging for timber itself.

Timber's own warnings (failed sinks, schema misses, cache expiry) go through
structlog. configure_logging() wires structlog and stdlib logging into one
ProcessorFormatter handler so both produce the same records.

Diagnostics default to stderr: stdout belongs to ConsoleSink, whose JSON
lines must stay parseable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

from timber.core.config import LoggingSettings

_HANDLER_MARKER = "_timber_handler"


def _strip_formatter_keys(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]


def _render_chain(json_output: bool) -> list[Any]:
    if json_output:
        return [
            _strip_formatter_keys,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
        ]
    return [_strip_formatter_keys, structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Route structlog and stdlib logging through a single handler.

    Calling this again replaces the handler installed by the previous call;
    handlers installed by the host application are left alone.

    Args:
        settings: Renderer and level; defaults to LoggingSettings()
        stream: Destination; defaults to sys.stderr at call time

    Returns:
        The installed handler
    """
    settings = settings if settings is not None else LoggingSettings()
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=_render_chain(settings.json_output),
            foreign_pre_chain=pre_chain,
        )
    )
    setattr(handler, _HANDLER_MARKER, True)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if getattr(h, _HANDLER_MARKER, False)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(settings.level)
    return handler
