"""Application-wide structlog configuration for JSON logging."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter, add_logger_name
from opentelemetry.trace import get_current_span


def _add_trace_context(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Inject trace_id/span_id from the current OpenTelemetry span, if any."""
    span_context = get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = f"{span_context.trace_id:032x}"
        event_dict["span_id"] = f"{span_context.span_id:016x}"
    return event_dict


def setup_logging(
    service_name: str,
    environment: str | None = None,
    level: int = logging.INFO,
) -> None:
    """Send structlog events and plain stdlib records (uvicorn, openai) to stdout as JSON lines.

    ``service`` (and ``environment`` when given) are bound as context
    variables, so every line logged afterwards carries them; the HTTP layer
    binds ``request_id`` the same way. Safe to call again: the previous
    JSON handler is replaced, not duplicated.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_trace_context,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=pre_chain + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(),
            ],
        )
    )

    root = logging.getLogger()
    for old in [h for h in root.handlers if isinstance(h.formatter, ProcessorFormatter)]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)
    # The access log duplicates fetch_transcript.* events.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    bind_args: dict[str, Any] = {"service": service_name}
    if environment:
        bind_args["environment"] = environment
    structlog.contextvars.bind_contextvars(**bind_args)
