"""Logging setup for the agent client and its CLI.

The CLI writes activity rows and results to stdout, so log records always
go to stderr.  ``LoggingConfig.json_output`` picks JSON lines (one object
per record, for log shippers) over plain text for terminals.

A host process that embeds this client may run it under an OpenTelemetry
span; the active ``trace_id``/``span_id`` are then attached to each record.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from marketing_hub.configs.system import LoggingConfig

# Libraries that log every request at INFO; a streaming run would drown
# the activity output.
_NOISY_LOGGERS = ("httpx", "httpcore", "opentelemetry")

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_TEXT_DATEFMT = "%H:%M:%S"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"


class _SpanContextFilter(logging.Filter):
    """Adds the active span's ids (empty strings outside a span)."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        valid = ctx.is_valid
        record.trace_id = format(ctx.trace_id, "032x") if valid else ""  # type: ignore[attr-defined]
        record.span_id = format(ctx.span_id, "016x") if valid else ""  # type: ignore[attr-defined]
        return True


def _build_formatter(json_output: bool) -> logging.Formatter:
    if not json_output:
        return logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_TEXT_DATEFMT)

    from pythonjsonlogger.json import JsonFormatter

    return JsonFormatter(
        fmt=_JSON_FORMAT,
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        defaults={"trace_id": "", "span_id": ""},
    )


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Route all records to a single stderr handler; returns that handler.

    Calling it again replaces the previous handler, so the CLI can apply
    ``--debug``/``--json-logs`` on top of the configured defaults.
    """
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(_SpanContextFilter())
    handler.setFormatter(_build_formatter(config.json_output))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
