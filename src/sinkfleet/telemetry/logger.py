"""Logging helpers: console output with game fields, plus OpenTelemetry log export."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:
    from .config import TelemetryConfig

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s %(game_fields)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

# Keys the engine and AI pass through ``extra`` that are worth showing on the console.
GAME_FIELDS = ("owner", "player", "ship_name", "x", "y", "strategy", "attempts", "winner")

_OTLP_HANDLER: logging.Handler | None = None


class _ConsoleRecordFilter(logging.Filter):
    """Flattens game fields into ``game_fields`` and defaults the trace ids outside a span."""

    def filter(self, record: logging.LogRecord) -> bool:
        for attr in ("otelTraceID", "otelSpanID"):
            if not hasattr(record, attr):
                setattr(record, attr, "-")
        pairs = [f"{key}={getattr(record, key)}" for key in GAME_FIELDS if hasattr(record, key)]
        record.game_fields = " ".join(pairs)
        return True


def get_logger(name: str = "sinkfleet") -> logging.Logger:
    return logging.getLogger(name)


def init_logging(config: TelemetryConfig) -> logging.Logger:
    """Set the ``sinkfleet`` level, add a console handler if none exists and export over OTLP."""
    logger = get_logger("sinkfleet")
    logger.setLevel(config.log_level)
    _install_console_handler(config.log_level)

    provider = LoggerProvider(resource=Resource.create(config.resource()))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    _install_otlp_handler(LoggingHandler(level=config.log_level, logger_provider=provider))
    return logger


def _install_console_handler(level: str) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in root_logger.handlers:
        handler.addFilter(_ConsoleRecordFilter())


def _install_otlp_handler(handler: logging.Handler) -> None:
    """Attach the OTLP handler to the root logger, replacing any earlier one."""
    global _OTLP_HANDLER
    root_logger = logging.getLogger()
    if _OTLP_HANDLER is not None:
        root_logger.removeHandler(_OTLP_HANDLER)
    root_logger.addHandler(handler)
    _OTLP_HANDLER = handler
