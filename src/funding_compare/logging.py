"""Structured logging configuration using structlog with async context propagation."""

import logging
import os

import structlog


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog through stdlib logging with JSON or console output.

    Context bound with ``bind_cycle`` travels through ``structlog.contextvars``,
    so every event emitted while a refresh cycle runs carries its ``cycle_id``.
    Set ``LOG_FORMAT=json`` for machine-readable output; the default is the
    human-readable console renderer.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # ccxt logs every request at DEBUG
    logging.getLogger("ccxt").setLevel(logging.WARNING)


def bind_cycle(cycle_id: int) -> None:
    """Attach a refresh cycle id to all log events in the current context."""
    structlog.contextvars.bind_contextvars(cycle_id=cycle_id)


def unbind_cycle() -> None:
    """Drop the refresh cycle id from the current logging context."""
    structlog.contextvars.unbind_contextvars("cycle_id")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
