from __future__ import annotations

import logging

import structlog

_configured = False

# Event keys that may carry backend credentials.
_REDACTED_KEYS = frozenset({"api_key", "authorization", "x_goog_api_key"})


def _redact_credentials(_logger, _method_name, event_dict):
    for key in _REDACTED_KEYS & event_dict.keys():
        event_dict[key] = "***"
    return event_dict


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    global _configured
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _redact_credentials,
    ]

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper(), logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str):
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
