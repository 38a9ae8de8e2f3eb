from __future__ import annotations
import logging, sys
from contextlib import contextmanager
from typing import Iterator

import structlog

# Vendor clients log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "slack_sdk", "aiosqlite")

def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    processors.append(structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

def get_logger(name: str = "conduit"):
    return structlog.get_logger(name)

@contextmanager
def tenant_context(tenant_id: str, channel: str | None = None) -> Iterator[None]:
    """Bind tenant (and channel) to every log line emitted inside the block."""
    fields = {"tenant_id": tenant_id}
    if channel:
        fields["channel"] = channel
    with structlog.contextvars.bound_contextvars(**fields):
        yield
