"""Logging configuration for connector actions."""

import logging
import sys
from typing import Optional

import structlog


def setup_logging(level: str = "INFO", json_logs: bool = True, stream: Optional[object] = None) -> None:
    """Set up structlog on top of the standard library logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=stream or sys.stdout,
    )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Set specific loggers to appropriate levels
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def mask_inputs(inputs: dict, encrypted: set) -> dict:
    """Return a copy of the inputs that is safe to log."""
    return {key: ("***" if key in encrypted and value else value) for key, value in inputs.items()}
