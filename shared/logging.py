"""
Structured logging for the verifier.

Provides:
- setup_logging(): configure stdlib logging and structlog from LoggingSettings
- get_logger(): get a structlog logger
- hash_ip(): hash caller IPs in production so logs carry no raw addresses

JSON output in production, coloured console output in development.
Fields whose name looks like a credential are redacted before rendering.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

from config import LoggingSettings

REDACTED_FIELDS = {"secret", "token", "response", "api_key", "authorization"}
_SENSITIVE_FRAGMENTS = ("secret", "token", "password", "key")
_NEVER_REDACT = {"level", "event", "timestamp", "logger"}

_hash_ips = False


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("hcaptcha_verified", remote_ip=hash_ip(ip), accepted=True)
    """
    return structlog.get_logger(name)


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash an IP address for privacy in production.

    In production returns the first 16 hex chars of its SHA-256; in
    development returns the address unchanged. Empty and None pass through.
    """
    if not ip_address:
        return ip_address
    if _hash_ips:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact credential-looking fields from log events."""
    for key in list(event_dict.keys()):
        if key in _NEVER_REDACT:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(settings: LoggingSettings) -> None:
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True, pad_event=15, sort_keys=False
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(settings: LoggingSettings) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    # httpx logs every request at INFO, including the verify URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Initialize logging for the process.

    Call once at startup, before the verifier is built.
    """
    global _hash_ips

    settings = settings or LoggingSettings()
    _hash_ips = settings.is_production

    configure_stdlib_logging(settings)
    configure_structlog(settings)

    get_logger(__name__).info(
        "logging_initialized",
        env=settings.env,
        log_level=settings.log_level,
        log_format=settings.log_format,
    )
