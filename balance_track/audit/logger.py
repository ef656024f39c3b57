"""
Audit Logger

DESIGN DECISION: Every change to a snapshot is logged as an audit event.
This provides:
1. Traceability of rule edits
2. Debugging capability when input is rejected

The engine itself is synchronous and side-effect free apart from logging,
so the audit logger is synchronous as well.
"""

import logging

import structlog

from balance_track.config import get_settings
from balance_track.models.audit import AuditEvent, AuditSeverity

_PACKAGE_LOGGER = "balance_track"


def configure_logging() -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Level and renderer come from LoggingSettings. Safe to call again after
    get_settings.cache_clear() to pick up new values.
    """
    log_settings = get_settings().logging
    renderer = (
        structlog.processors.JSONRenderer()
        if log_settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

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
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.getLogger(_PACKAGE_LOGGER).setLevel(log_settings.level)


configure_logging()


def get_logger(name: str = _PACKAGE_LOGGER):
    """Get a structlog logger bound to a balance_track module name."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Writes each event to the structured log at the level matching its
    severity.
    """

    def __init__(self, logger=None):
        self._logger = logger or get_logger("balance_track.audit")

    def log(self, event: AuditEvent) -> AuditEvent:
        """Log an audit event and return it."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        return event
