# logging_config.py

import logging
import structlog
import sys
from typing import Any, Dict, Optional
from flask import has_request_context, request, g


def add_request_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add Flask request context to log entries"""
    if has_request_context():
        event_dict["request_id"] = getattr(g, 'request_id', None)
        event_dict["method"] = request.method
        event_dict["path"] = request.path
    return event_dict


def setup_logging(app_name: str = "message-cache", log_level: str = "INFO") -> None:
    """
    Configure structured logging

    Args:
        app_name: Application name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_request_context,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    logging.getLogger(app_name).setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """
    Get a structured logger instance

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog instance
    """
    return structlog.get_logger(name or __name__)


class MessageEventLogger:
    """Operational events from the message save and query paths"""

    def __init__(self):
        self.logger = get_logger("message_events")

    def log_orphan_message(self, contact_number: Optional[str], service: Optional[str],
                           messageservice_sid: Optional[str], service_id: Optional[str]):
        """Inbound message with no active conversation to attach to"""
        self.logger.error(
            "Orphan message",
            contact_number=contact_number,
            service=service,
            messageservice_sid=messageservice_sid,
            service_id=service_id,
            event_type="orphan_message"
        )

    def log_duplicate_message(self, campaign_contact_id: Optional[int], service_id: Optional[str],
                              detected_by: str):
        """Inbound message already recorded for this conversation"""
        self.logger.error(
            "Duplicate message",
            campaign_contact_id=campaign_contact_id,
            service_id=service_id,
            detected_by=detected_by,
            event_type="duplicate_message"
        )

    def log_thread_seeded(self, contact_count: int, message_count: int):
        """Cache entries rebuilt from a database read"""
        self.logger.info(
            "Thread cache seeded",
            contact_count=contact_count,
            message_count=message_count,
            event_type="thread_cache_seeded"
        )

    def log_thread_rebuild(self, campaign_contact_id: int, error: str):
        """Cache entry dropped after a failed durable write"""
        self.logger.warning(
            "Thread cache entry cleared for rebuild",
            campaign_contact_id=campaign_contact_id,
            error=error,
            event_type="thread_cache_rebuild"
        )


# Global logger instance
message_event_logger = MessageEventLogger()
