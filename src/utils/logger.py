"""
PPE Safety Violation Tracker - Structured Logging
Provides JSON-formatted logging for log aggregation queries.
"""

import logging
import sys
from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL, config


def setup_logger(name: str = __name__) -> logging.Logger:
    """
    Configure structured JSON logger.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Dashboard statistics computed", extra={
        ...     "stat_kind": "dashboard",
        ...     "duration_ms": 42.1
        ... })
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


# Global logger instance
logger = setup_logger('ppe_safety')


def log_statistics_computed(stat_kind: str, duration_ms: float):
    """Log a statistics computation triggered by a cache miss."""
    logger.info("Statistics computed (cache miss)", extra={
        "event_type": "statistics_computed",
        "stat_kind": stat_kind,
        "duration_ms": round(duration_ms, 2),
        "environment": config.environment
    })


def log_cache_eviction(reason: str, category: str, evicted_entries: int):
    """Log removal of every cached entry of one statistics category."""
    logger.info("Statistics cache evicted", extra={
        "event_type": "cache_eviction",
        "reason": reason,
        "category": category,
        "evicted_entries": evicted_entries
    })


def log_violation_created(violation_id: int, employee_id: int, reported_by_id: int):
    """Log a successfully stored violation report."""
    logger.info("Violation created", extra={
        "event_type": "violation_created",
        "violation_id": violation_id,
        "employee_id": employee_id,
        "reported_by_id": reported_by_id
    })


def log_violation_deleted(violation_id: int):
    """Log a successfully deleted violation."""
    logger.info("Violation deleted", extra={
        "event_type": "violation_deleted",
        "violation_id": violation_id
    })


def log_api_request(method: str, path: str, status_code: int, duration_ms: float):
    """Log API request metrics."""
    logger.info("API request", extra={
        "event_type": "api_request",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms
    })


def log_database_error(error: Exception, query_context: str = None):
    """Log database error with context."""
    logger.error("Database error", extra={
        "event_type": "database_error",
        "error_type": type(error).__name__,
        "error_message": str(error),
        "query_context": query_context
    }, exc_info=True)
