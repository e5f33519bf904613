"""Structured logging configuration for the application."""

from datetime import UTC, datetime
import json
import logging
import sys

from kural.core.config import settings


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging() -> None:
    """Configure application logging based on environment."""
    # Determine log level
    log_level = logging.INFO
    if settings.ENVIRONMENT == "development":
        log_level = logging.DEBUG
    elif settings.ENVIRONMENT == "production":
        log_level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    # Use JSON formatter in production, standard elsewhere
    if settings.ENVIRONMENT == "production":
        formatter = JSONFormatter()
    else:
        formatter = StandardFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set specific log levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class AccessLogger:
    """Logger for listing and lookup access, carrying the caller identity."""

    def __init__(self) -> None:
        self.logger = get_logger("access")

    def log_listing(
        self,
        category: str,
        page: int,
        limit: int,
        total: int,
        user_id: str | None = None,
        filters_applied: int = 0,
    ) -> None:
        """Log a served listing page."""
        self.logger.info(
            f"Listed {category}: page {page} of {total} matches",
            extra={
                "extra_fields": {
                    "event_type": "listing",
                    "category": category,
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "filters_applied": filters_applied,
                    "user_id": user_id,
                }
            },
        )

    def log_lookup(
        self, resource: str, key: str, found: bool, user_id: str | None = None
    ) -> None:
        """Log a single-record lookup."""
        message = f"Lookup {resource} {key}: {'hit' if found else 'miss'}"
        extra = {
            "extra_fields": {
                "event_type": "lookup",
                "resource": resource,
                "key": key,
                "found": found,
                "user_id": user_id,
            }
        }
        if found:
            self.logger.info(message, extra=extra)
        else:
            self.logger.warning(message, extra=extra)

    def log_rejected_token(self, reason: str, ip_address: str | None = None) -> None:
        """Log a bearer token that failed verification."""
        self.logger.warning(
            f"Rejected bearer token: {reason}",
            extra={
                "extra_fields": {
                    "event_type": "rejected_token",
                    "reason": reason,
                    "ip_address": ip_address,
                }
            },
        )


# Global access logger instance
access_logger = AccessLogger()
