"""
Audit logging infrastructure for the export engine.

Provides structured logging with structlog for:
- Export attempts (format, style, layout)
- Export outcomes (exported, rejected, failed)
- Output size, page count and duration
"""

import logging
import structlog
from datetime import datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, Field


def configure_export_logging() -> None:
    """
    Route export events and API request logs to stdout as JSON lines.

    Called once by the HTTP adapter at startup. Library users who never call
    it get structlog's default console output instead.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            # Render exc_info passed by the API on failed exports
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_export_logger(name: str) -> structlog.BoundLogger:
    """
    Logger for export events, tagged with the emitting component.

    Args:
        name: Component name recorded in every event (e.g., "dispatcher")

    Returns:
        BoundLogger carrying a "module" field
    """
    return structlog.get_logger(module=name)


class ExportEvent(BaseModel):
    """One record per dispatcher call: the request and how it ended."""

    event_type: str = Field(
        default="document_export",
        description="Type of audit event"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the event"
    )
    format: str = Field(
        description="Requested export format as received"
    )
    style: Optional[str] = Field(
        default=None,
        description="Resolved presentation style"
    )
    layout: Optional[str] = Field(
        default=None,
        description="Resolved page layout"
    )
    result: Literal["EXPORTED", "REJECTED", "FAILED"] = Field(
        description="Export outcome"
    )
    duration_ms: int = Field(
        ge=0,
        description="Time taken for extraction and rendering in milliseconds"
    )
    size_bytes: Optional[int] = Field(
        default=None,
        description="Size of the produced document"
    )
    page_count: Optional[int] = Field(
        default=None,
        description="Number of pages (PDF only)"
    )
    section_count: Optional[int] = Field(
        default=None,
        description="Number of sections extracted"
    )
    reason: Optional[str] = Field(
        default=None,
        description="Reason for REJECTED or FAILED status"
    )


def log_export_attempt(
    logger: structlog.BoundLogger,
    event: ExportEvent
) -> None:
    """
    Log an export attempt with appropriate log level.

    Args:
        logger: The structlog bound logger
        event: The audit event to log

    Logs at INFO level for EXPORTED, WARNING for REJECTED/FAILED.
    """
    event_dict = event.model_dump(mode="json")

    if event.result == "EXPORTED":
        logger.info("export_attempt", **event_dict)
    else:
        logger.warning("export_attempt", **event_dict)
