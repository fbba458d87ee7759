"""
Event helper functions for structured JSON logging.

This module provides consistent event emission, the injectable event port
handed to transcript strategies, and stage timing utilities.
"""

import logging
import time
from typing import Any, Dict, Optional

# Get the main application logger
logger = logging.getLogger()


def evt(event: str, **fields) -> None:
    """
    Emit a structured event with consistent field naming.

    Args:
        event: The event type/name
        **fields: Additional fields to include in the event

    Example:
        evt("transcript_request", video_id="abc123", lang="it")
        evt("stage_result", method="timedtext", outcome="success", dur_ms=1250)
    """
    event_data = {"event": event}
    event_data.update(fields)

    logger.info("", extra=event_data)


class EventEmitter:
    """
    Structured event port bound to a logger and a fixed set of fields.

    Strategies receive one of these instead of logging through module globals,
    so the same diagnostics can be redirected or captured in tests.

    Example:
        events = EventEmitter(get_logger("timedtext_service"), method="timedtext")
        events.emit("timedtext_lang_failed", lang="it", status=404)
    """

    def __init__(self, target: Optional[logging.Logger] = None, **bound_fields):
        self.target = target or logger
        self.bound_fields = bound_fields

    def bind(self, **fields) -> "EventEmitter":
        """Return a new emitter carrying additional bound fields."""
        merged = dict(self.bound_fields)
        merged.update(fields)
        return EventEmitter(self.target, **merged)

    def emit(self, event: str, level: int = logging.INFO, **fields) -> None:
        event_data: Dict[str, Any] = {"event": event}
        event_data.update(self.bound_fields)
        event_data.update(fields)
        self.target.log(level, "", extra=event_data)

    def warning(self, event: str, **fields) -> None:
        self.emit(event, level=logging.WARNING, **fields)


class StageTimer:
    """
    Context manager for automatic stage timing with structured logging.

    Emits stage_start on entry and stage_result on exit, with automatic
    duration calculation. The outcome defaults to "success" and can be set
    by the caller (e.g. "no_transcript") before the block ends; an exception
    yields "error" and is never suppressed.

    Example:
        with StageTimer("timedtext", video_id=video_id) as stage:
            transcript = strategy.attempt(video_id)
            if not transcript:
                stage.outcome = "no_transcript"
    """

    def __init__(self, method: str, events: Optional[EventEmitter] = None, **context_fields):
        self.method = method
        self.events = events or EventEmitter()
        self.context_fields = context_fields
        self.start_time: Optional[float] = None
        self.outcome = "success"
        self.duration_ms = 0

    def __enter__(self):
        self.start_time = time.time()
        self.events.emit("stage_start", method=self.method, **self.context_fields)
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if self.start_time is not None:
            self.duration_ms = int((time.time() - self.start_time) * 1000)

        event_fields = {
            "method": self.method,
            "outcome": self.outcome,
            "dur_ms": self.duration_ms,
            **self.context_fields
        }

        if exc_type is not None:
            event_fields["outcome"] = "error"
            event_fields["detail"] = f"{exc_type.__name__}: {str(exc_value)}"

        self.events.emit("stage_result", **event_fields)

        # Don't suppress the exception - let it propagate
        return False


def classify_error_type(exception: Exception) -> str:
    """
    Classify an exception into an error type for structured logging.

    Args:
        exception: The exception to classify

    Returns:
        Error type string for consistent categorization
    """
    exception_name = type(exception).__name__
    exception_str = str(exception).lower()

    if exception_name in ("Timeout", "ReadTimeout", "ConnectTimeout") or "timed out" in exception_str:
        return "timeout_error"

    if exception_name in ("ConnectionError", "SSLError", "ProxyError") or any(
        term in exception_str for term in ["connection", "network", "dns", "ssl"]
    ):
        return "network_error"

    if exception_name in ("JSONDecodeError", "ValueError", "UnicodeDecodeError"):
        return "parse_error"

    if exception_name in ("KeyError", "TypeError", "AttributeError", "IndexError"):
        return "shape_error"

    if "captcha" in exception_str or "unusual traffic" in exception_str:
        return "blocked_error"

    return "service_error"
