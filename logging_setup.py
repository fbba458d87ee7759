"""
Core logging infrastructure for the transcript service.

Provides single-line JSON logging with thread-safe request context,
rate limiting, and third-party library noise suppression.
"""

import json
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Set
from collections import defaultdict


# Thread-local storage for request context
_local = threading.local()

# Attributes every LogRecord carries; anything else was passed via extra=
_STANDARD_RECORD_FIELDS = set(
    logging.LogRecord('', logging.INFO, '', 0, '', (), None).__dict__
) | {'message', 'asctime'}

# Emitted first, in this order, when present
_ORDERED_FIELDS = ['method', 'event', 'outcome', 'dur_ms', 'detail']


def set_request_ctx(request_id: str = None, video_id: str = None):
    """
    Set thread-local context for request correlation.

    Args:
        request_id: Identifier of the incoming transcript request
        video_id: YouTube video ID being processed
    """
    if not hasattr(_local, 'context'):
        _local.context = {}

    if request_id is not None:
        _local.context['request_id'] = request_id
    if video_id is not None:
        _local.context['video_id'] = video_id


def clear_request_ctx():
    """Clear thread-local context."""
    if hasattr(_local, 'context'):
        _local.context.clear()


def get_request_ctx() -> Dict[str, str]:
    """Get current thread-local context."""
    if not hasattr(_local, 'context'):
        return {}
    return _local.context.copy()


class JsonFormatter(logging.Formatter):
    """
    JSON formatter with standardized field order and context injection.

    Produces single-line JSON with stable schema:
    ts, lvl, request_id, video_id, method, event, outcome, dur_ms, detail, <extras>
    """

    def format(self, record: logging.LogRecord) -> str:
        try:
            dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
            timestamp = dt.strftime('%Y-%m-%dT%H:%M:%S') + f'.{int(dt.microsecond / 1000):03d}Z'

            log_data: Dict[str, Any] = {
                'ts': timestamp,
                'lvl': record.levelname,
            }

            # Explicit fields on the record win over the thread-local context
            context = get_request_ctx()
            for field in ('request_id', 'video_id'):
                value = getattr(record, field, None) or context.get(field)
                if value is not None:
                    log_data[field] = value

            for field in _ORDERED_FIELDS:
                value = getattr(record, field, None)
                if value is not None:
                    log_data[field] = value

            for attr_name, attr_value in record.__dict__.items():
                if (attr_name in _STANDARD_RECORD_FIELDS or attr_name in log_data
                        or attr_name.startswith('_') or attr_value is None):
                    continue
                log_data[attr_name] = attr_value

            if 'detail' not in log_data and record.getMessage():
                log_data['detail'] = record.getMessage()

            if record.exc_info:
                log_data['exc_info'] = self.formatException(record.exc_info)

            return json.dumps(log_data, separators=(',', ':'), ensure_ascii=False, default=str)

        except Exception:
            # Fallback to basic formatting on any error
            return json.dumps({
                'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
                'lvl': record.levelname,
                'detail': str(record.msg),
            })


class RateLimitFilter(logging.Filter):
    """
    Rate limiting filter to prevent log spam.

    Limits messages to 5 per key per 60-second sliding window.
    Emits a suppression marker when the limit is first exceeded.
    Structured events below WARNING are pipeline steps, emitted a bounded
    number of times per request, and are never throttled.
    """

    def __init__(self, per_key: int = 5, window_sec: int = 60):
        super().__init__()
        self.per_key = per_key
        self.window_sec = window_sec
        self.counts: Dict[str, list] = defaultdict(list)
        self.suppressed: Set[str] = set()
        self._lock = threading.Lock()

    def _get_message_key(self, record: logging.LogRecord) -> str:
        """Key on level, event name and message template."""
        event = getattr(record, 'event', '') or ''
        message = record.getMessage()[:100]
        return f"{record.levelname}:{event}:{message}"

    def _cleanup_old_entries(self, key: str, now: float):
        cutoff = now - self.window_sec
        live = [ts for ts in self.counts.get(key, ()) if ts > cutoff]
        if live:
            self.counts[key] = live
        else:
            # Expired keys are dropped so the table only holds active keys
            self.counts.pop(key, None)
            self.suppressed.discard(key)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            if getattr(record, 'event', None) and record.levelno < logging.WARNING:
                return True

            key = self._get_message_key(record)
            now = time.time()

            with self._lock:
                self._cleanup_old_entries(key, now)

                if len(self.counts.get(key, ())) < self.per_key:
                    self.counts[key].append(now)
                    self.suppressed.discard(key)
                    return True

                if key not in self.suppressed:
                    self.suppressed.add(key)
                    original_msg = record.getMessage()
                    record.msg = f"{original_msg} [suppressed]"
                    record.args = ()
                    return True

                return False

        except Exception:
            return True


def configure_logging(log_level: str = "INFO", use_json: bool = True,
                      rate_limit: Optional[RateLimitFilter] = None) -> logging.Logger:
    """
    Configure application logging with JSON formatting and noise suppression.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_json: Whether to use JSON formatting (True) or basic formatting (False)
        rate_limit: Filter to attach to the handler in JSON mode (default RateLimitFilter())

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    handler = logging.StreamHandler()

    if use_json:
        handler.setFormatter(JsonFormatter())
        handler.addFilter(rate_limit or RateLimitFilter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    root_logger.addHandler(handler)

    _suppress_library_noise()

    return root_logger


def _suppress_library_noise():
    """Suppress verbose logging from third-party libraries."""
    library_levels = {
        'urllib3': logging.WARNING,
        'requests': logging.WARNING,
        'werkzeug': logging.WARNING,
    }

    for library, level in library_levels.items():
        logging.getLogger(library).setLevel(level)


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (defaults to the root logger)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
