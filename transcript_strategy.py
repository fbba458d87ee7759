"""
Common contract for transcript extraction strategies.

A strategy takes a video ID and returns the transcript text or None. It never
raises: network errors, upstream blocks and shape drift all end the attempt
with None so the pipeline can move on to the next strategy.
"""

import logging
from typing import Optional

import requests

from caption_tracks import LanguagePolicy
from log_events import EventEmitter, classify_error_type
from logging_setup import get_logger
from transcript_config import TranscriptConfig, get_transcript_config


class TranscriptStrategy:
    """Base class; subclasses set `method` and implement `_attempt`."""

    method = "unknown"

    def __init__(self, session: requests.Session, config: Optional[TranscriptConfig] = None,
                 events: Optional[EventEmitter] = None):
        self.session = session
        self.config = config or get_transcript_config()
        self.events = (events or EventEmitter(get_logger(type(self).__module__))).bind(method=self.method)

    @property
    def timeout(self) -> int:
        return self.config.fetch_timeout

    @property
    def policy(self) -> LanguagePolicy:
        return self.config.language_policy()

    def attempt(self, video_id: str) -> Optional[str]:
        """Run the strategy; any exception is logged and reported as None."""
        try:
            transcript = self._attempt(video_id)
        except Exception as e:
            self.events.emit(
                "strategy_error",
                level=logging.WARNING,
                video_id=video_id,
                error_type=classify_error_type(e),
                detail=f"{type(e).__name__}: {str(e)[:200]}",
            )
            return None

        if transcript:
            self.events.emit("strategy_success", video_id=video_id, length=len(transcript))
            return transcript
        return None

    def _attempt(self, video_id: str) -> Optional[str]:
        raise NotImplementedError
