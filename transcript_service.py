"""
Transcript pipeline: resolve the video ID, then run the caption strategies in
order until one of them returns text.

Pipeline order:
1. page-captions (watch page player response)
2. timedtext (direct endpoint, per language)
3. innertube (youtubei player API)

Every run gets its own HTTP session and request log context; nothing is
cached or shared between requests.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import requests

from http_client import make_http_session
from log_events import EventEmitter, StageTimer, evt
from logging_setup import clear_request_ctx, get_logger, set_request_ctx
from page_captions_service import PageCaptionsStrategy
from timedtext_service import TimedtextStrategy
from transcript_config import TranscriptConfig, get_transcript_config
from transcript_strategy import TranscriptStrategy
from video_id import resolve_video_id
from youtubei_service import InnertubeStrategy

logger = get_logger(__name__)

INVALID_VIDEO_ID_MESSAGE = "Invalid video ID"
NO_CAPTIONS_MESSAGE = "No captions available for this video"


class TranscriptMethod(str, Enum):
    """Which strategy produced a transcript. Reported, never acted on."""
    PAGE_CAPTIONS = "page-captions"
    TIMEDTEXT = "timedtext"
    INNERTUBE = "innertube"


class FailureKind(str, Enum):
    INVALID_VIDEO_ID = "invalid_video_id"
    NO_CAPTIONS = "no_captions"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class TranscriptSuccess:
    transcript: str
    method: TranscriptMethod
    video_id: str

    success = True

    def to_envelope(self) -> Dict[str, Any]:
        return {
            "success": True,
            "transcript": self.transcript,
            "method": self.method.value,
            "error": None,
        }


@dataclass(frozen=True)
class TranscriptFailure:
    error: str
    kind: FailureKind

    success = False

    def to_envelope(self) -> Dict[str, Any]:
        return {
            "success": False,
            "transcript": None,
            "method": None,
            "error": self.error,
        }


ExtractionOutcome = Union[TranscriptSuccess, TranscriptFailure]

StrategyFactory = Callable[[requests.Session, TranscriptConfig, EventEmitter], TranscriptStrategy]

STRATEGY_REGISTRY: Dict[str, StrategyFactory] = {
    TranscriptMethod.PAGE_CAPTIONS.value: PageCaptionsStrategy,
    TranscriptMethod.TIMEDTEXT.value: TimedtextStrategy,
    TranscriptMethod.INNERTUBE.value: InnertubeStrategy,
}


def default_strategy_factories(config: TranscriptConfig) -> List[StrategyFactory]:
    """Factories for the strategies enabled in config, in pipeline order."""
    return [STRATEGY_REGISTRY[name] for name in config.enabled_methods()]


class TranscriptService:
    """
    Runs the strategy chain for one video at a time.

    Args:
        config: transcript configuration (global instance when omitted)
        strategy_factories: ordered callables building a strategy from
            (session, config, events); defaults to the enabled strategies
        session_factory: builds the per-run HTTP session
    """

    def __init__(self, config: Optional[TranscriptConfig] = None,
                 strategy_factories: Optional[Sequence[StrategyFactory]] = None,
                 session_factory: Callable[[], requests.Session] = make_http_session):
        self.config = config or get_transcript_config()
        if strategy_factories is None:
            strategy_factories = default_strategy_factories(self.config)
        self.strategy_factories = list(strategy_factories)
        self.session_factory = session_factory

    def get_transcript(self, value: Any, request_id: Optional[str] = None) -> ExtractionOutcome:
        """
        Resolve `value` (URL or bare ID) and extract its transcript.

        Never raises: an invalid ID, exhaustion of every strategy and
        unexpected errors are all reported as a TranscriptFailure.
        """
        request_id = request_id or uuid.uuid4().hex[:12]
        video_id = resolve_video_id(value)
        if video_id is None:
            set_request_ctx(request_id=request_id)
            try:
                evt("transcript_request_rejected", outcome="invalid_video_id")
            finally:
                clear_request_ctx()
            return TranscriptFailure(INVALID_VIDEO_ID_MESSAGE, FailureKind.INVALID_VIDEO_ID)

        set_request_ctx(request_id=request_id, video_id=video_id)
        try:
            evt("transcript_request_start", video_id=video_id,
                strategies=len(self.strategy_factories))
            return self._run_pipeline(video_id)
        finally:
            clear_request_ctx()

    def _run_pipeline(self, video_id: str) -> ExtractionOutcome:
        session = None
        try:
            session = self.session_factory()
            events = EventEmitter(logger)

            for factory in self.strategy_factories:
                strategy = factory(session, self.config, events)
                method = strategy.method

                with StageTimer(method, events, video_id=video_id) as stage:
                    evt("transcript_method_start", method=method, video_id=video_id)
                    transcript = strategy.attempt(video_id)
                    if not transcript:
                        stage.outcome = "no_transcript"

                if transcript:
                    evt("transcript_method_success", method=method, video_id=video_id,
                        length=len(transcript))
                    return TranscriptSuccess(transcript, TranscriptMethod(method), video_id)

                evt("transcript_method_failed", method=method, video_id=video_id)

            evt("transcript_pipeline_exhausted", video_id=video_id, outcome="no_captions")
            return TranscriptFailure(NO_CAPTIONS_MESSAGE, FailureKind.NO_CAPTIONS)

        except Exception as e:
            logger.exception("Transcript pipeline failed")
            evt("transcript_pipeline_error", video_id=video_id, outcome="error",
                detail=f"{type(e).__name__}: {str(e)[:200]}")
            return TranscriptFailure(str(e) or type(e).__name__, FailureKind.INTERNAL_ERROR)

        finally:
            if session is not None:
                session.close()
