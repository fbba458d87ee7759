"""
Caption track descriptors and the language preference policy.

Every strategy that has to choose between several caption tracks goes
through LanguagePolicy, so the preferred-language order is defined once and
injected everywhere instead of being hardcoded per strategy.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

ASR_KIND = "asr"
STANDARD_KIND = "standard"


@dataclass(frozen=True)
class CaptionTrack:
    """One subtitle track advertised by YouTube for a video."""
    language_code: str
    kind: str = STANDARD_KIND
    base_url: Optional[str] = None

    @property
    def is_asr(self) -> bool:
        return self.kind == ASR_KIND

    @property
    def label(self) -> str:
        return f"{self.language_code} (auto)" if self.is_asr else self.language_code

    @classmethod
    def from_renderer(cls, raw: Any) -> Optional["CaptionTrack"]:
        """Build a track from a playerCaptionsTracklistRenderer entry; None if not an object."""
        if not isinstance(raw, dict):
            return None
        language_code = raw.get("languageCode")
        base_url = raw.get("baseUrl")
        return cls(
            language_code=language_code if isinstance(language_code, str) else "",
            kind=ASR_KIND if raw.get("kind") == ASR_KIND else STANDARD_KIND,
            base_url=base_url if isinstance(base_url, str) and base_url else None,
        )


def tracks_from_renderer(raw_tracks: Any) -> List[CaptionTrack]:
    """Convert the raw captionTracks array, skipping malformed entries."""
    if not isinstance(raw_tracks, list):
        return []
    tracks = []
    for raw in raw_tracks:
        track = CaptionTrack.from_renderer(raw)
        if track is not None:
            tracks.append(track)
    return tracks


@dataclass(frozen=True)
class LanguagePolicy:
    """
    Ordered caption language preference.

    languages: preferred language codes, most wanted first
    fallback_prefix: any track whose code starts with this is taken before
        falling back to the first track
    regional_variants: extra codes only the timedtext endpoint is asked for
    """
    languages: Tuple[str, ...] = ("it", "en")
    fallback_prefix: Optional[str] = "en"
    regional_variants: Tuple[str, ...] = ("en-US", "en-GB")

    def timedtext_languages(self) -> List[str]:
        """Language codes to query the timedtext endpoint with, in order."""
        ordered: List[str] = []
        for code in list(self.languages) + list(self.regional_variants):
            if code and code not in ordered:
                ordered.append(code)
        return ordered

    def select(self, tracks: Iterable[CaptionTrack], prefer_manual: bool = True,
               use_prefix_fallback: bool = True) -> Optional[CaptionTrack]:
        """
        Pick the best track.

        With prefer_manual, each language is tried manual-first then ASR;
        otherwise the first track in that language wins. The first track in
        the list is the last resort, so a non-empty input always yields a track.
        """
        tracks = list(tracks)
        if not tracks:
            return None

        for language in self.languages:
            in_language = [t for t in tracks if t.language_code == language]
            if not in_language:
                continue
            if not prefer_manual:
                return in_language[0]
            manual = next((t for t in in_language if not t.is_asr), None)
            if manual:
                return manual
            asr = next((t for t in in_language if t.is_asr), None)
            if asr:
                return asr

        if use_prefix_fallback and self.fallback_prefix:
            prefixed = next(
                (t for t in tracks if t.language_code.startswith(self.fallback_prefix)), None
            )
            if prefixed:
                return prefixed

        return tracks[0]


DEFAULT_LANGUAGE_POLICY = LanguagePolicy()


def select_caption_track(tracks: Iterable[CaptionTrack],
                         policy: Optional[LanguagePolicy] = None) -> Optional[CaptionTrack]:
    """Full preference order: manual/ASR per language, then prefix match, then first."""
    return (policy or DEFAULT_LANGUAGE_POLICY).select(tracks)
