#!/usr/bin/env python3
"""
Configuration management for the transcript pipeline.

Loads fetch timeouts, strategy feature flags, the caption language policy and
the impersonated youtubei client from environment variables, with sensible
defaults, clamping and a logged summary.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple, List

from caption_tracks import LanguagePolicy
from logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class TranscriptConfig:
    """Configuration shared by the pipeline and every strategy."""

    # Per-fetch timeout in seconds
    fetch_timeout: int = 10

    # Strategy feature flags
    enable_page_captions: bool = True
    enable_timedtext: bool = True
    enable_innertube: bool = True

    # Language policy
    preferred_languages: Tuple[str, ...] = ("it", "en")
    fallback_language_prefix: str = "en"
    timedtext_extra_languages: Tuple[str, ...] = ("en-US", "en-GB")

    # Impersonated youtubei client
    innertube_client_name: str = "ANDROID"
    innertube_client_version: str = "20.10.38"

    _policy: Optional[LanguagePolicy] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_env(cls) -> 'TranscriptConfig':
        """Load configuration from environment variables with validation."""
        try:
            config = cls(
                fetch_timeout=cls._parse_int_env("TRANSCRIPT_FETCH_TIMEOUT", 10, min_val=1, max_val=60),

                enable_page_captions=cls._parse_bool_env("ENABLE_PAGE_CAPTIONS", True),
                enable_timedtext=cls._parse_bool_env("ENABLE_TIMEDTEXT", True),
                enable_innertube=cls._parse_bool_env("ENABLE_INNERTUBE", True),

                preferred_languages=cls._parse_list_env("TRANSCRIPT_LANGUAGES", ("it", "en")),
                fallback_language_prefix=os.getenv("TRANSCRIPT_FALLBACK_LANG_PREFIX", "en").strip(),
                timedtext_extra_languages=cls._parse_list_env("TIMEDTEXT_EXTRA_LANGUAGES", ("en-US", "en-GB")),

                innertube_client_name=os.getenv("INNERTUBE_CLIENT_NAME", "ANDROID").strip() or "ANDROID",
                innertube_client_version=os.getenv("INNERTUBE_CLIENT_VERSION", "20.10.38").strip() or "20.10.38",
            )

            config._validate_config()
            config._log_config()

            return config

        except Exception as e:
            logger.error(f"Failed to load transcript configuration: {e}")
            logger.warning("Using default transcript configuration")
            return cls()

    @staticmethod
    def _parse_bool_env(env_var: str, default: bool) -> bool:
        """Parse boolean environment variable."""
        value = os.getenv(env_var, str(default).lower())
        return value.strip().lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _parse_int_env(env_var: str, default: int, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
        """Parse integer environment variable, clamped to [min_val, max_val]."""
        try:
            value = int(os.getenv(env_var, str(default)))

            if min_val is not None and value < min_val:
                logger.warning(f"{env_var}={value} is below minimum {min_val}, using {min_val}")
                return min_val

            if max_val is not None and value > max_val:
                logger.warning(f"{env_var}={value} is above maximum {max_val}, using {max_val}")
                return max_val

            return value

        except (ValueError, TypeError):
            logger.error(f"Invalid value for {env_var}: {os.getenv(env_var)}, using default {default}")
            return default

    @staticmethod
    def _parse_list_env(env_var: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
        """Parse a comma-separated list; an empty value keeps the default."""
        raw = os.getenv(env_var)
        if raw is None:
            return default
        values = tuple(v.strip() for v in raw.split(",") if v.strip())
        if not values:
            logger.warning(f"{env_var} is empty, using default {','.join(default)}")
            return default
        return values

    def _validate_config(self) -> None:
        """Log warnings for problematic combinations."""
        warnings = []

        if not self.enabled_methods():
            warnings.append("All transcript strategies disabled - every request will report no captions")

        if not self.preferred_languages:
            warnings.append("No preferred caption languages - the first listed track is always used")

        for warning in warnings:
            logger.warning(f"Configuration warning: {warning}")

    def _log_config(self) -> None:
        logger.info("Transcript configuration loaded:")
        logger.info(f"  Timeout: fetch={self.fetch_timeout}s")
        logger.info(f"  Strategies: {', '.join(self.enabled_methods()) or 'none'}")
        logger.info(f"  Languages: preferred={','.join(self.preferred_languages)}, "
                    f"prefix={self.fallback_language_prefix or '-'}, "
                    f"timedtext={','.join(self.language_policy().timedtext_languages())}")
        logger.info(f"  Innertube client: {self.innertube_client_name} {self.innertube_client_version}")

    def enabled_methods(self) -> List[str]:
        """Method names of the enabled strategies, in pipeline order."""
        flags = [
            ("page-captions", self.enable_page_captions),
            ("timedtext", self.enable_timedtext),
            ("innertube", self.enable_innertube),
        ]
        return [name for name, enabled in flags if enabled]

    def language_policy(self) -> LanguagePolicy:
        """The single language policy injected into the selector and all strategies."""
        if self._policy is None:
            self._policy = LanguagePolicy(
                languages=tuple(self.preferred_languages),
                fallback_prefix=self.fallback_language_prefix or None,
                regional_variants=tuple(self.timedtext_extra_languages),
            )
        return self._policy

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "timeouts": {
                "fetch_timeout": self.fetch_timeout,
            },
            "strategies": self.enabled_methods(),
            "languages": {
                "preferred": list(self.preferred_languages),
                "fallback_prefix": self.fallback_language_prefix,
                "timedtext": self.language_policy().timedtext_languages(),
            },
            "innertube_client": {
                "name": self.innertube_client_name,
                "version": self.innertube_client_version,
            },
        }


# Global configuration instance
_transcript_config: Optional[TranscriptConfig] = None


def get_transcript_config() -> TranscriptConfig:
    """Get the global transcript configuration instance."""
    global _transcript_config
    if _transcript_config is None:
        _transcript_config = TranscriptConfig.from_env()
    return _transcript_config


def reload_transcript_config() -> TranscriptConfig:
    """Reload configuration from environment variables."""
    global _transcript_config
    _transcript_config = TranscriptConfig.from_env()
    return _transcript_config
