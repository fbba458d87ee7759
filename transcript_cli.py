#!/usr/bin/env python3
"""
Command-line transcript fetcher.

Runs the same pipeline as the HTTP API for one video and prints the result.

Exit codes:
    0  transcript printed
    1  no captions available, or an internal error
    2  the argument is not a recognizable video URL or ID
"""

import argparse
import json
import sys
from typing import List, Optional

from logging_setup import configure_logging
from transcript_service import FailureKind, TranscriptService

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_VIDEO_ID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transcript-fetch",
        description="Fetch the caption transcript of a YouTube video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  transcript-fetch https://www.youtube.com/watch?v=dQw4w9WgXcQ
  transcript-fetch dQw4w9WgXcQ --json
  transcript-fetch https://youtu.be/dQw4w9WgXcQ --log-level DEBUG
        """
    )
    parser.add_argument("video", help="Video URL or bare video ID")
    parser.add_argument("--json", action="store_true",
                        help="Print the full response envelope as JSON")
    parser.add_argument("--log-level", default="WARNING",
                        help="Log level for diagnostics on stderr (default: WARNING)")
    return parser


def exit_code_for(outcome) -> int:
    if outcome.success:
        return EXIT_OK
    if outcome.kind == FailureKind.INVALID_VIDEO_ID:
        return EXIT_INVALID_VIDEO_ID
    return EXIT_FAILED


def main(argv: Optional[List[str]] = None, service: Optional[TranscriptService] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_level=args.log_level.upper(), use_json=False)

    service = service or TranscriptService()
    outcome = service.get_transcript(args.video)

    if args.json:
        print(json.dumps(outcome.to_envelope(), ensure_ascii=False, indent=2))
    elif outcome.success:
        print(outcome.transcript)
    else:
        print(f"Error: {outcome.error}", file=sys.stderr)

    return exit_code_for(outcome)


if __name__ == "__main__":
    sys.exit(main())
