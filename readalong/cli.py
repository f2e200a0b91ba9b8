"""Command-line interface for the read-along segmenter.

WHY: Transcripts are often segmented in batch jobs or shell pipelines
(an aligner writes JSON, the segmenter turns it into a timeline for the
player). The CLI wraps segment_transcript() for those workflows.

HOW: argparse reads the input path (or "-" for stdin), language, preset
and optional per-field overrides. Words are loaded with
schemas.load_words_json(), segmented, and the timeline JSON is written to
the output file or stdout. Defaults for language, preset and log level
come from readalong.config (environment / .env).

RULES:
- Usage:
    python -m readalong words.json -o timeline.json
    python -m readalong words.json --preset long_form --max-words 14
    cat words.json | python -m readalong -
- Exit codes: 0 = success, 1 = error.
- Status messages go to stderr; timeline JSON goes to stdout when no
  output file is given.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from . import build_segments
from .config import DEFAULT_LANGUAGE, DEFAULT_PRESET, LOG_LEVEL, resolve_log_level
from .presets import PRESETS, get_preset
from .schemas import load_words_json
from .timeline import format_timeline

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="readalong",
        description="Split time-aligned words into read-along segments "
                    "and write the millisecond timeline as JSON.",
    )

    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Path to the word timing JSON, or '-' for stdin (default: %(default)s).",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the timeline JSON here instead of stdout.",
    )
    parser.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help="BCP-47 language code of the transcript (default: %(default)s).",
    )
    parser.add_argument(
        "--preset",
        default=DEFAULT_PRESET,
        help="Segmentation preset. Available: {} (default: %(default)s).".format(
            ", ".join(PRESETS.keys())
        ),
    )

    overrides = parser.add_argument_group("preset overrides")
    overrides.add_argument("--min-words", type=int, default=None,
                           help="Minimum words per segment.")
    overrides.add_argument("--preferred-words", type=int, default=None,
                           help="Preferred words per segment.")
    overrides.add_argument("--max-words", type=int, default=None,
                           help="Soft maximum words per segment.")
    overrides.add_argument("--pause-threshold", type=float, default=None,
                           help="Silence (seconds) treated as a break point.")
    overrides.add_argument("--long-pause-threshold", type=float, default=None,
                           help="Silence (seconds) that breaks even after function words.")
    overrides.add_argument("--no-merge", action="store_true",
                           help="Skip merging very short adjacent segments.")

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log segmentation decisions to stderr.",
    )

    return parser


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m readalong`` and the ``readalong`` script.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else resolve_log_level(LOG_LEVEL),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = get_preset(args.preset).with_overrides(
            min_words_per_segment=args.min_words,
            preferred_words_per_segment=args.preferred_words,
            max_words_per_segment=args.max_words,
            pause_threshold=args.pause_threshold,
            long_pause_threshold=args.long_pause_threshold,
            merge_short_segments=False if args.no_merge else None,
        )
        words = load_words_json(_read_input(args.input))
    except (ValueError, ValidationError, OSError) as e:
        _status("Error: {}".format(e))
        sys.exit(1)

    if not words:
        _status("Error: No words found in input")
        sys.exit(1)

    try:
        segments = build_segments(words, args.language, config)
    except RuntimeError as e:
        # Missing spaCy model
        _status("Error: {}".format(e))
        sys.exit(1)
    logger.info(
        "Segmented %d words into %d segments (language %s, preset %s)",
        len(words), len(segments), args.language, args.preset,
    )
    timeline = format_timeline(segments)
    content = json.dumps(timeline, indent=2, ensure_ascii=False)

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(content)
                f.write("\n")
        except OSError as e:
            _status("Error: {}".format(e))
            sys.exit(1)
        _status("Wrote {} segments ({} words, preset {}) to {}".format(
            len(segments), len(words), args.preset, args.output,
        ))
    else:
        print(content)


if __name__ == "__main__":
    main()
