"""Process defaults for the command-line surface, loaded from .env.

WHY: Batch jobs usually run the same language and preset over many
transcripts. Reading the defaults from the environment (or a .env file
beside the job) saves repeating flags on every invocation.

HOW: python-dotenv loads the .env file on import; the defaults are plain
module-level constants read with os.getenv.

RULES:
- Only the CLI reads these values. Library functions always take language
  and config as explicit parameters.
- READALONG_LANGUAGE defaults to "en", READALONG_PRESET to "follow_along",
  READALONG_LOG_LEVEL to "WARNING".
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()

DEFAULT_LANGUAGE = os.getenv("READALONG_LANGUAGE", "en")
DEFAULT_PRESET = os.getenv("READALONG_PRESET", "follow_along")
LOG_LEVEL = os.getenv("READALONG_LOG_LEVEL", "WARNING")


def resolve_log_level(name: str) -> int:
    """Map a level name ("debug", "INFO") to a logging level, WARNING if unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING
