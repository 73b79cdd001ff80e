"""
Turns arbitrary caught failures into short, display-safe strings for the
domain's error_message column.

The database-noise filter below is a best-effort display filter based on
pattern matching, not a parser of driver error formats.
"""
import logging
import re

from app.config import config

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"

# Markers of a raw database/driver error message
_DB_ERROR_MARKERS = (
    "[SQL:",
    "(Background on this error",
    "sqlalche.me",
    "psycopg",
    "sqlite3.",
    "invocation",
)

_NOISE_PATTERNS = (
    re.compile(r"^\[(SQL|parameters):"),
    re.compile(r"Background on this error"),
    re.compile(r"sqlalche\.me"),
    re.compile(r"site-packages|node_modules|webpack"),
    # path/to/file.py:123 or file.js:10:5 location markers
    re.compile(r"[\w./\\-]+\.\w+:\d+"),
)

_TRACEBACK_LINE = re.compile(r'^(Traceback \(most recent call last\):|\s*File ".*", line \d+)')

MAX_MEANINGFUL_LINES = 3


def _strip_traceback(message: str) -> str:
    lines = [line for line in message.splitlines() if not _TRACEBACK_LINE.match(line)]
    return "\n".join(lines).strip()


def _looks_like_db_error(message: str) -> bool:
    return any(marker in message for marker in _DB_ERROR_MARKERS)


def _filter_noise(message: str) -> str:
    meaningful = []
    for line in message.splitlines():
        line = line.strip()
        if not line or any(p.search(line) for p in _NOISE_PATTERNS):
            continue
        meaningful.append(line)
        if len(meaningful) == MAX_MEANINGFUL_LINES:
            break
    return " ".join(meaningful)


def sanitize_error(error, max_length: int = None) -> str:
    """
    Returns a bounded error description for `error`, which may be an
    exception, a plain string, or anything else. Never raises.
    """
    limit = max_length or config.ERROR_MESSAGE_MAX_LENGTH
    try:
        if isinstance(error, BaseException):
            message = _strip_traceback(str(error)) or type(error).__name__
            if _looks_like_db_error(message):
                message = _filter_noise(message) or type(error).__name__
            return message[:limit]
        if isinstance(error, str):
            return error[:limit]
    except Exception as e:
        logger.warning(f"Could not sanitize error of type {type(error).__name__}: {e}")
    return UNKNOWN_ERROR[:limit]
