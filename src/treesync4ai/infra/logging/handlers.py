from __future__ import annotations

"""
Logging Handlers and Filters.

Handler factories, the tagging mechanism that distinguishes our own handlers
from library-injected ones, and the filter that masks access tokens.
"""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

_HANDLER_TAG_ATTR: str = "_treesync4ai_handler"

# "token <value>" authorization headers and GitHub token prefixes
_SECRET_PATTERNS = (
    re.compile(r"(token\s+)[A-Za-z0-9_\-\.]{8,}", re.IGNORECASE),
    re.compile(r"\b(gh[pousr]_|github_pat_)[A-Za-z0-9_]{10,}"),
)
REDACTED = "***"

# ==============================================================================
# FILTERS
# ==============================================================================

class SecretRedactingFilter(logging.Filter):
    """Replace access tokens in log messages with a fixed mask."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            return True

        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def redact_secrets(text: str) -> str:
    text = _SECRET_PATTERNS[0].sub(lambda m: f"{m.group(1)}{REDACTED}", text)
    return _SECRET_PATTERNS[1].sub(REDACTED, text)

# ==============================================================================
# HANDLER UTILITIES
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """Mark a handler as managed by this application."""
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Initialize a RotatingFileHandler.

    Returns:
        Optional[RotatingFileHandler]: Configured handler or None if I/O fails.
    """
    try:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
        fh.setLevel(level_int)
        fh.setFormatter(formatter)
        _tag_handler(fh)
        return fh
    except OSError as e:
        sys.stderr.write(f"WARNING: cannot open log file '{log_file}': {e}\n")
        return None
