from __future__ import annotations

"""
Input Classifier.

Two-stage recognizer turning raw chat text into a closed Instruction:
1. Strict JSON parse of the whole input -> TreeReplace.
2. Tagged-line extraction of a `Fichier:` / `Resumer:` block -> FileEdit.
Anything else is an InvalidInstruction.

Known limitation: the code body starts after the first line containing the
literal "fichier:" (case-insensitive). If that text also appears inside the
code before the real marker line, the body boundary moves with it.
"""

import json
import logging
import re
from typing import Any, List, Optional

from treesync4ai.domain.constants import (
    FILE_MARKER_LITERAL,
    FILE_MARKER_PATTERN,
    SUMMARY_MARKER_PATTERN,
)
from treesync4ai.domain.instruction_models import (
    FileEdit,
    Instruction,
    InvalidInstruction,
    TreeReplace,
)

logger = logging.getLogger(__name__)

_FILE_RX = re.compile(FILE_MARKER_PATTERN, re.IGNORECASE | re.MULTILINE)
_SUMMARY_RX = re.compile(SUMMARY_MARKER_PATTERN, re.IGNORECASE | re.MULTILINE)

UNRECOGNIZED_REASON = "input is neither valid JSON nor a recognized file/summary block."

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def classify(raw_text: str) -> Instruction:
    """
    Classify raw user input.

    Args:
        raw_text: Text exactly as submitted by the user.

    Returns:
        Instruction: TreeReplace, FileEdit or InvalidInstruction.
    """
    spec = try_parse_json(raw_text)
    if spec is not None:
        logger.debug("Classifier: input parsed as JSON tree specification.")
        return TreeReplace(spec=spec)

    edit = parse_file_block(raw_text)
    if edit is not None:
        logger.debug(f"Classifier: file block recognized for '{edit.path}'.")
        return edit

    logger.debug("Classifier: input not recognized.")
    return InvalidInstruction(reason=UNRECOGNIZED_REASON)


def try_parse_json(raw_text: str) -> Optional[Any]:
    """
    Parse the full input as JSON.

    Returns None when parsing fails or when the parsed value is false-like
    (null, false, 0, ""), which is not a usable tree specification. Empty
    objects and arrays are kept.
    """
    try:
        parsed = json.loads(raw_text, parse_constant=_reject_constant)
    except (ValueError, TypeError):
        return None
    if parsed is None or parsed is False or parsed == "" or parsed == 0:
        return None
    return parsed


def _reject_constant(name: str) -> Any:
    """NaN and Infinity are not JSON."""
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_file_block(raw_text: str) -> Optional[FileEdit]:
    """
    Extract path, code body and summary from a `Fichier:` / `Resumer:` block.

    The first `Fichier:` line governs the path and the first `Resumer:` line
    governs the summary. The body is every line after the first line
    containing "fichier:" and before the `Resumer:` line, with surrounding
    blank lines removed.

    Returns:
        Optional[FileEdit]: The edit, or None if a marker is missing or the
                            path, body or summary is empty.
    """
    file_match = _FILE_RX.search(raw_text)
    summary_match = _SUMMARY_RX.search(raw_text)
    if not file_match or not summary_match:
        return None

    path = file_match.group(1).strip()
    summary = summary_match.group(1).strip()

    head_lines = raw_text[:summary_match.start()].splitlines()
    code_start = 0
    for i, line in enumerate(head_lines):
        if FILE_MARKER_LITERAL in line.lower():
            code_start = i + 1
            break
    code = "\n".join(_trim_blank_lines(head_lines[code_start:])).rstrip()

    if not path or not code or not summary:
        return None
    return FileEdit(path=path, content=code, summary=summary)

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _trim_blank_lines(lines: List[str]) -> List[str]:
    """Drop whitespace-only lines at both ends."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]
