from __future__ import annotations

"""
Instruction Data Models.

Closed set of instruction shapes produced by the input classifier and
consumed by the reconciliation engine.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class TreeReplace:
    """
    Replace the whole local tree.

    Attributes:
        spec: Parsed JSON structure (name -> None for files, mapping for directories).
    """
    spec: Any


@dataclass(frozen=True)
class FileEdit:
    """
    Create or overwrite a single file's content and summary.

    Attributes:
        path: Slash-separated path relative to the tree root.
        content: New file body.
        summary: Annotation describing the change.
    """
    path: str
    content: str
    summary: str


@dataclass(frozen=True)
class InvalidInstruction:
    """Terminal, non-actionable instruction carrying a human-readable reason."""
    reason: str


Instruction = Union[TreeReplace, FileEdit, InvalidInstruction]
