from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the per-user data directory and persists the caller-owned tree
between CLI invocations. Tree files are written atomically (temporary file
then rename) so an interrupted write never leaves a truncated tree behind.
"""

import json
import logging
import os
import tempfile
from typing import Optional

from treesync4ai.domain.tree_models import DirectoryNode, tree_from_dict, tree_to_dict

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "TreeSync4AI"
UNIX_APP_DIR_NAME = ".treesync4ai"
DEFAULT_TREE_FILE_NAME = "tree.json"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/TreeSync4AI
    - Linux/Mac: ~/.treesync4ai

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create data directory '{path}': {e}")

    return os.path.abspath(path)


def get_default_tree_path() -> str:
    """Location of the persisted session tree."""
    return os.path.join(get_user_data_dir(), DEFAULT_TREE_FILE_NAME)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Expands environment variables and `~`. Reverts to fallback if the input is empty.
    """
    p = (path or "").strip() or fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))

# -----------------------------------------------------------------------------
# TREE PERSISTENCE API
# -----------------------------------------------------------------------------

def load_tree_file(path: str) -> Optional[DirectoryNode]:
    """
    Load a persisted tree.

    Returns:
        Optional[DirectoryNode]: The tree, or None when the file is missing,
                                 unreadable, or not a directory tree.
    """
    if not os.path.exists(path):
        logger.debug(f"No stored tree at {path}.")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        tree = tree_from_dict(data)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable tree file '{path}': {e}")
        return None

    if not isinstance(tree, DirectoryNode):
        logger.warning(f"Ignoring tree file '{path}': root is not a directory.")
        return None
    return tree


def save_tree_file(path: str, tree: DirectoryNode) -> None:
    """
    Persist a tree as JSON, atomically replacing any previous file.

    Raises:
        OSError: If the file cannot be written.
    """
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=".tree-", suffix=".json", dir=parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(tree_to_dict(tree), f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.debug(f"Tree saved to {path}")


def delete_tree_file(path: str) -> bool:
    """Remove a persisted tree. Returns True if a file was deleted."""
    if not os.path.exists(path):
        return False
    os.remove(path)
    logger.info(f"Stored tree removed: {path}")
    return True
