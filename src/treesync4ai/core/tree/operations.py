from __future__ import annotations

"""
Virtual Tree Structural Operations.

Builds and mutates the immutable file tree. Every mutator returns a new root
and rebuilds only the directories along the modified path; untouched
subtrees are shared with the previous tree, which therefore stays valid
for rollback after a failed reconciliation.
"""

import logging
from dataclasses import replace
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from treesync4ai.domain.constants import PATH_SEPARATOR, ROOT_NAME
from treesync4ai.domain.errors import PathConflictError
from treesync4ai.domain.tree_models import DirectoryNode, FileNode, TreeNode

logger = logging.getLogger(__name__)

PathLike = Union[str, Sequence[str]]

# -----------------------------------------------------------------------------
# PUBLIC API (CONSTRUCTION)
# -----------------------------------------------------------------------------

def split_path(path: PathLike) -> List[str]:
    """
    Normalize a slash-separated path (or a segment sequence) into segments.

    Empty segments produced by leading, trailing or doubled slashes are dropped.
    """
    if isinstance(path, str):
        parts = path.split(PATH_SEPARATOR)
    else:
        parts = list(path)
    return [p for p in parts if p != ""]


def join_path(segments: Sequence[str]) -> str:
    return PATH_SEPARATOR.join(segments)


def convert(spec: Any, name: str = ROOT_NAME) -> DirectoryNode:
    """
    Convert a nested JSON mapping into a directory tree.

    `{key: None}` becomes an empty File named `key`; any other value becomes a
    Directory named `key` whose children are converted recursively. A
    non-mapping input yields an empty directory.

    Args:
        spec: Parsed JSON structure.
        name: Name of the directory being built.

    Returns:
        DirectoryNode: The converted (sub)tree.
    """
    if not isinstance(spec, dict):
        return DirectoryNode(name=name)

    children: List[TreeNode] = []
    for key, value in spec.items():
        if value is None:
            children.append(FileNode(name=str(key), content=""))
        else:
            children.append(convert(value, str(key)))
    return DirectoryNode(name=name, children=tuple(children))


def insert_path(root: DirectoryNode, segments: PathLike, is_leaf_file: bool) -> DirectoryNode:
    """
    Walk or create directories along `segments` and create the final entry.

    Existing entries of the right kind are left untouched.

    Args:
        root: Directory to insert under.
        segments: Path segments (or slash-separated path).
        is_leaf_file: Whether the final segment is a File (else a Directory).

    Returns:
        DirectoryNode: The new root.

    Raises:
        PathConflictError: If an existing entry has the wrong kind.
    """
    parts = split_path(segments)
    if not parts:
        return root
    return _insert(root, parts, is_leaf_file, [])

# -----------------------------------------------------------------------------
# PUBLIC API (QUERIES)
# -----------------------------------------------------------------------------

def find_node(root: DirectoryNode, path: PathLike) -> Optional[TreeNode]:
    """
    Resolve a path by exact segment traversal.

    Returns None if a segment is missing, if a non-terminal segment is a File,
    or if the path is empty (the root is never addressed by a path).
    """
    parts = split_path(path)
    if not parts:
        return None

    node: TreeNode = root
    for segment in parts:
        if not isinstance(node, DirectoryNode):
            return None
        found = node.child(segment)
        if found is None:
            return None
        node = found
    return node


def find_file_node(root: DirectoryNode, path: PathLike) -> Optional[FileNode]:
    """Resolve a path that must point to a File."""
    node = find_node(root, path)
    return node if isinstance(node, FileNode) else None


def iter_files(root: DirectoryNode, prefix: str = "") -> Iterator[Tuple[str, FileNode]]:
    """
    Yield `(path, FileNode)` for every file, depth-first in insertion order.
    """
    for child in root.children:
        child_path = f"{prefix}{PATH_SEPARATOR}{child.name}" if prefix else child.name
        if isinstance(child, DirectoryNode):
            yield from iter_files(child, child_path)
        else:
            yield child_path, child

# -----------------------------------------------------------------------------
# PUBLIC API (MUTATORS)
# -----------------------------------------------------------------------------

def update_file_content(
        root: DirectoryNode,
        path: PathLike,
        content: str,
        summary: Optional[str],
) -> Optional[DirectoryNode]:
    """
    Set the content and summary of an existing File.

    Args:
        root: Current tree root.
        path: Path of the file to update.
        content: New file body.
        summary: New annotation.

    Returns:
        Optional[DirectoryNode]: The new root, or None (original untouched)
                                 if the path does not resolve to a File.
    """
    parts = split_path(path)
    if not parts:
        return None
    return _update(root, parts, content, summary)


def ensure_path(root: DirectoryNode, path: PathLike) -> Tuple[TreeNode, DirectoryNode]:
    """
    Create missing intermediate directories and a final empty File.

    Returns:
        Tuple[TreeNode, DirectoryNode]: The node at the last segment and the new root.

    Raises:
        PathConflictError: If an intermediate segment is a File or the final
                           segment already exists as a Directory.
    """
    parts = split_path(path)
    if not parts:
        return root, root
    return _ensure(root, parts, [])

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _with_child(directory: DirectoryNode, new_child: TreeNode) -> DirectoryNode:
    """Return a copy of `directory` where the same-named child is replaced (or appended)."""
    children = list(directory.children)
    for i, existing in enumerate(children):
        if existing.name == new_child.name:
            if existing is new_child:
                return directory
            children[i] = new_child
            break
    else:
        children.append(new_child)
    return replace(directory, children=tuple(children))


def _conflict(walked: List[str], expected: str) -> PathConflictError:
    path = join_path(walked)
    logger.warning(f"Tree: path conflict at '{path}' (expected {expected}).")
    return PathConflictError(f"'{path}' is not a {expected}", path=path, expected=expected)


def _insert(
        directory: DirectoryNode,
        parts: List[str],
        is_leaf_file: bool,
        walked: List[str],
) -> DirectoryNode:
    head, rest = parts[0], parts[1:]
    walked = walked + [head]
    child = directory.child(head)

    if not rest:
        if child is None:
            leaf: TreeNode = FileNode(name=head) if is_leaf_file else DirectoryNode(name=head)
            return _with_child(directory, leaf)
        if isinstance(child, FileNode) != is_leaf_file:
            raise _conflict(walked, "file" if is_leaf_file else "directory")
        return directory

    if child is None:
        child = DirectoryNode(name=head)
    elif isinstance(child, FileNode):
        raise _conflict(walked, "directory")
    return _with_child(directory, _insert(child, rest, is_leaf_file, walked))


def _update(
        directory: DirectoryNode,
        parts: List[str],
        content: str,
        summary: Optional[str],
) -> Optional[DirectoryNode]:
    head, rest = parts[0], parts[1:]
    child = directory.child(head)
    if child is None:
        return None

    if not rest:
        if not isinstance(child, FileNode):
            return None
        return _with_child(directory, replace(child, content=content, summary=summary))

    if not isinstance(child, DirectoryNode):
        return None
    new_child = _update(child, rest, content, summary)
    if new_child is None:
        return None
    return _with_child(directory, new_child)


def _ensure(
        directory: DirectoryNode,
        parts: List[str],
        walked: List[str],
) -> Tuple[TreeNode, DirectoryNode]:
    head, rest = parts[0], parts[1:]
    walked = walked + [head]
    child = directory.child(head)

    if not rest:
        if child is None:
            created = FileNode(name=head, content="")
            return created, _with_child(directory, created)
        if isinstance(child, DirectoryNode):
            raise _conflict(walked, "file")
        return child, directory

    if child is None:
        child = DirectoryNode(name=head)
    elif isinstance(child, FileNode):
        raise _conflict(walked, "directory")
    leaf, new_child = _ensure(child, rest, walked)
    return leaf, _with_child(directory, new_child)
