from __future__ import annotations

"""
Virtual File Tree Data Models.

Provides the recursive node definitions of the in-memory file tree kept in
sync with the remote repository. Nodes are immutable: structural changes
produce new nodes along the modified path and share every untouched subtree.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from treesync4ai.domain.constants import ROOT_NAME

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileNode:
    """
    Represents a leaf entry (file) in the virtual tree.

    Attributes:
        name: Entry name, unique among its siblings.
        content: Raw file body. None marks a redacted body (summary view).
        summary: Optional annotation describing the file's latest change.
    """
    name: str
    content: Optional[str] = ""
    summary: Optional[str] = None


@dataclass(frozen=True)
class DirectoryNode:
    """
    Represents a directory entry with ordered children.

    Attributes:
        name: Entry name ("root" for the tree root).
        children: Child nodes in insertion order, unique by name.
    """
    name: str
    children: Tuple["TreeNode", ...] = ()

    def child(self, name: str) -> Optional["TreeNode"]:
        """Return the direct child called `name`, if any."""
        for node in self.children:
            if node.name == name:
                return node
        return None


TreeNode = Union[DirectoryNode, FileNode]


def empty_root() -> DirectoryNode:
    """Create an empty root directory."""
    return DirectoryNode(name=ROOT_NAME)

# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def tree_to_dict(node: TreeNode) -> Dict[str, Any]:
    """
    Convert a tree into plain JSON-compatible dictionaries.

    Redacted file bodies (None) and empty summaries are omitted.
    """
    if isinstance(node, DirectoryNode):
        return {
            "name": node.name,
            "type": "directory",
            "children": [tree_to_dict(c) for c in node.children],
        }

    data: Dict[str, Any] = {"name": node.name, "type": "file"}
    if node.content is not None:
        data["content"] = node.content
    if node.summary:
        data["summary"] = node.summary
    return data


def tree_from_dict(data: Any) -> TreeNode:
    """
    Rebuild a tree from the dictionary shape produced by `tree_to_dict`.

    Raises:
        ValueError: If the structure is not a recognizable node.
    """
    if not isinstance(data, dict) or "name" not in data:
        raise ValueError("Tree node must be a mapping with a 'name' key.")

    node_type = data.get("type", "directory")
    if node_type == "file":
        return FileNode(
            name=str(data["name"]),
            content=data.get("content", ""),
            summary=data.get("summary"),
        )
    if node_type == "directory":
        children = data.get("children") or []
        if not isinstance(children, list):
            raise ValueError(f"Invalid children for directory '{data['name']}'.")
        nodes = tuple(tree_from_dict(c) for c in children)
        names = [n.name for n in nodes]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate entry names under directory '{data['name']}'.")
        return DirectoryNode(name=str(data["name"]), children=nodes)
    raise ValueError(f"Unknown node type: {node_type!r}")
