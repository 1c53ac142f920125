from __future__ import annotations

"""
Summary Projector.

Derives the redacted view of a tree used for display and logging: names,
kinds and per-file summaries only, never file bodies.
"""

from treesync4ai.domain.tree_models import DirectoryNode, FileNode, TreeNode


def project_summary_only(node: TreeNode) -> TreeNode:
    """
    Recursively strip file bodies from a tree.

    Files keep their name and summary (when present); their content becomes
    None so that serialization omits it.
    """
    if isinstance(node, DirectoryNode):
        return DirectoryNode(
            name=node.name,
            children=tuple(project_summary_only(c) for c in node.children),
        )
    return FileNode(name=node.name, content=None, summary=node.summary or None)
