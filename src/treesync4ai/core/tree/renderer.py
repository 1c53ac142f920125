from __future__ import annotations

"""
Tree Renderer.

Converts the virtual tree into a visual ASCII representation for terminal
output, with optional per-file summary annotations.
"""

from typing import List

from treesync4ai.domain.tree_models import DirectoryNode, TreeNode

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree(root: DirectoryNode, show_summaries: bool = True) -> List[str]:
    """
    Render a tree into lines, starting with the root name.

    Args:
        root: Tree to render.
        show_summaries: Append file summaries after the file name.

    Returns:
        List[str]: Visual lines of the tree.
    """
    lines: List[str] = [root.name]
    render_tree_structure(root, lines, prefix="", show_summaries=show_summaries)
    return lines


def render_tree_structure(
        directory: DirectoryNode,
        lines: List[str],
        prefix: str = "",
        show_summaries: bool = True,
) -> None:
    """
    Recursively append the children of `directory` to `lines`.

    Uses standard ASCII connectors (├──, └──). Children keep their insertion
    order.
    """
    total = len(directory.children)

    for i, node in enumerate(directory.children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "

        if isinstance(node, DirectoryNode):
            lines.append(f"{prefix}{connector}{node.name}/")
            new_prefix = prefix + ("    " if is_last else "│   ")
            render_tree_structure(node, lines, prefix=new_prefix, show_summaries=show_summaries)
            continue

        lines.append(f"{prefix}{connector}{_file_label(node, show_summaries)}")


def _file_label(node: TreeNode, show_summaries: bool) -> str:
    summary = getattr(node, "summary", None)
    if show_summaries and summary:
        return f"{node.name}  # {summary}"
    return node.name
