from __future__ import annotations

"""
Reconciliation Domain Data Models.

Defines the result object handed back to callers after an instruction has
been reconciled against the local tree and the remote repository, along with
the factory functions used by the engine to build it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from treesync4ai.domain.errors import ReconcileError
from treesync4ai.domain.tree_models import TreeNode

# -----------------------------------------------------------------------------
# DECISION TABLE
# -----------------------------------------------------------------------------

class Resolution(str, Enum):
    """Branch of the reconciliation decision table that produced a result."""
    TREE_REPLACED = "tree_replaced"
    LOCAL_HIT = "local_hit"
    LOCAL_MISS_REMOTE_HIT = "local_miss_remote_hit"
    LOCAL_MISS_REMOTE_MISS = "local_miss_remote_miss"

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ReconcileResult:
    """
    Outcome of a single reconciliation.

    Attributes:
        ok: Flag indicating success or failure.
        tree: The new tree on success; the caller's untouched tree on failure.
        error: Typed failure, None on success.
        resolution: Decision-table branch taken, if any was reached.
        written_paths: Remote paths successfully written, in order.
        fetched_remote: Whether the tree was materialized from the remote listing.
    """
    ok: bool
    tree: Optional[TreeNode]
    error: Optional[ReconcileError] = None
    resolution: Optional[Resolution] = None
    written_paths: List[str] = field(default_factory=list)
    fetched_remote: bool = False

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_success_result(
        tree: TreeNode,
        resolution: Resolution,
        written_paths: Optional[List[str]] = None,
        fetched_remote: bool = False,
) -> ReconcileResult:
    """Build a successful result carrying the new tree."""
    return ReconcileResult(
        ok=True,
        tree=tree,
        resolution=resolution,
        written_paths=list(written_paths or []),
        fetched_remote=fetched_remote,
    )


def create_error_result(
        error: ReconcileError,
        previous_tree: Optional[TreeNode],
        resolution: Optional[Resolution] = None,
        written_paths: Optional[List[str]] = None,
) -> ReconcileResult:
    """Build a failed result that hands the caller's previous tree back unchanged."""
    return ReconcileResult(
        ok=False,
        tree=previous_tree,
        error=error,
        resolution=resolution,
        written_paths=list(written_paths or []),
    )
