from __future__ import annotations

"""
Reconciliation Engine.

Applies a classified instruction to the caller's tree and mirrors the change
to the remote repository. The engine is stateless: the current tree is
passed in and a new one handed back inside a ReconcileResult. Every path
returns either an updated tree or a typed error; the caller's tree is never
modified, so a failure leaves the previously displayed state intact.

FileEdit decision table (local lookup always happens before any remote call):

    local hit                    -> update, write through
    local miss, no gateway       -> MissingCredentials
    local miss, remote hit       -> create locally, update, write through
    local miss, remote miss      -> create locally, update, write through
    no local tree, no gateway    -> MissingCredentials
    no local tree, fetch fails   -> RemoteUnavailable
    no local tree, fetch ok      -> re-enter with the fetched tree
"""

import logging
import threading
from typing import List, Optional

from treesync4ai.core.tree.operations import (
    convert,
    ensure_path,
    find_file_node,
    iter_files,
    split_path,
    update_file_content,
)
from treesync4ai.domain.errors import (
    InternalInconsistencyError,
    InvalidInputError,
    MissingCredentialsError,
    ReconcileCancelledError,
    ReconcileError,
    RemoteUnavailableError,
)
from treesync4ai.domain.gateway import RepositoryGateway
from treesync4ai.domain.instruction_models import (
    FileEdit,
    Instruction,
    InvalidInstruction,
    TreeReplace,
)
from treesync4ai.domain.reconcile_models import (
    ReconcileResult,
    Resolution,
    create_error_result,
    create_success_result,
)
from treesync4ai.domain.tree_models import DirectoryNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def reconcile(
        instruction: Instruction,
        tree: Optional[DirectoryNode],
        gateway: Optional[RepositoryGateway],
        *,
        cancellation_event: Optional[threading.Event] = None,
) -> ReconcileResult:
    """
    Reconcile an instruction against the local tree and the remote store.

    Args:
        instruction: Classified instruction.
        tree: The caller's current tree, or None if none is loaded.
        gateway: Remote capability, or None when credentials are not configured.
        cancellation_event: Optional flag checked before every remote call.

    Returns:
        ReconcileResult: New tree on success, typed error otherwise.
    """
    run = _Reconciliation(tree, gateway, cancellation_event)
    try:
        if isinstance(instruction, TreeReplace):
            return run.replace_tree(instruction)
        if isinstance(instruction, FileEdit):
            return run.edit_file(instruction)
        if isinstance(instruction, InvalidInstruction):
            return create_error_result(InvalidInputError(instruction.reason), tree)
        return create_error_result(
            InvalidInputError(f"Unsupported instruction: {type(instruction).__name__}"), tree
        )
    except ReconcileError as e:
        logger.warning(f"Reconcile: {e.kind}: {e}")
        return create_error_result(e, tree, run.resolution, run.written)

# -----------------------------------------------------------------------------
# INTERNAL ORCHESTRATION
# -----------------------------------------------------------------------------

class _Reconciliation:
    """Per-call state of one reconciliation (never reused across calls)."""

    def __init__(
            self,
            tree: Optional[DirectoryNode],
            gateway: Optional[RepositoryGateway],
            cancellation_event: Optional[threading.Event],
    ):
        self.tree = tree
        self.gateway = gateway
        self.cancellation_event = cancellation_event
        self.resolution: Optional[Resolution] = None
        self.written: List[str] = []

    # -------------------------------------------------------------------------
    # TREE REPLACE
    # -------------------------------------------------------------------------

    def replace_tree(self, instruction: TreeReplace) -> ReconcileResult:
        new_tree = convert(instruction.spec)
        self.resolution = Resolution.TREE_REPLACED

        if self.gateway is None:
            logger.info("Reconcile: tree replaced locally (no remote configured).")
        else:
            # Full mirror: every file is uploaded, changed or not, one at a time
            files = list(iter_files(new_tree))
            logger.info(f"Reconcile: mirroring {len(files)} file(s) to remote.")
            for path, node in files:
                self._write(path, node.content or "")

        return create_success_result(new_tree, self.resolution, self.written)

    # -------------------------------------------------------------------------
    # FILE EDIT
    # -------------------------------------------------------------------------

    def edit_file(self, instruction: FileEdit) -> ReconcileResult:
        if not split_path(instruction.path):
            raise InvalidInputError("empty file path", path=instruction.path)

        fetched = False
        local = self.tree
        if local is None:
            gateway = self._require_gateway("no local tree and no remote configured")
            self._checkpoint()
            local = self._call(gateway.fetch_tree)
            if local is None:
                raise RemoteUnavailableError("could not fetch the remote tree")
            fetched = True
            logger.info("Reconcile: local tree materialized from remote listing.")

        new_tree = update_file_content(local, instruction.path, instruction.content, instruction.summary)
        if new_tree is not None:
            self.resolution = Resolution.LOCAL_HIT
        else:
            new_tree = self._create_missing(local, instruction)

        if self.gateway is not None:
            node = find_file_node(new_tree, instruction.path)
            if node is None:
                raise InternalInconsistencyError("updated file vanished", path=instruction.path)
            self._write(instruction.path, node.content or "")

        return create_success_result(new_tree, self.resolution, self.written, fetched_remote=fetched)

    def _create_missing(self, local: DirectoryNode, instruction: FileEdit) -> DirectoryNode:
        """Local miss: consult the remote, then create the path locally either way."""
        gateway = self._require_gateway("file not found locally and no remote configured")
        self._checkpoint()
        exists_remotely = bool(self._call(gateway.path_exists, instruction.path))

        if exists_remotely:
            self.resolution = Resolution.LOCAL_MISS_REMOTE_HIT
            logger.info(f"Reconcile: '{instruction.path}' exists remotely but not locally; adding it.")
        else:
            self.resolution = Resolution.LOCAL_MISS_REMOTE_MISS
            logger.info(f"Reconcile: '{instruction.path}' is new; creating it.")

        _, created = ensure_path(local, instruction.path)
        updated = update_file_content(created, instruction.path, instruction.content, instruction.summary)
        if updated is None:
            raise InternalInconsistencyError("path did not resolve after creation", path=instruction.path)
        return updated

    # -------------------------------------------------------------------------
    # REMOTE HELPERS
    # -------------------------------------------------------------------------

    def _require_gateway(self, detail: str) -> RepositoryGateway:
        if self.gateway is None:
            raise MissingCredentialsError(detail)
        return self.gateway

    def _checkpoint(self) -> None:
        if self.cancellation_event is not None and self.cancellation_event.is_set():
            raise ReconcileCancelledError("reconciliation cancelled by caller")

    def _write(self, path: str, content: str) -> None:
        gateway = self._require_gateway("remote write requested without a remote")
        self._checkpoint()
        if not self._call(gateway.write_file, path, content):
            raise RemoteUnavailableError(f"could not write '{path}'", path=path)
        self.written.append(path)

    @staticmethod
    def _call(func, *args):
        """Invoke a gateway operation; unexpected exceptions become RemoteUnavailable."""
        try:
            return func(*args)
        except ReconcileError:
            raise
        except Exception as e:
            logger.error(f"Reconcile: remote call {getattr(func, '__name__', func)} failed: {e}", exc_info=True)
            raise RemoteUnavailableError(str(e)) from e
