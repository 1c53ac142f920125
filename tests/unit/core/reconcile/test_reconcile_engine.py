from __future__ import annotations

"""
Unit tests for the Reconciliation Engine.

Exercises every row of the decision table against an in-memory gateway:
1. TreeReplace with and without a remote (full mirror).
2. FileEdit local hit / local miss (remote hit, remote miss) / no local tree.
3. Typed failures: missing credentials, unavailable remote, conflicts,
   cancellation, invalid input, and exceptions raised by a gateway.
"""

import threading
from unittest.mock import MagicMock

from conftest import FakeGateway

from treesync4ai.core.classifier import classify
from treesync4ai.core.reconcile.engine import reconcile
from treesync4ai.core.tree.operations import find_file_node, find_node
from treesync4ai.domain.errors import (
    InvalidInputError,
    MissingCredentialsError,
    PathConflictError,
    ReconcileCancelledError,
    RemoteUnavailableError,
)
from treesync4ai.domain.gateway import RepositoryGateway
from treesync4ai.domain.instruction_models import FileEdit, InvalidInstruction, TreeReplace
from treesync4ai.domain.reconcile_models import Resolution
from treesync4ai.domain.tree_models import DirectoryNode, FileNode

UTIL_EDIT = "Fichier: src/util.js\nfunction add(a,b){return a+b;}\nResumer: adds two numbers"

# -----------------------------------------------------------------------------
# TREE REPLACE
# -----------------------------------------------------------------------------

def test_tree_replace_without_gateway():
    result = reconcile(classify('{"src":{"index.js":null}}'), None, None)

    assert result.ok is True
    assert result.resolution == Resolution.TREE_REPLACED
    assert result.tree == DirectoryNode("root", (
        DirectoryNode("src", (FileNode("index.js", ""),)),
    ))
    assert result.written_paths == []


def test_tree_replace_mirrors_every_file(sample_tree):
    gateway = FakeGateway(files={"src/index.js": "stale"})
    spec = {"src": {"index.js": None, "lib": {"a.js": None}}, "README.md": None}

    result = reconcile(TreeReplace(spec), sample_tree, gateway)

    assert result.ok is True
    assert result.written_paths == ["src/index.js", "src/lib/a.js", "README.md"]
    assert gateway.call_names() == ["write_file"] * 3
    # Full mirror: unchanged or not, every file body is uploaded (empty here)
    assert gateway.files["src/index.js"] == ""


def test_tree_replace_write_failure_keeps_previous_tree(sample_tree):
    gateway = FakeGateway(failing_writes={"b.txt"})

    result = reconcile(TreeReplace({"a.txt": None, "b.txt": None, "c.txt": None}), sample_tree, gateway)

    assert result.ok is False
    assert isinstance(result.error, RemoteUnavailableError)
    assert result.tree is sample_tree
    assert result.written_paths == ["a.txt"]
    # Mirror stops at the first failure
    assert gateway.calls == [("write_file", "a.txt"), ("write_file", "b.txt")]

# -----------------------------------------------------------------------------
# FILE EDIT: LOCAL TREE PRESENT
# -----------------------------------------------------------------------------

def test_local_hit_updates_only_target(sample_tree):
    result = reconcile(classify(UTIL_EDIT), sample_tree, None)

    assert result.ok is True
    assert result.resolution == Resolution.LOCAL_HIT
    util = find_file_node(result.tree, "src/util.js")
    assert util.content == "function add(a,b){return a+b;}"
    assert util.summary == "adds two numbers"
    assert result.tree.child("README.md") is sample_tree.child("README.md")
    assert result.tree.child("src").child("lib") is sample_tree.child("src").child("lib")


def test_local_hit_writes_through(sample_tree, fake_gateway):
    result = reconcile(classify(UTIL_EDIT), sample_tree, fake_gateway)

    assert result.ok is True
    assert fake_gateway.calls == [("write_file", "src/util.js")]
    assert fake_gateway.files["src/util.js"] == "function add(a,b){return a+b;}"
    assert result.written_paths == ["src/util.js"]


def test_local_miss_without_gateway_is_missing_credentials(sample_tree):
    edit = FileEdit("src/new.js", "x", "new")

    result = reconcile(edit, sample_tree, None)

    assert result.ok is False
    assert isinstance(result.error, MissingCredentialsError)
    assert result.tree is sample_tree


def test_local_miss_remote_hit_creates_locally(sample_tree):
    gateway = FakeGateway(files={"src/remote_only.js": "remote"})

    result = reconcile(FileEdit("src/remote_only.js", "local", "sync"), sample_tree, gateway)

    assert result.ok is True
    assert result.resolution == Resolution.LOCAL_MISS_REMOTE_HIT
    assert find_file_node(result.tree, "src/remote_only.js") == FileNode("remote_only.js", "local", "sync")
    assert gateway.calls == [("path_exists", "src/remote_only.js"), ("write_file", "src/remote_only.js")]
    assert find_node(sample_tree, "src/remote_only.js") is None


def test_local_miss_remote_miss_creates_nested_path(sample_tree, fake_gateway):
    result = reconcile(FileEdit("docs/api/index.md", "# API", "api docs"), sample_tree, fake_gateway)

    assert result.ok is True
    assert result.resolution == Resolution.LOCAL_MISS_REMOTE_MISS
    assert find_file_node(result.tree, "docs/api/index.md").content == "# API"
    assert fake_gateway.files == {"docs/api/index.md": "# API"}


def test_local_miss_path_conflict_is_typed(sample_tree, fake_gateway):
    result = reconcile(FileEdit("README.md/inner.txt", "x", "y"), sample_tree, fake_gateway)

    assert result.ok is False
    assert isinstance(result.error, PathConflictError)
    assert result.tree is sample_tree
    assert fake_gateway.call_names() == ["path_exists"]


def test_write_failure_after_edit_keeps_previous_tree(sample_tree):
    gateway = FakeGateway(failing_writes={"src/util.js"})

    result = reconcile(classify(UTIL_EDIT), sample_tree, gateway)

    assert result.ok is False
    assert isinstance(result.error, RemoteUnavailableError)
    assert result.tree is sample_tree
    assert result.resolution == Resolution.LOCAL_HIT

# -----------------------------------------------------------------------------
# FILE EDIT: NO LOCAL TREE
# -----------------------------------------------------------------------------

def test_no_tree_no_gateway_is_missing_credentials():
    result = reconcile(FileEdit("a.txt", "x", "y"), None, None)

    assert isinstance(result.error, MissingCredentialsError)
    assert result.tree is None


def test_no_tree_fetch_failure_is_remote_unavailable():
    gateway = FakeGateway(fetch_ok=False)

    result = reconcile(FileEdit("a.txt", "x", "y"), None, gateway)

    assert isinstance(result.error, RemoteUnavailableError)
    assert "write_file" not in gateway.call_names()


def test_no_tree_fetch_then_local_hit(sample_tree):
    gateway = FakeGateway(remote_tree=sample_tree)

    result = reconcile(classify(UTIL_EDIT), None, gateway)

    assert result.ok is True
    assert result.fetched_remote is True
    assert result.resolution == Resolution.LOCAL_HIT
    assert gateway.call_names() == ["fetch_tree", "write_file"]


def test_no_tree_fetch_then_create(sample_tree):
    gateway = FakeGateway(remote_tree=sample_tree)

    result = reconcile(FileEdit("new/file.txt", "hello", "greeting"), None, gateway)

    assert result.ok is True
    assert result.resolution == Resolution.LOCAL_MISS_REMOTE_MISS
    assert gateway.call_names() == ["fetch_tree", "path_exists", "write_file"]
    assert find_file_node(result.tree, "src/util.js") is not None

# -----------------------------------------------------------------------------
# TERMINAL AND DEFENSIVE CASES
# -----------------------------------------------------------------------------

def test_invalid_instruction_propagates_reason(sample_tree, fake_gateway):
    result = reconcile(InvalidInstruction("nope"), sample_tree, fake_gateway)

    assert isinstance(result.error, InvalidInputError)
    assert result.error.detail == "nope"
    assert result.tree is sample_tree
    assert fake_gateway.calls == []


def test_empty_path_is_invalid_input(sample_tree, fake_gateway):
    result = reconcile(FileEdit("///", "x", "y"), sample_tree, fake_gateway)

    assert isinstance(result.error, InvalidInputError)
    assert fake_gateway.calls == []


def test_cancellation_before_remote_call(sample_tree, fake_gateway):
    event = threading.Event()
    event.set()

    result = reconcile(classify(UTIL_EDIT), sample_tree, fake_gateway, cancellation_event=event)

    assert isinstance(result.error, ReconcileCancelledError)
    assert result.tree is sample_tree
    assert fake_gateway.calls == []


def test_gateway_exception_becomes_remote_unavailable(sample_tree):
    gateway = MagicMock(spec=RepositoryGateway)
    gateway.path_exists.side_effect = ConnectionError("socket closed")

    result = reconcile(FileEdit("x/y.txt", "a", "b"), sample_tree, gateway)

    assert result.ok is False
    assert isinstance(result.error, RemoteUnavailableError)
    assert "socket closed" in result.error.detail
    gateway.write_file.assert_not_called()
