from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory repository gateway recording every remote call.
3. Shared sample trees and configuration dictionaries.
"""

import os
import sys
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from treesync4ai.domain.gateway import RepositoryGateway  # noqa: E402
from treesync4ai.domain.tree_models import DirectoryNode, FileNode  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class FakeGateway(RepositoryGateway):
    """
    In-memory RepositoryGateway.

    Remote files live in `files`; every call is appended to `calls` so tests
    can assert on ordering and on the absence of remote traffic.
    """

    def __init__(
            self,
            files: Optional[Dict[str, str]] = None,
            remote_tree: Optional[DirectoryNode] = None,
            fetch_ok: bool = True,
            failing_writes: Optional[Set[str]] = None,
    ):
        self.files: Dict[str, str] = dict(files or {})
        self.remote_tree = remote_tree
        self.fetch_ok = fetch_ok
        self.failing_writes: Set[str] = set(failing_writes or ())
        self.calls: List[Tuple[str, Any]] = []

    def fetch_tree(self) -> Optional[DirectoryNode]:
        self.calls.append(("fetch_tree", None))
        if not self.fetch_ok:
            return None
        return self.remote_tree

    def path_exists(self, path: str) -> bool:
        self.calls.append(("path_exists", path))
        return path in self.files

    def write_file(self, path: str, content: str) -> bool:
        self.calls.append(("write_file", path))
        if path in self.failing_writes:
            return False
        self.files[path] = content
        return True

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def sample_tree() -> DirectoryNode:
    """
    root
    ├── src/
    │   ├── util.js
    │   └── lib/
    │       └── math.js
    └── README.md
    """
    return DirectoryNode("root", (
        DirectoryNode("src", (
            FileNode("util.js", "old code", "first version"),
            DirectoryNode("lib", (
                FileNode("math.js", "export const pi = 3;"),
            )),
        )),
        FileNode("README.md", "# Demo"),
    ))


@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """Complete, valid configuration dictionary with GitHub credentials."""
    return {
        "github_owner": "octo",
        "github_repo": "demo",
        "github_token": "ghp_testtoken1234567890",
        "github_branch": "main",
        "github_api_url": "https://api.github.test",
        "timeout": 5.0,
        "max_retries": 0,
        "backoff_factor": 0.0,
        "tree_file": "",
        "persist_tree": True,
        "locale": "en",
        "log_level": "INFO",
        "log_file": "",
    }
