from __future__ import annotations

"""
Integration tests for the FileSystem Infrastructure Layer.

Verifies atomic persistence of the session tree and tolerance to missing or
corrupted tree files.
"""

from pathlib import Path
from unittest.mock import patch

from treesync4ai.infra.fs import (
    delete_tree_file,
    get_default_tree_path,
    get_user_data_dir,
    load_tree_file,
    normalize_path,
    save_tree_file,
)


def test_save_and_load_tree(tmp_path: Path, sample_tree):
    target = tmp_path / "nested" / "tree.json"

    save_tree_file(str(target), sample_tree)

    assert target.exists()
    assert load_tree_file(str(target)) == sample_tree
    # No temporary files left behind
    assert [p.name for p in target.parent.iterdir()] == ["tree.json"]


def test_load_missing_tree_returns_none(tmp_path: Path):
    assert load_tree_file(str(tmp_path / "absent.json")) is None


def test_load_corrupted_tree_returns_none(tmp_path: Path):
    bad = tmp_path / "tree.json"
    bad.write_text("{ not json", encoding="utf-8")
    assert load_tree_file(str(bad)) is None

    bad.write_text('{"name": "a.txt", "type": "file"}', encoding="utf-8")
    assert load_tree_file(str(bad)) is None

    bad.write_text(
        '{"name": "root", "type": "directory", "children": ['
        '{"name": "x", "type": "file"}, {"name": "x", "type": "file"}]}',
        encoding="utf-8",
    )
    assert load_tree_file(str(bad)) is None


def test_delete_tree_file(tmp_path: Path, sample_tree):
    target = tmp_path / "tree.json"
    save_tree_file(str(target), sample_tree)

    assert delete_tree_file(str(target)) is True
    assert delete_tree_file(str(target)) is False


def test_user_data_dir_is_created_under_home(tmp_path: Path):
    with patch("os.path.expanduser", return_value=str(tmp_path)), patch("os.name", "posix"):
        data_dir = get_user_data_dir()
        tree_path = get_default_tree_path()

    assert data_dir == str(tmp_path / ".treesync4ai")
    assert Path(data_dir).is_dir()
    assert tree_path == str(tmp_path / ".treesync4ai" / "tree.json")


def test_normalize_path_fallback(tmp_path: Path):
    assert normalize_path("", str(tmp_path)) == str(tmp_path)
    assert normalize_path(str(tmp_path / "x.json"), "ignored") == str(tmp_path / "x.json")
