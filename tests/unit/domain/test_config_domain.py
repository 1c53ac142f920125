from __future__ import annotations

"""
Unit tests for the Config Domain.

Verifies:
1. Default configuration generation.
2. Resilience against corrupted config files.
3. Environment overrides for credentials.
4. Persistence (Save/Load) without touching real user data.
"""

import json
from unittest.mock import patch

import pytest

from treesync4ai.domain.config import get_default_config, load_config, save_config
from treesync4ai.domain.constants import CURRENT_CONFIG_VERSION, ENV_OWNER, ENV_TOKEN


@pytest.fixture
def mock_user_data_dir(tmp_path, monkeypatch):
    """Redirect the user data directory and clear TREESYNC_* variables."""
    for name in ("TREESYNC_GITHUB_TOKEN", "TREESYNC_GITHUB_OWNER",
                 "TREESYNC_GITHUB_REPO", "TREESYNC_GITHUB_BRANCH"):
        monkeypatch.delenv(name, raising=False)
    with patch("treesync4ai.domain.config.get_user_data_dir", return_value=str(tmp_path)):
        yield tmp_path


def test_load_without_file_returns_defaults(mock_user_data_dir):
    assert load_config() == get_default_config()


def test_load_corrupted_file_returns_defaults(mock_user_data_dir):
    (mock_user_data_dir / "config.json").write_text("{ broken", encoding="utf-8")
    assert load_config() == get_default_config()


def test_load_non_dict_file_returns_defaults(mock_user_data_dir):
    (mock_user_data_dir / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert load_config() == get_default_config()


def test_save_then_load_round_trip_without_token(mock_user_data_dir, mock_config_dict):
    save_config(mock_config_dict)

    stored = json.loads((mock_user_data_dir / "config.json").read_text(encoding="utf-8"))
    assert stored["version"] == CURRENT_CONFIG_VERSION
    assert stored["github_token"] == ""

    loaded = load_config()
    assert loaded["github_owner"] == "octo"
    assert loaded["github_token"] == ""
    assert "version" not in loaded


def test_save_with_token_when_requested(mock_user_data_dir, mock_config_dict):
    save_config(mock_config_dict, include_token=True)
    assert load_config()["github_token"] == mock_config_dict["github_token"]


def test_unknown_keys_in_file_are_ignored(mock_user_data_dir):
    (mock_user_data_dir / "config.json").write_text('{"github_repo": "r", "legacy": 1}', encoding="utf-8")
    loaded = load_config()
    assert loaded["github_repo"] == "r"
    assert "legacy" not in loaded


def test_environment_overrides(mock_user_data_dir, monkeypatch):
    monkeypatch.setenv(ENV_TOKEN, "ghp_fromenv")
    monkeypatch.setenv(ENV_OWNER, "envowner")

    loaded = load_config()
    assert loaded["github_token"] == "ghp_fromenv"
    assert loaded["github_owner"] == "envowner"
    assert load_config(apply_env=False)["github_token"] == ""
