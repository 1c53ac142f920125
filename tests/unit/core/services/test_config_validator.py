from __future__ import annotations

"""
Unit tests for the Configuration Validation Service.
"""

import pytest

from treesync4ai.core.services.validator import validate_config
from treesync4ai.domain.config import get_default_config


def test_valid_config_passes_unchanged(mock_config_dict):
    clean, warnings = validate_config(mock_config_dict)
    assert warnings == []
    assert clean == mock_config_dict


def test_non_dict_returns_defaults():
    clean, warnings = validate_config("garbage")
    assert clean == get_default_config()
    assert warnings


def test_non_dict_strict_raises():
    with pytest.raises(TypeError):
        validate_config(None, strict=True)


def test_coercion_of_types(mock_config_dict):
    mock_config_dict.update({
        "timeout": "2.5",
        "max_retries": "x",
        "persist_tree": "no",
        "github_owner": "  octo  ",
        "github_branch": "",
    })

    clean, warnings = validate_config(mock_config_dict)

    assert clean["timeout"] == 2.5
    assert clean["max_retries"] == get_default_config()["max_retries"]
    assert clean["persist_tree"] is False
    assert clean["github_owner"] == "octo"
    assert clean["github_branch"] == "main"
    assert len(warnings) == 2


def test_negative_number_rejected_in_strict_mode(mock_config_dict):
    mock_config_dict["timeout"] = -1
    with pytest.raises(ValueError):
        validate_config(mock_config_dict, strict=True)


def test_zero_timeout_falls_back_to_default(mock_config_dict):
    mock_config_dict["timeout"] = 0

    clean, warnings = validate_config(mock_config_dict)

    assert clean["timeout"] == get_default_config()["timeout"]
    assert any("timeout" in w for w in warnings)


def test_zero_retries_are_allowed(mock_config_dict):
    mock_config_dict["max_retries"] = 0

    clean, warnings = validate_config(mock_config_dict, strict=True)

    assert clean["max_retries"] == 0
    assert warnings == []


def test_unknown_locale_and_keys(mock_config_dict):
    mock_config_dict["locale"] = "de"
    mock_config_dict["surprise"] = 1

    clean, warnings = validate_config(mock_config_dict)

    assert clean["locale"] == "en"
    assert "surprise" not in clean
    assert any("surprise" in w for w in warnings)
