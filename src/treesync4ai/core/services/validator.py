from __future__ import annotations

"""
Configuration Validation Service.

Ensures that the configuration dictionary conforms to the expected schema
before the session and gateway are built. Handles type coercion and default
value injection.
"""

import logging
from typing import Any, Dict, List, Tuple

from treesync4ai.domain.config import get_default_config

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES = ("en", "fr")

_STRING_FIELDS = [
    "github_owner", "github_repo", "github_token", "github_branch",
    "github_api_url", "tree_file", "locale", "log_level", "log_file",
]
_BOOL_FIELDS = ["persist_tree"]
_NUMBER_FIELDS = {"timeout": float, "max_retries": int, "backoff_factor": float}
_POSITIVE_FIELDS = ("timeout",)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for key in _STRING_FIELDS:
        value = merged.get(key)
        if value is None:
            merged[key] = defaults[key]
        elif not isinstance(value, str):
            _fail_or_warn(f"'{key}' must be a string.", strict, warnings)
            merged[key] = str(value)
        merged[key] = merged[key].strip()

    for key in _BOOL_FIELDS:
        value = merged.get(key)
        if not isinstance(value, bool):
            _fail_or_warn(f"'{key}' must be a boolean.", strict, warnings)
            merged[key] = _coerce_bool(value, defaults[key])

    for key, caster in _NUMBER_FIELDS.items():
        value = merged.get(key)
        try:
            number = caster(value)
            if number < 0 or (key in _POSITIVE_FIELDS and number <= 0):
                raise ValueError(key)
        except (TypeError, ValueError):
            bound = "positive" if key in _POSITIVE_FIELDS else "non-negative"
            _fail_or_warn(f"'{key}' must be a {bound} number.", strict, warnings)
            number = defaults[key]
        merged[key] = number

    if not merged["github_branch"]:
        merged["github_branch"] = defaults["github_branch"]

    if merged["locale"] not in SUPPORTED_LOCALES:
        _fail_or_warn(f"Unsupported locale '{merged['locale']}'.", strict, warnings)
        merged["locale"] = defaults["locale"]

    unknown = sorted(set(config) - set(defaults))
    if unknown:
        warnings.append(f"Ignoring unknown keys: {', '.join(unknown)}")
        for key in unknown:
            merged.pop(key, None)

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _fail_or_warn(msg: str, strict: bool, warnings: List[str]) -> None:
    if strict:
        raise ValueError(msg)
    warnings.append(msg)
    logger.warning(msg)


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        return default
    if value is None:
        return default
    return bool(value)
