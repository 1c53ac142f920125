from __future__ import annotations

"""
Domain Constants.

Centralized access to application-wide constants: versioning, remote
repository defaults, wire-level templates and instruction markers.
"""

from typing import Tuple

APP_NAME = "TreeSync4AI"
APP_VERSION = "1.0.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# TREE MODEL
# -----------------------------------------------------------------------------
ROOT_NAME = "root"
PATH_SEPARATOR = "/"

# -----------------------------------------------------------------------------
# REMOTE REPOSITORY (GITHUB)
# -----------------------------------------------------------------------------
GITHUB_API_URL = "https://api.github.com"
GITHUB_ACCEPT_HEADER = "application/vnd.github+json"
DEFAULT_BRANCH = "main"
COMMIT_MESSAGE_TEMPLATE = "Update file {path}"

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF_FACTOR = 0.5

# Transient statuses eligible for retry. Permanent 4xx failures are never retried.
RETRY_STATUS_CODES: Tuple[int, ...] = (429, 500, 502, 503, 504)

# -----------------------------------------------------------------------------
# INSTRUCTION MARKERS
# -----------------------------------------------------------------------------
FILE_MARKER_PATTERN = r"^Fichier:\s*(.+)$"
SUMMARY_MARKER_PATTERN = r"^Resumer:\s*(.+)$"

# Lowercase literal scanned line by line to locate the start of the code body
FILE_MARKER_LITERAL = "fichier:"

# -----------------------------------------------------------------------------
# ENVIRONMENT OVERRIDES
# -----------------------------------------------------------------------------
ENV_TOKEN = "TREESYNC_GITHUB_TOKEN"
ENV_OWNER = "TREESYNC_GITHUB_OWNER"
ENV_REPO = "TREESYNC_GITHUB_REPO"
ENV_BRANCH = "TREESYNC_GITHUB_BRANCH"
