from __future__ import annotations

"""
GitHub Transport Primitives.

Connection settings and HTTP session construction shared by the GitHub
gateway. Transient failures are retried with exponential backoff at the
adapter level; permanent 4xx responses are never retried.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from treesync4ai.domain.constants import (
    APP_VERSION,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_BRANCH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    GITHUB_ACCEPT_HEADER,
    GITHUB_API_URL,
    RETRY_STATUS_CODES,
)

USER_AGENT = f"TreeSync4AI-Client/{APP_VERSION}"
RETRY_METHODS = frozenset({"GET", "PUT"})


@dataclass(frozen=True)
class GitHubSettings:
    """
    Immutable connection settings for a single repository.

    Attributes:
        owner: Repository owner (user or organization).
        repo: Repository name.
        token: Personal access token.
        branch: Target branch for reads and writes.
        api_url: Base URL of the REST API.
        timeout: Per-request timeout in seconds.
        max_retries: Retry budget for transient failures.
        backoff_factor: Exponential backoff base in seconds.
    """
    owner: str
    repo: str
    token: str
    branch: str = DEFAULT_BRANCH
    api_url: str = GITHUB_API_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR

    @property
    def is_complete(self) -> bool:
        return bool(self.owner and self.repo and self.token)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "GitHubSettings":
        """Build settings from a validated configuration dictionary."""
        return cls(
            owner=str(cfg.get("github_owner") or "").strip(),
            repo=str(cfg.get("github_repo") or "").strip(),
            token=str(cfg.get("github_token") or "").strip(),
            branch=str(cfg.get("github_branch") or DEFAULT_BRANCH).strip(),
            api_url=str(cfg.get("github_api_url") or GITHUB_API_URL).rstrip("/"),
            timeout=float(cfg.get("timeout", DEFAULT_TIMEOUT)),
            max_retries=int(cfg.get("max_retries", DEFAULT_MAX_RETRIES)),
            backoff_factor=float(cfg.get("backoff_factor", DEFAULT_BACKOFF_FACTOR)),
        )

    def __repr__(self) -> str:
        # Never expose the token in logs or tracebacks
        return (
            f"GitHubSettings(owner={self.owner!r}, repo={self.repo!r}, "
            f"branch={self.branch!r}, token={'***' if self.token else ''!r})"
        )


def build_session(settings: GitHubSettings, session: Optional[requests.Session] = None) -> requests.Session:
    """
    Create an authenticated session with transient-failure retries mounted.

    Args:
        settings: Repository connection settings.
        session: Optional pre-built session to configure.

    Returns:
        requests.Session: Configured session.
    """
    s = session or requests.Session()
    s.headers.update({
        "Authorization": f"token {settings.token}",
        "Accept": GITHUB_ACCEPT_HEADER,
        "User-Agent": USER_AGENT,
    })

    retry = Retry(
        total=max(0, settings.max_retries),
        backoff_factor=settings.backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=RETRY_METHODS,
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


def quote_path(path: str) -> str:
    """URL-quote a repository path while keeping its slashes."""
    return quote(path.strip("/"), safe="/")
