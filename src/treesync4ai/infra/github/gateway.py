from __future__ import annotations

"""
GitHub Repository Gateway.

Implements the remote repository capability against the GitHub REST API:
recursive tree listing, single-path existence checks, and create-or-update
of file contents. All transport failures are caught here and reported as
None/False; nothing raised by `requests` escapes to the engine.
"""

import base64
import logging
from typing import Any, Dict, Optional

import requests

from treesync4ai.core.tree.operations import insert_path
from treesync4ai.domain.constants import COMMIT_MESSAGE_TEMPLATE
from treesync4ai.domain.errors import PathConflictError
from treesync4ai.domain.gateway import RepositoryGateway
from treesync4ai.domain.tree_models import DirectoryNode, empty_root
from treesync4ai.infra.github.common import GitHubSettings, build_session, quote_path

logger = logging.getLogger(__name__)


class GitHubGateway(RepositoryGateway):
    """
    RepositoryGateway backed by the GitHub REST API.

    No state is cached between calls: existence and revision markers are
    looked up fresh every time.
    """

    def __init__(self, settings: GitHubSettings, session: Optional[requests.Session] = None):
        """
        Args:
            settings: Repository connection settings (must be complete).
            session: Optional session, mainly for tests.
        """
        self.settings = settings
        self._session = build_session(settings, session)
        self._repo_url = f"{settings.api_url}/repos/{settings.owner}/{settings.repo}"

    # -------------------------------------------------------------------------
    # RepositoryGateway
    # -------------------------------------------------------------------------

    def fetch_tree(self) -> Optional[DirectoryNode]:
        """Retrieve the recursive listing of the configured branch."""
        url = f"{self._repo_url}/git/trees/{quote_path(self.settings.branch)}"
        logger.info(f"GitHub: fetching tree of {self.settings.owner}/{self.settings.repo}@{self.settings.branch}")

        response = self._request("GET", url, params={"recursive": "1"})
        if response is None:
            return None
        if not response.ok:
            logger.error(f"GitHub: tree listing failed ({response.status_code}): {_error_text(response)}")
            return None

        data = _json_or_none(response)
        if not isinstance(data, dict) or not isinstance(data.get("tree"), list):
            logger.error("GitHub: tree listing returned no 'tree' entries.")
            return None
        if data.get("truncated"):
            logger.warning("GitHub: tree listing is truncated; local tree may be incomplete.")

        root = empty_root()
        try:
            for item in data["tree"]:
                path = item.get("path")
                if not path:
                    continue
                root = insert_path(root, path.split("/"), item.get("type") == "blob")
        except PathConflictError as e:
            logger.error(f"GitHub: inconsistent tree listing: {e}")
            return None

        logger.debug(f"GitHub: tree reconstructed from {len(data['tree'])} entries.")
        return root

    def path_exists(self, path: str) -> bool:
        """Check an exact path; anything but 200/404 is logged and reported as missing."""
        response = self._request("GET", self._contents_url(path), params={"ref": self.settings.branch})
        if response is None:
            return False
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        logger.warning(
            f"GitHub: existence check for '{path}' returned {response.status_code}: {_error_text(response)}"
        )
        return False

    def write_file(self, path: str, content: str) -> bool:
        """Create or update a file, passing the current blob sha when one exists."""
        url = self._contents_url(path)
        sha = self._lookup_sha(url, path)

        body: Dict[str, Any] = {
            "message": COMMIT_MESSAGE_TEMPLATE.format(path=path),
            "content": base64.b64encode((content or "").encode("utf-8")).decode("ascii"),
            "branch": self.settings.branch,
        }
        if sha:
            body["sha"] = sha

        response = self._request("PUT", url, json=body)
        if response is None:
            return False
        if not response.ok:
            logger.error(f"GitHub: update of '{path}' failed ({response.status_code}): {_error_text(response)}")
            return False

        logger.info(f"GitHub: {'updated' if sha else 'created'} '{path}'.")
        return True

    # -------------------------------------------------------------------------
    # INTERNAL HELPERS
    # -------------------------------------------------------------------------

    def _contents_url(self, path: str) -> str:
        return f"{self._repo_url}/contents/{quote_path(path)}"

    def _lookup_sha(self, url: str, path: str) -> Optional[str]:
        """Return the revision marker of an existing file, or None."""
        response = self._request("GET", url, params={"ref": self.settings.branch})
        if response is None or not response.ok:
            if response is not None and response.status_code != 404:
                logger.warning(f"GitHub: revision lookup for '{path}' returned {response.status_code}.")
            return None

        data = _json_or_none(response)
        if isinstance(data, dict):
            return data.get("sha")
        return None

    def _request(self, method: str, url: str, **kwargs: Any) -> Optional[requests.Response]:
        """Issue a request, turning transport failures into None."""
        try:
            return self._session.request(method, url, timeout=self.settings.timeout, **kwargs)
        except requests.exceptions.Timeout:
            logger.error(f"GitHub: {method} {url} timed out after {self.settings.timeout}s.")
        except requests.exceptions.RequestException as e:
            logger.error(f"GitHub: {method} {url} failed: {e}")
        return None


def build_gateway(cfg: Dict[str, Any], session: Optional[requests.Session] = None) -> Optional[GitHubGateway]:
    """
    Build a gateway from configuration, or None when credentials are incomplete.
    """
    settings = GitHubSettings.from_config(cfg)
    if not settings.is_complete:
        logger.debug("GitHub: owner, repo or token missing; remote gateway disabled.")
        return None
    return GitHubGateway(settings, session=session)


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_text(response: requests.Response) -> str:
    data = _json_or_none(response)
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return (response.text or "")[:200]
