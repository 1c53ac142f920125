from __future__ import annotations

"""
GitHub Remote Infrastructure.

Facade over the GitHub-backed implementation of the repository gateway.
"""

from treesync4ai.infra.github.common import GitHubSettings, USER_AGENT, build_session
from treesync4ai.infra.github.gateway import GitHubGateway, build_gateway

__all__ = [
    "GitHubSettings",
    "GitHubGateway",
    "USER_AGENT",
    "build_gateway",
    "build_session",
]
