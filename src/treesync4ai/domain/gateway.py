from __future__ import annotations

"""
Remote Repository Gateway Interface.

Abstract capability through which the reconciliation engine reaches the
remote store. The engine depends only on these three operations, never on
transport details.
"""

from abc import ABC, abstractmethod
from typing import Optional

from treesync4ai.domain.tree_models import DirectoryNode


class RepositoryGateway(ABC):
    """
    Abstract base class for remote repository backends.
    """

    @abstractmethod
    def fetch_tree(self) -> Optional[DirectoryNode]:
        """
        Retrieve the full recursive listing of the configured branch.

        Returns:
            Optional[DirectoryNode]: Reconstructed tree (empty file bodies),
                                     or None on any non-success outcome.
        """

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        """
        Check whether an exact path exists remotely.

        Returns:
            bool: True when found. Not-found and any other outcome yield False.
        """

    @abstractmethod
    def write_file(self, path: str, content: str) -> bool:
        """
        Create or update a single file.

        Returns:
            bool: True when the upsert succeeded.
        """
