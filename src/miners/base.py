"""
Abstract Base Class for Repository Miners.

Defines the interface for repository data mining implementations.
All repository miners (GitHub, GitLab, etc.) should implement this interface.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from miners.models import CommitRecord, RepositoryMeta, WeeklyActivity


class RepositoryMiner(ABC):
    """
    Abstract base class for repository miners.

    Defines the contract for mining repository data from different sources.
    Implementations should handle:
    - Authentication with the repository service
    - Pagination of list endpoints
    - Transformation of raw payloads to common models
    - Translation of transport failures into UpstreamError
    """

    @abstractmethod
    async def fetch_repository_meta(self, owner: str, repo: str) -> RepositoryMeta:
        """
        Fetch repository metadata.

        Args:
            owner (str): Repository owner
            repo (str): Repository name

        Returns:
            RepositoryMeta: Stars, forks, URL and default branch

        Raises:
            UpstreamError: If the request fails
        """
        pass

    @abstractmethod
    async def fetch_commits(
        self, owner: str, repo: str, since: datetime, until: datetime
    ) -> List[CommitRecord]:
        """
        Fetch every commit authored in the given time range.

        Args:
            owner (str): Repository owner
            repo (str): Repository name
            since (datetime): Inclusive lower bound
            until (datetime): Inclusive upper bound

        Returns:
            List[CommitRecord]: Commits from all pages, in page order

        Raises:
            UpstreamError: If any page fails; nothing is returned in that case
        """
        pass

    @abstractmethod
    async def fetch_weekly_activity(
        self, owner: str, repo: str
    ) -> Optional[WeeklyActivity]:
        """
        Fetch precomputed weekly commit activity.

        Returns:
            Optional[WeeklyActivity]: None when the statistics are not
                available this run
        """
        pass
