"""
GitHub Repository Data Mining Module.

This module handles the extraction of raw commit data and repository metadata
from the GitHub REST API. It transforms PyGithub objects into immutable
Pydantic records and translates every transport failure into UpstreamError.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

import requests
from github import Auth, Github, GithubException
from github.Commit import Commit
from github.Repository import Repository
from github.StatsCommitActivity import StatsCommitActivity
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt, wait_fixed

from config import logger
from exceptions import UpstreamError, UpstreamErrorKind
from miners.base import RepositoryMiner
from miners.models import (
    CommitRecord,
    RepositoryMeta,
    WeekActivity,
    WeeklyActivity,
)


COMMITS_PER_PAGE = 100


def _stats_pending(result: Optional[List[StatsCommitActivity]]) -> bool:
    # GitHub answers 202 with an empty body while it computes statistics
    return not result


def _accept_last_result(retry_state: RetryCallState) -> Optional[List[StatsCommitActivity]]:
    return retry_state.outcome.result()


class GitHubMiner(RepositoryMiner):
    """
    GitHubMiner is responsible for mining commit data from GitHub repositories.

    Attributes:
        github (Github): PyGithub client, with library retries disabled
        stats_poll_attempts (int): Maximum polls of the statistics endpoint
        stats_poll_delay (float): Seconds between statistics polls
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        request_timeout: float = 30.0,
        stats_poll_attempts: int = 5,
        stats_poll_delay: float = 2.0,
    ):
        """Initialize GitHub miner with optional authentication.

        Args:
            github_token (Optional[str]): GitHub API token. Without one the
                unauthenticated rate limit applies.
            request_timeout (float): Seconds before a request is abandoned.
            stats_poll_attempts (int): Maximum polls of the statistics endpoint.
            stats_poll_delay (float): Seconds between statistics polls.
        """
        if not github_token:
            logger.warning(
                {"message": "No GitHub token configured, using unauthenticated limits"}
            )
        auth = Auth.Token(github_token) if github_token else None
        self.github = Github(
            auth=auth,
            per_page=COMMITS_PER_PAGE,
            timeout=request_timeout,
            retry=None,
        )
        self.stats_poll_attempts = stats_poll_attempts
        self.stats_poll_delay = stats_poll_delay

    @contextmanager
    def _upstream(self, endpoint: str) -> Iterator[None]:
        """Translate PyGithub and transport errors into UpstreamError."""
        try:
            yield
        except GithubException as e:
            logger.error(
                {
                    "message": "GitHub request failed",
                    "endpoint": endpoint,
                    "status": e.status,
                }
            )
            raise UpstreamError(
                UpstreamErrorKind.HTTP_STATUS, endpoint, status=e.status, body=e.data
            ) from e
        except requests.exceptions.Timeout as e:
            logger.error({"message": "GitHub request timed out", "endpoint": endpoint})
            raise UpstreamError(UpstreamErrorKind.TIMEOUT, endpoint, body=str(e)) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                {
                    "message": "GitHub connection failed",
                    "endpoint": endpoint,
                    "error": str(e),
                }
            )
            raise UpstreamError(UpstreamErrorKind.CONNECTION, endpoint, body=str(e)) from e

    def check_rate_limit(self, check_name: str, endpoint: str) -> None:
        """
        Check and log the GitHub API rate limit status.

        Args:
            check_name (str): Identifier for the rate limit check point.
            endpoint (str): Endpoint about to be called, reported on exhaustion.

        Raises:
            UpstreamError: When the rate limit is exhausted.
        """
        with self._upstream("/rate_limit"):
            remaining, limit = self.github.rate_limiting
            reset_time = datetime.fromtimestamp(
                self.github.rate_limiting_resettime, timezone.utc
            )
        now = datetime.now(timezone.utc)

        logger.info(
            {
                "message": f"{check_name} API rate limit status",
                "remaining_points": remaining,
                "total_points": limit,
                "reset_time": reset_time.isoformat(),
                "minutes_to_reset": (reset_time - now).total_seconds() / 60,
            }
        )

        if 0 < remaining < limit * 0.1:
            logger.warning(
                {
                    "message": "GitHub API rate limit running low",
                    "remaining_points": remaining,
                    "reset_time": reset_time.isoformat(),
                }
            )

        if remaining == 0:
            wait_time = (reset_time - now).total_seconds()
            logger.critical(
                {
                    "message": "GitHub API rate limit exhausted",
                    "reset_time": reset_time.isoformat(),
                    "wait_time_seconds": wait_time,
                }
            )
            raise UpstreamError(
                UpstreamErrorKind.RATE_LIMITED,
                endpoint,
                body=f"resets in {wait_time / 60:.1f} minutes",
            )

    def _get_repository(self, owner: str, repo: str) -> Repository:
        # Lazy: no request until an endpoint of the repository is called
        return self.github.get_repo(f"{owner}/{repo}", lazy=True)

    def _get_commit_data(self, commit: Commit) -> Optional[CommitRecord]:
        """Convert a GitHub Commit object to a Pydantic model.

        Args:
            commit (Commit): Commit from the listing endpoint.

        Returns:
            Optional[CommitRecord]: The commit record, or None when the payload
                carries neither an author nor a committer date.
        """
        account = commit.author
        git_commit = commit.commit
        git_author = git_commit.author
        git_committer = git_commit.committer

        authored_at = None
        if git_author is not None and git_author.date:
            authored_at = git_author.date
        elif git_committer is not None and git_committer.date:
            authored_at = git_committer.date

        if authored_at is None:
            logger.warning({"message": "Commit without date skipped", "sha": commit.sha})
            return None

        return CommitRecord(
            sha=commit.sha,
            author_login=account.login if account is not None else None,
            author_name=(git_author.name if git_author is not None else "") or "",
            author_email=(git_author.email if git_author is not None else "") or "",
            author_is_bot=(account.type == "Bot") if account is not None else None,
            authored_at=authored_at,
            parent_count=len(commit.parents),
        )

    async def fetch_repository_meta(self, owner: str, repo: str) -> RepositoryMeta:
        endpoint = f"/repos/{owner}/{repo}"
        logger.info({"message": "Fetching repository metadata", "endpoint": endpoint})
        self.check_rate_limit("Repository mining", endpoint)

        with self._upstream(endpoint):
            repository = self.github.get_repo(f"{owner}/{repo}")
            return RepositoryMeta(
                full_name=repository.full_name,
                stars=repository.stargazers_count,
                forks=repository.forks_count,
                html_url=repository.html_url,
                default_branch=repository.default_branch,
            )

    async def fetch_commits(
        self, owner: str, repo: str, since: datetime, until: datetime
    ) -> List[CommitRecord]:
        endpoint = (
            f"/repos/{owner}/{repo}/commits"
            f"?per_page={COMMITS_PER_PAGE}&since={since.isoformat()}&until={until.isoformat()}"
        )
        logger.info({"message": "Fetching commits", "endpoint": endpoint})

        commits = []
        with self._upstream(endpoint):
            # PaginatedList follows the Link rel="next" header page by page
            for commit in self._get_repository(owner, repo).get_commits(
                since=since, until=until
            ):
                record = self._get_commit_data(commit)
                if record is not None:
                    commits.append(record)

        logger.info(
            {
                "message": "Fetched commits",
                "endpoint": endpoint,
                "commits": len(commits),
            }
        )
        return commits

    async def _request_commit_activity(
        self, owner: str, repo: str, endpoint: str
    ) -> Optional[List[StatsCommitActivity]]:
        with self._upstream(endpoint):
            return self._get_repository(owner, repo).get_stats_commit_activity()

    async def fetch_weekly_activity(
        self, owner: str, repo: str
    ) -> Optional[WeeklyActivity]:
        endpoint = f"/repos/{owner}/{repo}/stats/commit_activity"

        def log_pending(retry_state: RetryCallState) -> None:
            logger.info(
                {
                    "message": "Weekly statistics still computing, polling again",
                    "endpoint": endpoint,
                    "attempt": retry_state.attempt_number,
                    "delay_seconds": self.stats_poll_delay,
                }
            )

        retryer = AsyncRetrying(
            stop=stop_after_attempt(self.stats_poll_attempts),
            wait=wait_fixed(self.stats_poll_delay),
            retry=retry_if_result(_stats_pending),
            retry_error_callback=_accept_last_result,
            before_sleep=log_pending,
        )
        stats = await retryer(self._request_commit_activity, owner, repo, endpoint)

        if not stats:
            logger.warning(
                {
                    "message": "Weekly statistics unavailable this run",
                    "endpoint": endpoint,
                    "attempts": self.stats_poll_attempts,
                }
            )
            return None

        return WeeklyActivity(
            repository_name=f"{owner}/{repo}",
            weeks=[
                WeekActivity(week_start=week.week, total=week.total, days=list(week.days))
                for week in stats
            ],
        )
