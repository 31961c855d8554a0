"""
Multi-Repository Analysis Module.

This module coordinates the commit analysis of every tracked project:

- Repository metadata retrieval
- Commit retrieval for both year windows
- Aggregation and snapshot construction
- Optional weekly activity retrieval

Projects are processed one after another. A remote failure drops that project
from the report; it is never replaced by zero counts.
"""

from typing import Dict

from config import logger
from exceptions import UpstreamError
from miners.base import RepositoryMiner
from analyzers.aggregator import CommitAggregator
from analyzers.models import ProjectSnapshot, ReportConfig, TrackedProject
from analyzers.snapshot import SnapshotBuilder


class MultiRepositoryAnalyzer:
    """
    Coordinates the analysis of multiple GitHub repositories.

    Attributes:
        miner (RepositoryMiner): Source of metadata and commits.
        aggregator (CommitAggregator): Computes the year statistics.
        builder (SnapshotBuilder): Composes the per-project result.
        config (ReportConfig): Projects, windows and counting policy.
    """

    def __init__(
        self,
        miner: RepositoryMiner,
        aggregator: CommitAggregator,
        builder: SnapshotBuilder,
        config: ReportConfig,
    ):
        """Initialize the multi-repository analyzer.

        Args:
            miner (RepositoryMiner): Source of metadata and commits.
            aggregator (CommitAggregator): Computes the year statistics.
            builder (SnapshotBuilder): Composes the per-project result.
            config (ReportConfig): Projects, windows and counting policy.
        """
        self.miner = miner
        self.aggregator = aggregator
        self.builder = builder
        self.config = config

    async def analyze_project(self, project: TrackedProject) -> ProjectSnapshot:
        """
        Fetch, aggregate and build the snapshot of one project.

        Each window's commits are fully fetched before they are aggregated.

        Raises:
            UpstreamError: If any remote call fails
            ValidationError: If an aggregate breaks its invariants
        """
        owner, name = project.owner, project.name
        meta = await self.miner.fetch_repository_meta(owner, name)

        aggregates = []
        for window in (self.config.window_a, self.config.window_b):
            commits = await self.miner.fetch_commits(
                owner, name, window.window_start, window.window_end
            )
            aggregates.append(self.aggregator.aggregate(commits, window, project.slug))

        weekly_activity = None
        if self.config.fetch_weekly_activity:
            weekly_activity = await self.miner.fetch_weekly_activity(owner, name)

        return self.builder.build(
            project.label, project.slug, meta, aggregates[0], aggregates[1], weekly_activity
        )

    async def analyze_repositories(self) -> Dict[str, ProjectSnapshot]:
        """
        Analyze all configured projects.

        Returns:
            Dict[str, ProjectSnapshot]: Snapshots keyed by repository slug, in
                configured order. Projects whose remote calls failed are absent.

        Note:
            UpstreamError is logged and skips the project. ValidationError and
            ConfigurationError propagate because they indicate a defect.
        """
        results = {}
        for project in self.config.projects:
            logger.info(
                {
                    "message": "Analyzing repository",
                    "project": project.label,
                    "repository": project.slug,
                }
            )
            try:
                results[project.slug] = await self.analyze_project(project)
            except UpstreamError as e:
                logger.error(
                    {
                        "message": "Failed to analyze repository, project skipped",
                        "project": project.label,
                        "repository": project.slug,
                        "kind": e.kind.value,
                        "endpoint": e.endpoint,
                        "status": e.status,
                        "error": str(e),
                    }
                )

        logger.info(
            {
                "message": "Repository analysis completed",
                "analyzed": len(results),
                "configured": len(self.config.projects),
            }
        )
        return results
