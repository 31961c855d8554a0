"""
Project Snapshot Module.

Composes repository metadata and the two year aggregates of a project into
the record handed to report rendering. Nothing is recomputed here; the
aggregates are only checked against their invariants.
"""

from typing import Optional

from config import logger
from exceptions import ValidationError
from miners.models import RepositoryMeta, WeeklyActivity
from analyzers.models import (
    MONTHS_IN_YEAR,
    TOP_CONTRIBUTORS_LIMIT,
    ProjectSnapshot,
    YearAggregate,
)


class SnapshotBuilder:
    """Builds validated ProjectSnapshot records."""

    def _validate(self, project_label: str, aggregate: YearAggregate) -> None:
        """Raise ValidationError if the aggregate is internally inconsistent."""
        problems = []
        if aggregate.total_commits < 0:
            problems.append(f"negative total {aggregate.total_commits}")
        if len(aggregate.monthly_counts) != MONTHS_IN_YEAR:
            problems.append(f"{len(aggregate.monthly_counts)} monthly buckets")
        if any(count < 0 for count in aggregate.monthly_counts):
            problems.append("negative monthly bucket")
        if sum(aggregate.monthly_counts) != aggregate.total_commits:
            problems.append(
                f"monthly buckets sum to {sum(aggregate.monthly_counts)}, "
                f"total is {aggregate.total_commits}"
            )
        if aggregate.unique_human_contributors < 0:
            problems.append(
                f"negative contributor count {aggregate.unique_human_contributors}"
            )
        if len(aggregate.top_contributors) > TOP_CONTRIBUTORS_LIMIT:
            problems.append(f"{len(aggregate.top_contributors)} top contributors")

        if problems:
            logger.error(
                {
                    "message": "Aggregate failed validation",
                    "project": project_label,
                    "year": aggregate.year,
                    "problems": problems,
                }
            )
            raise ValidationError(
                f"Aggregate {aggregate.year} of {project_label} is invalid: "
                + "; ".join(problems)
            )

    def build(
        self,
        project_label: str,
        repository_slug: str,
        repository_meta: RepositoryMeta,
        aggregate_a: YearAggregate,
        aggregate_b: YearAggregate,
        weekly_activity: Optional[WeeklyActivity] = None,
    ) -> ProjectSnapshot:
        """
        Build the snapshot of one project.

        Raises:
            ValidationError: If either aggregate breaks its invariants
        """
        self._validate(project_label, aggregate_a)
        self._validate(project_label, aggregate_b)

        return ProjectSnapshot(
            project_label=project_label,
            repository_slug=repository_slug,
            repository_meta=repository_meta,
            year_a=aggregate_a,
            year_b=aggregate_b,
            weekly_activity=weekly_activity,
        )
