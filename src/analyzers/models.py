"""
Commit Statistics Data Models.

Defines the configuration values and result records of the aggregation engine.
Uses Pydantic for validation and serialization. All models are frozen: they
are built once per run and never mutated afterwards.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from exceptions import ConfigurationError
from miners.models import RepositoryMeta, WeeklyActivity


TOP_CONTRIBUTORS_LIMIT = 5
MONTHS_IN_YEAR = 12


class BotPolicy(Enum):
    """
    How commits by automated identities are counted.

    Attributes:
        INCLUDE_IN_TOTALS: Bot commits count toward totals and monthly buckets
            but never toward contributor tallies
        EXCLUDE: Bot commits are dropped entirely
    """

    INCLUDE_IN_TOTALS = "include_in_totals"
    EXCLUDE = "exclude"


class CountingPolicy(BaseModel):
    """Counting rules applied by the aggregator."""

    model_config = ConfigDict(frozen=True)

    count_merges: bool = False
    bot_policy: BotPolicy = BotPolicy.INCLUDE_IN_TOTALS

    def describe(self) -> str:
        merges = "merges included" if self.count_merges else "merges excluded"
        if self.bot_policy is BotPolicy.EXCLUDE:
            bots = "bots excluded"
        else:
            bots = "bots counted in totals only"
        return f"{merges}; {bots}"


class YearWindow(BaseModel):
    """
    Calendar year, optionally truncated at a cutoff (year-to-date).

    months_counted is the divisor used for the per-month average. For a
    year-to-date window it must be given explicitly rather than derived from
    the cutoff date.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    months_counted: int
    window_start: datetime
    window_end: datetime

    @model_validator(mode="after")
    def check_bounds(self) -> "YearWindow":
        if not 1 <= self.months_counted <= MONTHS_IN_YEAR:
            raise ConfigurationError(
                f"months_counted must be between 1 and 12 for {self.year}, "
                f"got {self.months_counted}"
            )
        if self.window_start.tzinfo is None or self.window_end.tzinfo is None:
            raise ConfigurationError(f"Window bounds for {self.year} must be timezone aware")
        if self.window_start > self.window_end:
            raise ConfigurationError(
                f"Window start {self.window_start.isoformat()} is after "
                f"window end {self.window_end.isoformat()}"
            )
        for bound in (self.window_start, self.window_end):
            if bound.astimezone(timezone.utc).year != self.year:
                raise ConfigurationError(
                    f"Window bound {bound.isoformat()} lies outside {self.year}"
                )
        return self

    @classmethod
    def full_year(cls, year: int) -> "YearWindow":
        return cls(
            year=year,
            months_counted=MONTHS_IN_YEAR,
            window_start=datetime(year, 1, 1, tzinfo=timezone.utc),
            window_end=datetime(year, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        )

    @classmethod
    def year_to_date(cls, year: int, cutoff: date, months_counted: int) -> "YearWindow":
        """Window from January 1st through the end of the cutoff day (UTC)."""
        return cls(
            year=year,
            months_counted=months_counted,
            window_start=datetime(year, 1, 1, tzinfo=timezone.utc),
            window_end=datetime.combine(cutoff, time(23, 59, 59), tzinfo=timezone.utc),
        )

    @property
    def is_year_to_date(self) -> bool:
        return self.window_end < datetime(self.year, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

    @property
    def label(self) -> str:
        return f"{self.year} (YTD)" if self.is_year_to_date else str(self.year)

    def contains(self, moment: datetime) -> bool:
        return self.window_start <= moment <= self.window_end


class ContributorCount(BaseModel):
    """Commit count of a single human contributor."""

    model_config = ConfigDict(frozen=True)

    author: str
    commits: int


class YearAggregate(BaseModel):
    """Commit statistics for one repository and one year window."""

    model_config = ConfigDict(frozen=True)

    year: int
    total_commits: int
    monthly_counts: Tuple[int, ...]
    average_per_month: float
    unique_human_contributors: int
    top_contributors: Tuple[ContributorCount, ...] = ()


class TrackedProject(BaseModel):
    """Repository included in the report."""

    model_config = ConfigDict(frozen=True)

    label: str
    slug: str

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v: str) -> str:
        parts = v.strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise ConfigurationError(f"Repository slug must look like owner/name, got {v!r}")
        return v.strip()

    @property
    def owner(self) -> str:
        return self.slug.split("/")[0]

    @property
    def name(self) -> str:
        return self.slug.split("/")[1]


class ProjectSnapshot(BaseModel):
    """Everything the report shows for one tracked project."""

    model_config = ConfigDict(frozen=True)

    project_label: str
    repository_slug: str
    repository_meta: RepositoryMeta
    year_a: YearAggregate
    year_b: YearAggregate
    weekly_activity: Optional[WeeklyActivity] = None


class ReportConfig(BaseModel):
    """Run configuration, built once at startup and passed to each component."""

    model_config = ConfigDict(frozen=True)

    projects: Tuple[TrackedProject, ...]
    window_a: YearWindow
    window_b: YearWindow
    policy: CountingPolicy = Field(default_factory=CountingPolicy)
    deny_list_path: Optional[str] = None
    fetch_weekly_activity: bool = False

    @property
    def project_labels(self) -> List[str]:
        return [project.label for project in self.projects]
