"""
Repository Mining Data Models.

Defines the immutable records produced by repository miners.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


UNKNOWN_AUTHOR = "unknown"


class CommitRecord(BaseModel):
    """Single commit as returned by the commit listing endpoint."""

    model_config = ConfigDict(frozen=True)

    sha: str
    author_login: Optional[str] = None
    author_name: str = ""
    author_email: str = ""
    author_is_bot: Optional[bool] = None  # account type reported by the source
    authored_at: datetime
    parent_count: int = Field(default=1, ge=0)

    @field_validator("authored_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC; aware ones are converted."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1

    @property
    def author_key(self) -> str:
        """
        Contributor identity used for counting.

        Priority is login, then email, then display name. Commits without any
        of the three collapse into a single "unknown" contributor, and two
        commits sharing an email are one contributor even when their display
        names differ.
        """
        return self.author_login or self.author_email or self.author_name or UNKNOWN_AUTHOR


class RepositoryMeta(BaseModel):
    """Repository metadata shown alongside the commit statistics."""

    model_config = ConfigDict(frozen=True)

    full_name: str
    stars: int
    forks: int
    html_url: str
    default_branch: str


class WeekActivity(BaseModel):
    """One week of the precomputed commit activity series."""

    model_config = ConfigDict(frozen=True)

    week_start: datetime
    total: int
    days: List[int]


class WeeklyActivity(BaseModel):
    """Precomputed weekly commit activity for the last year."""

    model_config = ConfigDict(frozen=True)

    repository_name: str
    collection_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    weeks: List[WeekActivity]

    @property
    def total_commits(self) -> int:
        return sum(week.total for week in self.weeks)
