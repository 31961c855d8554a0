"""
Snapshot Builder Test Suite.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from analyzers.models import ContributorCount, ProjectSnapshot, YearAggregate
from analyzers.snapshot import SnapshotBuilder
from exceptions import ValidationError
from miners.models import RepositoryMeta


@pytest.fixture
def meta():
    return RepositoryMeta(
        full_name="acme/widgets",
        stars=1200,
        forks=340,
        html_url="https://github.com/acme/widgets",
        default_branch="main",
    )


def make_aggregate(year=2024, monthly=None, total=None, top=()):
    monthly = tuple(monthly if monthly is not None else [1] * 12)
    return YearAggregate(
        year=year,
        total_commits=sum(monthly) if total is None else total,
        monthly_counts=monthly,
        average_per_month=1.0,
        unique_human_contributors=len(top),
        top_contributors=tuple(top),
    )


def test_build_snapshot(meta):
    """Test a valid pair of aggregates is composed unchanged."""
    aggregate_a = make_aggregate(2024, top=[ContributorCount(author="alice", commits=12)])
    aggregate_b = make_aggregate(2025, monthly=[2] * 10 + [0, 0])

    snapshot = SnapshotBuilder().build("Widgets", "acme/widgets", meta, aggregate_a, aggregate_b)

    assert isinstance(snapshot, ProjectSnapshot)
    assert snapshot.project_label == "Widgets"
    assert snapshot.repository_slug == "acme/widgets"
    assert snapshot.repository_meta == meta
    assert snapshot.year_a is aggregate_a
    assert snapshot.year_b is aggregate_b
    assert snapshot.weekly_activity is None


def test_snapshot_is_immutable(meta):
    """Test snapshots cannot be modified after construction."""
    snapshot = SnapshotBuilder().build(
        "Widgets", "acme/widgets", meta, make_aggregate(), make_aggregate(2025)
    )

    with pytest.raises(PydanticValidationError):
        snapshot.project_label = "Other"


def test_monthly_mismatch_rejected(meta):
    """Test buckets that do not sum to the total fail validation."""
    broken = make_aggregate(total=13)

    with pytest.raises(ValidationError, match="sum to 12"):
        SnapshotBuilder().build("Widgets", "acme/widgets", meta, make_aggregate(), broken)


def test_negative_total_rejected(meta):
    """Test negative totals fail validation."""
    broken = make_aggregate(monthly=[0] * 12, total=-1)

    with pytest.raises(ValidationError, match="negative total"):
        SnapshotBuilder().build("Widgets", "acme/widgets", meta, broken, make_aggregate())


def test_wrong_bucket_count_rejected(meta):
    """Test an aggregate without twelve monthly buckets fails validation."""
    broken = make_aggregate(monthly=[1] * 11)

    with pytest.raises(ValidationError, match="11 monthly buckets"):
        SnapshotBuilder().build("Widgets", "acme/widgets", meta, make_aggregate(), broken)
