"""
Verification Record Storage Test Suite.
"""

import json
from datetime import date, datetime, timezone

import pandas as pd
import pytest

from analyzers.models import (
    ContributorCount,
    ProjectSnapshot,
    ReportConfig,
    TrackedProject,
    YearAggregate,
    YearWindow,
)
from miners.models import RepositoryMeta
from storage.repository_store import RepositoryStore


@pytest.fixture
def config():
    return ReportConfig(
        projects=(TrackedProject(label="Widgets", slug="acme/widgets"),),
        window_a=YearWindow.full_year(2024),
        window_b=YearWindow.year_to_date(2025, date(2025, 10, 31), 10),
    )


@pytest.fixture
def snapshots():
    monthly_a = (3, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 2)
    monthly_b = (1,) * 10 + (0, 0)
    return {
        "acme/widgets": ProjectSnapshot(
            project_label="Widgets",
            repository_slug="acme/widgets",
            repository_meta=RepositoryMeta(
                full_name="acme/widgets",
                stars=5,
                forks=1,
                html_url="https://github.com/acme/widgets",
                default_branch="main",
            ),
            year_a=YearAggregate(
                year=2024,
                total_commits=6,
                monthly_counts=monthly_a,
                average_per_month=0.5,
                unique_human_contributors=1,
                top_contributors=(ContributorCount(author="alice", commits=6),),
            ),
            year_b=YearAggregate(
                year=2025,
                total_commits=10,
                monthly_counts=monthly_b,
                average_per_month=1.0,
                unique_human_contributors=0,
            ),
        )
    }


def test_save_verification_record(tmp_path, snapshots, config):
    """Test the JSON record exposes windows, policy and every aggregate."""
    store = RepositoryStore(str(tmp_path))
    generated_at = datetime(2025, 11, 3, 8, 0, tzinfo=timezone.utc)

    path = store.save_verification_record(snapshots, config, generated_at)

    assert path == tmp_path / "verification_2025-11-03.json"
    record = json.loads(path.read_text())
    assert record["policy"] == {"count_merges": False, "bot_policy": "include_in_totals"}
    assert record["windows"][1]["months_counted"] == 10
    project = record["projects"][0]
    assert project["repository_slug"] == "acme/widgets"
    assert project["year_a"]["monthly_counts"] == [3, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 2]
    assert project["year_a"]["top_contributors"] == [{"author": "alice", "commits": 6}]
    assert project["weekly_activity_available"] is False


def test_monthly_csv(tmp_path, snapshots, config):
    """Test the monthly CSV has one row per project, year and month."""
    store = RepositoryStore(str(tmp_path))
    store.save_verification_record(
        snapshots, config, datetime(2025, 11, 3, tzinfo=timezone.utc)
    )

    frame = pd.read_csv(tmp_path / "monthly_2025-11-03.csv")

    assert len(frame) == 24
    assert frame.groupby("year")["commits"].sum().to_dict() == {2024: 6, 2025: 10}
    assert frame.iloc[0].to_dict() == {
        "project": "Widgets",
        "repository": "acme/widgets",
        "year": 2024,
        "month": "Jan",
        "commits": 3,
    }


def test_same_day_run_overwrites(tmp_path, snapshots, config):
    """Test only one record is kept per run date."""
    store = RepositoryStore(str(tmp_path))
    generated_at = datetime(2025, 11, 3, tzinfo=timezone.utc)

    store.save_verification_record(snapshots, config, generated_at)
    store.save_verification_record({}, config, generated_at)

    files = sorted(p.name for p in tmp_path.iterdir())
    assert files == ["monthly_2025-11-03.csv", "verification_2025-11-03.json"]
    assert json.loads((tmp_path / "verification_2025-11-03.json").read_text())["projects"] == []
