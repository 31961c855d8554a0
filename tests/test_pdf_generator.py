"""
PDF Generator Test Suite.

This module contains tests for the PDFReportGenerator class, covering:
- Report generation for one and several projects
- Error handling scenarios
- Weekly activity availability notes
"""

import pytest
from unittest.mock import Mock, patch
from datetime import date, datetime, timezone
import os

from report.pdf_generator import PDFReportGenerator
from analyzers.models import (
    ContributorCount,
    ProjectSnapshot,
    ReportConfig,
    TrackedProject,
    YearAggregate,
    YearWindow,
)
from miners.models import RepositoryMeta

GENERATED_AT = datetime(2025, 11, 3, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def mock_plotter():
    """Mock visualization plotter."""
    plotter = Mock()
    plotter.create_commit_comparison_plot = Mock(return_value=Mock())
    plotter.create_contributor_comparison_plot = Mock(return_value=Mock())
    plotter.create_forks_plot = Mock(return_value=Mock())
    plotter.create_monthly_plot = Mock(return_value=Mock())
    return plotter


@pytest.fixture
def mock_doc_template():
    """Mock PDF document template, images and figure handling."""
    with patch("report.pdf_generator.SimpleDocTemplate") as mock_class, patch(
        "report.pdf_generator.Image"
    ), patch("report.pdf_generator.plt"):
        mock_instance = Mock()
        mock_instance.build = Mock()
        mock_class.return_value = mock_instance
        yield mock_class


@pytest.fixture
def config():
    return ReportConfig(
        projects=(TrackedProject(label="Widgets", slug="test/repo"),),
        window_a=YearWindow.full_year(2024),
        window_b=YearWindow.year_to_date(2025, date(2025, 10, 31), 10),
    )


def make_snapshot(slug="test/repo", label="Widgets"):
    aggregate = YearAggregate(
        year=2024,
        total_commits=12,
        monthly_counts=(1,) * 12,
        average_per_month=1.0,
        unique_human_contributors=2,
        top_contributors=(
            ContributorCount(author="user1", commits=8),
            ContributorCount(author="user2", commits=4),
        ),
    )
    return ProjectSnapshot(
        project_label=label,
        repository_slug=slug,
        repository_meta=RepositoryMeta(
            full_name=slug,
            stars=100,
            forks=20,
            html_url=f"https://github.com/{slug}",
            default_branch="main",
        ),
        year_a=aggregate,
        year_b=aggregate.model_copy(update={"year": 2025}),
    )


def test_generate_report(mock_plotter, mock_doc_template, config, tmp_path):
    """Test report generation for one project."""
    output_path = str(tmp_path)
    temp_plot_dir = os.path.join(output_path, "temp_plots")
    generator = PDFReportGenerator(mock_plotter)

    result = generator.generate_report(
        {"test/repo": make_snapshot()}, config, output_path, temp_plot_dir, GENERATED_AT
    )

    assert result == os.path.join(output_path, "commit_activity_2025-11-03.pdf")
    mock_plotter.create_commit_comparison_plot.assert_called_once()
    mock_plotter.create_contributor_comparison_plot.assert_called_once()
    mock_plotter.create_forks_plot.assert_called_once()
    mock_plotter.create_monthly_plot.assert_called_once()

    mock_doc_template.assert_called_once()
    mock_doc_template.return_value.build.assert_called_once()


def test_generate_report_with_multiple_repos(mock_plotter, mock_doc_template, config, tmp_path):
    """Test one document with a monthly chart per project."""
    output_path = str(tmp_path)
    generator = PDFReportGenerator(mock_plotter)
    snapshots = {
        "test/repo1": make_snapshot("test/repo1", "Repo1"),
        "test/repo2": make_snapshot("test/repo2", "Repo2"),
    }

    generator.generate_report(
        snapshots, config, output_path, os.path.join(output_path, "plots"), GENERATED_AT
    )

    assert mock_plotter.create_monthly_plot.call_count == 2
    assert mock_doc_template.call_count == 1
    assert mock_doc_template.return_value.build.call_count == 1


def test_generate_report_without_projects(mock_plotter, mock_doc_template, config, tmp_path):
    """Test an empty run still renders the summary without charts."""
    generator = PDFReportGenerator(mock_plotter)

    generator.generate_report({}, config, str(tmp_path), str(tmp_path), GENERATED_AT)

    mock_plotter.create_commit_comparison_plot.assert_not_called()
    mock_doc_template.return_value.build.assert_called_once()


def test_weekly_activity_note(mock_plotter, mock_doc_template, config, tmp_path):
    """Test missing weekly statistics are reported as unavailable."""
    config = config.model_copy(update={"fetch_weekly_activity": True})
    generator = PDFReportGenerator(mock_plotter)

    generator.generate_report(
        {"test/repo": make_snapshot()}, config, str(tmp_path), str(tmp_path), GENERATED_AT
    )

    elements = mock_doc_template.return_value.build.call_args.args[0]
    texts = [e.text for e in elements if hasattr(e, "text")]
    assert "Weekly activity: data unavailable this run" in texts


def test_generate_report_error_handling(mock_plotter, mock_doc_template, config, tmp_path):
    """Test error handling in PDF report generation."""
    generator = PDFReportGenerator(mock_plotter)
    mock_plotter.create_commit_comparison_plot.side_effect = Exception("Plot error")

    with pytest.raises(Exception, match="Plot error"):
        generator.generate_report(
            {"test/repo": make_snapshot()}, config, str(tmp_path), str(tmp_path), GENERATED_AT
        )

    mock_doc_template.return_value.build.assert_not_called()


def test_footer_describes_bounds_and_policy(mock_plotter, config):
    generator = PDFReportGenerator(mock_plotter)

    footer = generator._footer_text(config)

    assert "2024-01-01 to 2024-12-31 (12 months)" in footer
    assert "2025-01-01 to 2025-10-31 (10 months)" in footer
    assert "merges excluded; bots counted in totals only" in footer
