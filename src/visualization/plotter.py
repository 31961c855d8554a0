"""
Commit Activity Visualization Module.

Provides the matplotlib figures embedded in the commit activity report:
- Year-over-year comparison of total commits
- Year-over-year comparison of unique contributors
- Forks per project
- Monthly commit series per project
"""

from typing import List
import os

import matplotlib.pyplot as plt

from analyzers.models import ProjectSnapshot, ReportConfig
from storage.repository_store import MONTH_NAMES


class RepositoryPlotter:
    """
    Specialized plotter for commit activity visualizations.

    Attributes:
        output_dir (str): Directory for saving generated plots
    """

    def __init__(self, output_dir: str = "plots"):
        """
        Initialize repository plotter with output configuration.

        Args:
            output_dir (str): Directory path for saving generated plots.
                Defaults to "plots"
        """
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

    def _year_comparison_plot(
        self,
        labels: List[str],
        values_a: List[int],
        values_b: List[int],
        label_a: str,
        label_b: str,
        title: str,
    ) -> plt.Figure:
        fig, ax = plt.subplots(figsize=(10, 5))
        positions = range(len(labels))
        width = 0.4

        ax.bar([p - width / 2 for p in positions], values_a, width, label=label_a)
        ax.bar([p + width / 2 for p in positions], values_b, width, label=label_b)
        ax.set_xticks(list(positions))
        ax.set_xticklabels(labels)
        ax.set_title(title)
        ax.set_ylabel("Count")
        ax.legend()
        ax.grid(True, axis="y")

        plt.tight_layout()
        return fig

    def create_commit_comparison_plot(
        self, snapshots: List[ProjectSnapshot], config: ReportConfig
    ) -> plt.Figure:
        """Create grouped bars of total commits per project and year."""
        return self._year_comparison_plot(
            [s.project_label for s in snapshots],
            [s.year_a.total_commits for s in snapshots],
            [s.year_b.total_commits for s in snapshots],
            config.window_a.label,
            config.window_b.label,
            "Commits",
        )

    def create_contributor_comparison_plot(
        self, snapshots: List[ProjectSnapshot], config: ReportConfig
    ) -> plt.Figure:
        """Create grouped bars of unique human contributors per project and year."""
        return self._year_comparison_plot(
            [s.project_label for s in snapshots],
            [s.year_a.unique_human_contributors for s in snapshots],
            [s.year_b.unique_human_contributors for s in snapshots],
            config.window_a.label,
            config.window_b.label,
            "Contributors (Unique, Non-Bots)",
        )

    def create_forks_plot(self, snapshots: List[ProjectSnapshot]) -> plt.Figure:
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.bar(
            [s.project_label for s in snapshots],
            [s.repository_meta.forks for s in snapshots],
            label="Forks",
        )
        ax.set_title("Forks")
        ax.set_ylabel("Count")
        ax.grid(True, axis="y")
        plt.tight_layout()
        return fig

    def create_monthly_plot(
        self, snapshot: ProjectSnapshot, config: ReportConfig
    ) -> plt.Figure:
        """Create the monthly commit series of one project for both years.

        Args:
            snapshot (ProjectSnapshot): Project to plot
            config (ReportConfig): Supplies the window labels

        Returns:
            plt.Figure: Generated line plot figure
        """
        fig, ax = plt.subplots(figsize=(10, 4))
        # Months after a year-to-date cutoff are left blank rather than drawn as zero
        for aggregate, window in (
            (snapshot.year_a, config.window_a),
            (snapshot.year_b, config.window_b),
        ):
            months = window.window_end.month
            ax.plot(
                MONTH_NAMES[:months],
                list(aggregate.monthly_counts)[:months],
                marker="o",
                label=window.label,
            )
        ax.set_title(f"Monthly Commits: {snapshot.project_label}")
        ax.set_xlabel("Month")
        ax.set_ylabel("Commits")
        ax.legend()
        ax.grid(True)
        plt.tight_layout()
        return fig
