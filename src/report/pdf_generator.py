"""
PDF Report Generation Module.

This module renders the commit activity comparison report from project
snapshots. Features include:
- Summary table comparing every tracked project across both years
- Year-over-year comparison charts for commits, contributors and forks
- Per-project sections with monthly series and top committers
- A footer stating the date bounds and counting policy

Uses ReportLab for PDF generation and matplotlib figures from RepositoryPlotter.
"""

from datetime import datetime
from typing import Dict, List
import os
import matplotlib.pyplot as plt

from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.lib.pagesizes import letter
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
    Image,
)
from xml.sax.saxutils import escape

from config import logger
from analyzers.models import ProjectSnapshot, ReportConfig, YearAggregate
from visualization.plotter import RepositoryPlotter


HEADER_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
    ("GRID", (0, 0), (-1, -1), 1, colors.black),
]


class PDFReportGenerator:
    """
    Generates the commit activity PDF report from project snapshots.

    Attributes:
        styles (getSampleStyleSheet): ReportLab styles for document formatting.
        plotter (RepositoryPlotter): Instance for creating data visualizations.
    """

    def __init__(self, plotter: RepositoryPlotter):
        """Initialize the PDF generator with visualization capabilities.

        Args:
            plotter (RepositoryPlotter): Instance for creating data visualizations.
        """
        self.styles = getSampleStyleSheet()
        self.plotter = plotter

    def safe_repo_name(self, repo_name: str) -> str:
        """Convert a repository name to a safe filename."""
        return repo_name.replace("/", "_").replace("\\", "_")

    def _create_summary_table(
        self, snapshots: List[ProjectSnapshot], config: ReportConfig
    ) -> Table:
        """Create a table comparing all projects across both windows.

        Args:
            snapshots (List[ProjectSnapshot]): Projects in report order.
            config (ReportConfig): Supplies the window labels.

        Returns:
            Table: Formatted ReportLab table.
        """
        label_a, label_b = config.window_a.label, config.window_b.label
        data = [
            [
                "Project",
                f"Commits {label_a}",
                f"Commits {label_b}",
                f"Devs {label_a}",
                f"Devs {label_b}",
                "Stars",
                "Forks",
            ]
        ]
        for snapshot in snapshots:
            data.append(
                [
                    snapshot.project_label,
                    f"{snapshot.year_a.total_commits:,}",
                    f"{snapshot.year_b.total_commits:,}",
                    f"{snapshot.year_a.unique_human_contributors:,}",
                    f"{snapshot.year_b.unique_human_contributors:,}",
                    f"{snapshot.repository_meta.stars:,}",
                    f"{snapshot.repository_meta.forks:,}",
                ]
            )

        table = Table(data)
        table.setStyle(TableStyle(HEADER_STYLE + [("FONTSIZE", (0, 0), (-1, -1), 8)]))
        return table

    def _create_year_metrics_table(
        self, snapshot: ProjectSnapshot, config: ReportConfig
    ) -> Table:
        """Create the per-project table of totals, averages and contributors."""

        def row(name: str, aggregate: YearAggregate, months: int) -> List[str]:
            return [
                name,
                f"{aggregate.total_commits:,}",
                f"{aggregate.average_per_month:.2f} ({months} mo)",
                f"{aggregate.unique_human_contributors:,}",
            ]

        data = [
            ["Window", "Total Commits", "Avg / Month", "Unique Devs"],
            row(config.window_a.label, snapshot.year_a, config.window_a.months_counted),
            row(config.window_b.label, snapshot.year_b, config.window_b.months_counted),
        ]
        table = Table(data, colWidths=[1.5 * inch, 1.5 * inch, 1.8 * inch, 1.5 * inch])
        table.setStyle(TableStyle(HEADER_STYLE))
        return table

    def _create_top_contributors_table(self, aggregate: YearAggregate) -> Table:
        data = [["#", "Author", "Commits"]]
        for position, contributor in enumerate(aggregate.top_contributors, start=1):
            data.append([str(position), contributor.author, str(contributor.commits)])
        if len(data) == 1:
            data.append(["", "No data", ""])

        table = Table(data, colWidths=[0.5 * inch, 4 * inch, 1.2 * inch])
        table.setStyle(TableStyle(HEADER_STYLE))
        return table

    def _add_figure(self, fig: plt.Figure, plot_path: str, height: float) -> Image:
        fig.savefig(plot_path, format="png", dpi=150, bbox_inches="tight")
        plt.close(fig)
        return Image(plot_path, width=7 * inch, height=height * inch)

    def _footer_text(self, config: ReportConfig) -> str:
        window_a, window_b = config.window_a, config.window_b
        return (
            f"Date bounds: {window_a.window_start.date()} to {window_a.window_end.date()} "
            f"({window_a.months_counted} months); "
            f"{window_b.window_start.date()} to {window_b.window_end.date()} "
            f"({window_b.months_counted} months). "
            f"Counting policy: {config.policy.describe()}."
        )

    def generate_report(
        self,
        snapshots: Dict[str, ProjectSnapshot],
        config: ReportConfig,
        output_dir: str,
        plots_dir: str,
        generated_at: datetime,
    ) -> str:
        """Generate the commit activity report.

        Args:
            snapshots (Dict[str, ProjectSnapshot]): Snapshots keyed by slug.
            config (ReportConfig): Windows and counting policy of the run.
            output_dir (str): Directory where the PDF report should be saved.
            plots_dir (str): Directory where the plots should be saved.
            generated_at (datetime): Run timestamp shown in the report.

        Returns:
            str: Path of the generated PDF.

        Raises:
            Exception: If report generation fails.
        """
        stamp = generated_at.strftime("%Y-%m-%d")
        output_path = os.path.join(output_dir, f"commit_activity_{stamp}.pdf")
        projects = list(snapshots.values())

        logger.info(
            {
                "message": "Starting PDF report generation",
                "projects": len(projects),
                "output_path": output_path,
            }
        )

        try:
            doc = SimpleDocTemplate(output_path, pagesize=letter)
            elements = [
                Paragraph(
                    f"Open-Source Activity: {config.window_a.label} vs {config.window_b.label}",
                    self.styles["Heading1"],
                ),
                Paragraph(
                    f"Generated {generated_at.strftime('%Y-%m-%d %H:%M')} UTC",
                    self.styles["Normal"],
                ),
                Spacer(1, 20),
                Paragraph("Summary", self.styles["Heading2"]),
                Spacer(1, 10),
                self._create_summary_table(projects, config),
                Spacer(1, 30),
            ]

            if projects:
                comparisons = [
                    ("commits", self.plotter.create_commit_comparison_plot(projects, config)),
                    (
                        "contributors",
                        self.plotter.create_contributor_comparison_plot(projects, config),
                    ),
                    ("forks", self.plotter.create_forks_plot(projects)),
                ]
                for name, fig in comparisons:
                    plot_path = os.path.join(plots_dir, f"{name}_{stamp}.png")
                    elements.extend(
                        [self._add_figure(fig, plot_path, 3.5), Spacer(1, 20)]
                    )

            for snapshot in projects:
                meta = snapshot.repository_meta
                elements.extend(
                    [
                        Paragraph(snapshot.project_label, self.styles["Heading2"]),
                        Paragraph(
                            f"Stars {meta.stars:,} | Forks {meta.forks:,} | "
                            f"Default branch {escape(meta.default_branch)}",
                            self.styles["Normal"],
                        ),
                        Spacer(1, 10),
                        self._create_year_metrics_table(snapshot, config),
                        Spacer(1, 15),
                    ]
                )

                plot_path = os.path.join(
                    plots_dir,
                    f"{self.safe_repo_name(snapshot.repository_slug)}_monthly_{stamp}.png",
                )
                elements.extend(
                    [
                        Paragraph(
                            f"Monthly Commits ({config.window_a.label} vs {config.window_b.label})",
                            self.styles["Heading3"],
                        ),
                        self._add_figure(
                            self.plotter.create_monthly_plot(snapshot, config), plot_path, 3
                        ),
                        Spacer(1, 15),
                        Paragraph(
                            f"Top 5 Committers (non-bots, {config.window_b.label})",
                            self.styles["Heading3"],
                        ),
                        self._create_top_contributors_table(snapshot.year_b),
                        Spacer(1, 10),
                    ]
                )

                if config.fetch_weekly_activity:
                    weekly = snapshot.weekly_activity
                    text = (
                        f"Weekly activity (last 52 weeks): {weekly.total_commits:,} commits"
                        if weekly is not None
                        else "Weekly activity: data unavailable this run"
                    )
                    elements.append(Paragraph(text, self.styles["Normal"]))

                elements.extend(
                    [
                        Paragraph(
                            f'Repo: <link href="{escape(meta.html_url)}">'
                            f"{escape(meta.full_name)}</link>",
                            self.styles["Normal"],
                        ),
                        Spacer(1, 30),
                    ]
                )

            elements.append(Paragraph(self._footer_text(config), self.styles["Italic"]))

            doc.build(elements)
            logger.info(
                {
                    "message": "PDF report generated successfully",
                    "output_path": output_path,
                }
            )
            return output_path

        except Exception as e:
            logger.error(
                {
                    "message": "PDF report generation failed",
                    "error": str(e),
                    "output_path": output_path,
                }
            )
            raise
