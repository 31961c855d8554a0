"""
Main Application Entry Point.

This module serves as the primary entry point for the commit activity report.
It orchestrates the workflow, including:
- Configuration validation (before any network activity)
- Bot deny-list loading
- Commit retrieval and aggregation per tracked project
- Verification record and PDF report generation

The application can be run directly to analyze the configured repositories
and generate the report.
"""

import asyncio
import os
import sys
from datetime import datetime, timezone

from config import settings, logger, build_report_config
from exceptions import ConfigurationError
from analyzers.aggregator import CommitAggregator
from analyzers.multi_repository import MultiRepositoryAnalyzer
from analyzers.plugins.bot_classifier import BotClassifier, load_deny_list
from analyzers.snapshot import SnapshotBuilder
from miners.github_miner import GitHubMiner, RepositoryMiner
from storage.repository_store import RepositoryStore
from report.pdf_generator import PDFReportGenerator
from visualization.plotter import RepositoryPlotter


async def main() -> int:
    """
    Execute the main application workflow.

    Performs the following steps:
    1. Builds and validates the run configuration
    2. Loads the bot deny-list
    3. Analyzes all configured repositories
    4. Writes the verification record and the PDF report

    Returns:
        int: Process exit code. 1 when the configuration is invalid or no
            project could be analyzed.

    Note:
        - A project whose remote calls fail is left out of the report
        - Validation errors propagate; they indicate a counting defect
    """
    logger.info("Starting commit activity analysis...")

    try:
        config = build_report_config(settings)
        deny_list = load_deny_list(config.deny_list_path)
    except ConfigurationError as e:
        logger.critical({"message": "Invalid configuration", "error": str(e)})
        return 1

    logger.info(
        {
            "message": "Run configuration",
            "projects": config.project_labels,
            "window_a": config.window_a.label,
            "window_b": config.window_b.label,
            "policy": config.policy.describe(),
        }
    )

    generated_at = datetime.now(timezone.utc)
    os.makedirs(settings.report_output_dir, exist_ok=True)

    logger.debug("initializing github miner...")
    token = settings.github_token.get_secret_value() if settings.github_token else None
    github_miner: RepositoryMiner = GitHubMiner(
        token,
        request_timeout=settings.request_timeout,
        stats_poll_attempts=settings.stats_poll_attempts,
        stats_poll_delay=settings.stats_poll_delay,
    )

    logger.debug("initializing commit aggregator...")
    aggregator = CommitAggregator(BotClassifier(deny_list), config.policy)
    multi_analyzer = MultiRepositoryAnalyzer(
        github_miner, aggregator, SnapshotBuilder(), config
    )

    logger.info("analyzing repositories...")
    snapshots = await multi_analyzer.analyze_repositories()
    if not snapshots:
        logger.error({"message": "No repository could be analyzed, no report written"})
        return 1

    store = RepositoryStore(settings.data_dir)
    store.save_verification_record(snapshots, config, generated_at)

    logger.info("generating report...")
    plots_dir = os.path.join(settings.report_output_dir, "temp_plots")
    plotter = RepositoryPlotter(plots_dir)
    pdf_generator = PDFReportGenerator(plotter)
    pdf_generator.generate_report(
        snapshots, config, settings.report_output_dir, plots_dir, generated_at
    )

    logger.info("application finished")
    return 0


def run() -> None:
    """Console script entry point."""
    logger.info("Starting application ...")
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
