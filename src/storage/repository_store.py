"""
Verification Record Storage Module.

This module writes the machine-readable record of a run: the window bounds,
the counting policy and every aggregate that fed the report. It lets the
counting methodology be audited independently of the rendered report.

One record is kept per run date; a second run on the same day replaces it.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict

import pandas as pd

from config import logger
from analyzers.models import ProjectSnapshot, ReportConfig

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


class RepositoryStore:
    """
    Manages the on-disk verification record of a run.
    """

    def __init__(self, data_dir: str):
        """Initialize the storage directory.

        Args:
            data_dir (str): Base directory path for the verification records.
        """
        self.storage_dir = Path(data_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _get_record_file_path(self, prefix: str, run_date: datetime, file_type: str) -> Path:
        return self.storage_dir / f"{prefix}_{run_date.strftime('%Y-%m-%d')}.{file_type}"

    def build_monthly_frame(
        self, snapshots: Dict[str, ProjectSnapshot]
    ) -> pd.DataFrame:
        """Flatten the monthly series of every project into one table.

        Args:
            snapshots (Dict[str, ProjectSnapshot]): Snapshots keyed by slug.

        Returns:
            pd.DataFrame: Columns project, repository, year, month, commits.
        """
        rows = [
            {
                "project": snapshot.project_label,
                "repository": slug,
                "year": aggregate.year,
                "month": MONTH_NAMES[index],
                "commits": count,
            }
            for slug, snapshot in snapshots.items()
            for aggregate in (snapshot.year_a, snapshot.year_b)
            for index, count in enumerate(aggregate.monthly_counts)
        ]
        return pd.DataFrame(
            rows, columns=["project", "repository", "year", "month", "commits"]
        )

    def save_verification_record(
        self,
        snapshots: Dict[str, ProjectSnapshot],
        config: ReportConfig,
        generated_at: datetime,
    ) -> Path:
        """Write the JSON verification record and the monthly CSV.

        Args:
            snapshots (Dict[str, ProjectSnapshot]): Snapshots keyed by slug.
            config (ReportConfig): Configuration the snapshots were built with.
            generated_at (datetime): Run timestamp.

        Returns:
            Path: Location of the JSON record.

        Raises:
            OSError: If the files cannot be written.
        """
        record_file = self._get_record_file_path("verification", generated_at, "json")
        csv_file = self._get_record_file_path("monthly", generated_at, "csv")

        record = {
            "generated_at": generated_at.isoformat(),
            "policy": config.policy.model_dump(mode="json"),
            "windows": [
                config.window_a.model_dump(mode="json"),
                config.window_b.model_dump(mode="json"),
            ],
            "projects": [
                snapshot.model_dump(mode="json", exclude={"weekly_activity"})
                | {
                    "weekly_activity_available": snapshot.weekly_activity is not None,
                }
                for snapshot in snapshots.values()
            ],
        }

        try:
            with open(record_file, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
            self.build_monthly_frame(snapshots).to_csv(csv_file, index=False)
        except OSError as e:
            logger.error(
                {
                    "message": "Failed to save verification record",
                    "file": str(record_file),
                    "error": str(e),
                }
            )
            raise

        logger.info(
            {
                "message": "Verification record saved",
                "file": str(record_file),
                "monthly_csv": str(csv_file),
                "projects": len(snapshots),
            }
        )
        return record_file
