"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Optional GitHub credential lookup
- Tracked project and year window parsing
- Path normalization for output directories

Settings are read once at startup and turned into a ReportConfig that is
passed explicitly to every component of a run.
"""

from datetime import date
from typing import List, Optional
import os

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from analyzers.models import (
    BotPolicy,
    CountingPolicy,
    MONTHS_IN_YEAR,
    ReportConfig,
    TrackedProject,
    YearWindow,
)
from exceptions import ConfigurationError
from logger import LogManager


DEFAULT_TRACKED_PROJECTS = (
    "Playwright=microsoft/playwright,"
    "Selenium=SeleniumHQ/selenium,"
    "JMeter=apache/jmeter,"
    "Cypress=cypress-io/cypress"
)


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Attributes:
        app_name (str): Name of the application
        dev (bool): Development logging flag
        log_dir (str): Directory for log files
        log_level (int): Logging level (default: info)
        github_token (Optional[SecretStr]): GitHub token, read from GITHUB_TOKEN,
            GH_TOKEN or PAT
        tracked_projects (str): Comma-separated "Label=owner/repo" entries
        year_a / year_b (int): Reference years
        year_a_cutoff / year_b_cutoff (Optional[date]): Year-to-date cutoff day,
            None for a full year
        months_a / months_b (int): Month divisor for the per-month average
        count_merges (bool): Whether merge commits count toward totals
        bot_policy (BotPolicy): How bot commits are counted
        bot_deny_list_path (str): JSON file of per-repository bot logins
        fetch_weekly_activity (bool): Poll the weekly statistics endpoint
        stats_poll_attempts (int): Maximum polls of the statistics endpoint
        stats_poll_delay (float): Seconds between polls
        request_timeout (float): Seconds before a request is abandoned
        data_dir (str): Directory for the verification record
        report_output_dir (str): Directory for generated reports
    """

    # Application settings
    app_name: str = Field(default="Commitscope", description="Application name")
    dev: bool = Field(default=False, description="Development logging")
    log_dir: str = Field(default="logs", description="Logging directory")
    log_level: int = Field(default=20, description="Logging level, default info")

    # GitHub configuration
    github_token: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("github_token", "gh_token", "pat"),
        description="Optional GitHub token",
    )
    request_timeout: float = Field(default=30.0, description="Request timeout in seconds")
    stats_poll_attempts: int = Field(default=5, description="Statistics poll attempts")
    stats_poll_delay: float = Field(default=2.0, description="Seconds between polls")
    fetch_weekly_activity: bool = Field(
        default=False, description="Fetch precomputed weekly activity"
    )

    # Report configuration
    tracked_projects: str = Field(
        default=DEFAULT_TRACKED_PROJECTS,
        description="Comma-separated Label=owner/repo entries",
    )
    year_a: int = Field(default=2024, description="First reference year")
    year_a_cutoff: Optional[date] = Field(default=None, description="Year A cutoff day")
    months_a: int = Field(default=12, description="Months counted in year A")
    year_b: int = Field(default=2025, description="Second reference year")
    year_b_cutoff: Optional[date] = Field(
        default=date(2025, 10, 31), description="Year B cutoff day"
    )
    months_b: int = Field(default=10, description="Months counted in year B")

    # Counting policy
    count_merges: bool = Field(default=False, description="Count merge commits")
    bot_policy: BotPolicy = Field(
        default=BotPolicy.INCLUDE_IN_TOTALS, description="Bot counting policy"
    )
    bot_deny_list_path: str = Field(
        default="bot_deny_list.json", description="Per-repository bot deny-list"
    )

    # Output
    data_dir: str = Field(default="data", description="Data output directory")
    report_output_dir: str = Field(
        default="reports", description="Report output directory"
    )

    @property
    def projects(self) -> List[TrackedProject]:
        """
        Get tracked projects from configuration.

        Entries are "Label=owner/repo"; an entry without a label uses the
        repository name as label.

        Returns:
            List[TrackedProject]: Projects in configured order

        Raises:
            ConfigurationError: If an entry is malformed
        """
        projects = []
        for entry in self.tracked_projects.split(","):
            entry = entry.strip()
            if not entry:
                continue
            label, _, slug = entry.rpartition("=")
            slug = slug.strip()
            label = label.strip() or slug.split("/")[-1]
            projects.append(TrackedProject(label=label, slug=slug))
        return projects

    @field_validator("report_output_dir", "data_dir")
    def ensure_absolute_path(cls, v: str) -> str:
        """
        Ensure output directory paths are absolute.

        Args:
            v (str): Directory path to validate

        Returns:
            str: Absolute path
        """
        if not os.path.isabs(v):
            return os.path.abspath(v)
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
        populate_by_name=True,
    )


def _year_window(year: int, cutoff: Optional[date], months_counted: int) -> YearWindow:
    if cutoff is None:
        if months_counted != MONTHS_IN_YEAR:
            raise ConfigurationError(
                f"Full-year window for {year} needs months_counted=12, "
                f"got {months_counted}; configure a cutoff for a year-to-date window"
            )
        return YearWindow.full_year(year)
    return YearWindow.year_to_date(year, cutoff, months_counted)


def build_report_config(settings: Settings) -> ReportConfig:
    """
    Validate settings and build the run configuration.

    Args:
        settings (Settings): Loaded application settings

    Returns:
        ReportConfig: Immutable configuration for the run

    Raises:
        ConfigurationError: If projects, windows or poll settings are invalid
    """
    try:
        projects = settings.projects
        if not projects:
            raise ConfigurationError("No tracked projects configured")
        slugs = [project.slug for project in projects]
        if len(set(slugs)) != len(slugs):
            raise ConfigurationError(f"Duplicate tracked projects: {slugs}")
        if settings.stats_poll_attempts < 1:
            raise ConfigurationError(
                f"stats_poll_attempts must be at least 1, got {settings.stats_poll_attempts}"
            )

        return ReportConfig(
            projects=tuple(projects),
            window_a=_year_window(settings.year_a, settings.year_a_cutoff, settings.months_a),
            window_b=_year_window(settings.year_b, settings.year_b_cutoff, settings.months_b),
            policy=CountingPolicy(
                count_merges=settings.count_merges, bot_policy=settings.bot_policy
            ),
            deny_list_path=settings.bot_deny_list_path or None,
            fetch_weekly_activity=settings.fetch_weekly_activity,
        )
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid report configuration: {e}") from e


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
