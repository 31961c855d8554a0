"""
Logging Setup Module.

Provides a small wrapper around the standard logging package that configures
console and rotating file output for the application.

Log records may carry either plain strings or dictionaries. Dictionaries are
rendered as single-line JSON documents so that structured fields (repository,
endpoint, counts) stay machine readable in the log files.
"""

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone


class StructuredFormatter(logging.Formatter):
    """Render dict messages as JSON lines, everything else as plain text."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        else:
            payload["message"] = record.getMessage()

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class LogManager:
    """
    Configures and exposes the application logger.

    Attributes:
        logger (logging.Logger): Configured logger instance
    """

    def __init__(
        self,
        app_name: str,
        log_dir: str = "logs",
        development: bool = False,
        level: int = logging.INFO,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ):
        """
        Initialize the log manager.

        Args:
            app_name (str): Logger name, also used for the log file name
            log_dir (str): Directory for log files
            development (bool): When True, console output is human readable
                instead of JSON
            level (int): Logging level
            max_bytes (int): Size at which the log file is rotated
            backup_count (int): Number of rotated files to keep
        """
        self.logger = logging.getLogger(app_name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Re-initialisation (e.g. in tests) must not stack handlers
        if self.logger.handlers:
            return

        console = logging.StreamHandler()
        if development:
            console.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
        else:
            console.setFormatter(StructuredFormatter())
        self.logger.addHandler(console)

        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f"{app_name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        self.logger.addHandler(file_handler)
