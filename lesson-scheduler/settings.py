"""
Configuration loaded from environment variables (and a .env file, if present).

Business rules such as lesson costs and the refund window are module constants
in the engine, not settings.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings:
    """
    Application settings.

    Attributes:
        log_level: Logging level name (LESSON_SCHEDULER_LOG_LEVEL, default INFO)
        log_file: Optional rotating log file path (LESSON_SCHEDULER_LOG_FILE)
        roster_path: Excel workbook holding the roster (LESSON_SCHEDULER_ROSTER)
    """

    def __init__(self, env_file: Optional[str] = None):
        load_dotenv(env_file)

        self._log_level = os.getenv("LESSON_SCHEDULER_LOG_LEVEL", "INFO").upper()
        self._log_file = os.getenv("LESSON_SCHEDULER_LOG_FILE") or None
        self._roster_path = Path(os.getenv("LESSON_SCHEDULER_ROSTER", "Roster.xlsx")).expanduser()

    @property
    def log_level(self) -> str:
        return self._log_level

    @property
    def log_level_value(self) -> int:
        """The numeric logging level for log_level."""
        return getattr(logging, self._log_level)

    @property
    def log_file(self) -> Optional[str]:
        return self._log_file

    @property
    def roster_path(self) -> Path:
        return self._roster_path

    def validate(self) -> bool:
        """
        Validate settings values.

        Returns:
            True if all settings are valid

        Raises:
            ValueError: If validation fails, listing every problem found
        """
        errors = []

        if self._log_level not in VALID_LOG_LEVELS:
            errors.append(f"LESSON_SCHEDULER_LOG_LEVEL must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if self._roster_path.suffix.lower() != ".xlsx":
            errors.append("LESSON_SCHEDULER_ROSTER must point to an .xlsx workbook")

        if errors:
            raise ValueError("Configuration validation failed:\n  - " + "\n  - ".join(errors))

        return True
