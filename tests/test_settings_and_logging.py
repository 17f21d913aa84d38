"""
Tests for settings loading and log masking.
"""

import logging

import pytest

from logger import mask_email, ContactMaskingFilter, setup_logger
from settings import Settings


class TestMasking:
    """Test cases for e-mail masking."""

    def test_mask_email(self):
        assert mask_email("sarah@linguasched.com") == "s***@linguasched.com"
        assert mask_email("invalid") == "***"

    def test_filter_masks_message_arguments(self):
        record = logging.LogRecord(
            "booking_service", logging.INFO, __file__, 1,
            "Sending schedule to %s", ("alice@test.com",), None
        )

        assert ContactMaskingFilter().filter(record)
        assert record.getMessage() == "Sending schedule to a***@test.com"

    def test_filter_leaves_plain_messages_alone(self):
        record = logging.LogRecord("store", logging.INFO, __file__, 1, "Booked %d lessons", (3,), None)

        ContactMaskingFilter().filter(record)

        assert record.args == (3,)
        assert record.getMessage() == "Booked 3 lessons"

    def test_setup_logger_is_idempotent(self, tmp_path):
        log_file = tmp_path / "logs" / "scheduler.log"
        first = setup_logger("lesson_scheduler_test", log_file=str(log_file))
        second = setup_logger("lesson_scheduler_test", log_file=str(log_file))

        assert first is second
        assert len(first.handlers) == 2
        assert log_file.parent.exists()


class TestSettings:
    """Test cases for Settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        # setenv first so monkeypatch also undoes whatever load_dotenv writes
        for name in ("LESSON_SCHEDULER_LOG_LEVEL", "LESSON_SCHEDULER_LOG_FILE", "LESSON_SCHEDULER_ROSTER"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)

    def test_defaults(self, tmp_path):
        settings = Settings(env_file=str(tmp_path / "missing.env"))

        assert settings.log_level == "INFO"
        assert settings.log_level_value == logging.INFO
        assert settings.log_file is None
        assert settings.roster_path.name == "Roster.xlsx"
        assert settings.validate()

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("LESSON_SCHEDULER_LOG_LEVEL=debug\nLESSON_SCHEDULER_ROSTER=/data/school.xlsx\n")

        settings = Settings(env_file=str(env_file))

        assert settings.log_level == "DEBUG"
        assert str(settings.roster_path) == "/data/school.xlsx"

    def test_validation_lists_every_problem(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LESSON_SCHEDULER_LOG_LEVEL", "LOUD")
        monkeypatch.setenv("LESSON_SCHEDULER_ROSTER", "roster.csv")

        with pytest.raises(ValueError) as excinfo:
            Settings(env_file=str(tmp_path / "missing.env")).validate()

        assert "LESSON_SCHEDULER_LOG_LEVEL" in str(excinfo.value)
        assert "LESSON_SCHEDULER_ROSTER" in str(excinfo.value)
