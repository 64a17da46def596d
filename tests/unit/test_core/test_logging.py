"""Unit tests for logging configuration."""

from pathlib import Path

from loguru import logger

from studybuddy_api.core.logging import setup_logging


class TestLogging:
    """Tests for Loguru logging setup."""

    def test_setup_logging_does_not_raise(self) -> None:
        setup_logging("DEBUG")
        setup_logging("warning")

    def test_file_sink_created_in_log_dir(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "logs"
        setup_logging("INFO", log_dir=str(log_dir))
        logger.info("moderation file sink check")
        logger.complete()
        setup_logging("INFO")

        log_file = log_dir / "studybuddy-api.log"
        assert log_file.exists()
        assert "moderation file sink check" in log_file.read_text()
