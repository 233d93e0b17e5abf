"""
Unit tests for configuration module.

Tests environment loading, path resolution, scheduler timing and validation.
"""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from config import Config


class TestConfig:
    """Test suite for Config class."""

    def test_default_configuration(self):
        """Defaults apply when no ATS_* variables are set."""
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

            assert config.log_level == "INFO"
            assert config.log_file is None
            assert config.server_name == "ats-workflow-mcp-server"
            assert config.automation_interval_seconds == 120.0
            assert config.mimic_interval_seconds == 180.0
            assert config.mimic_startup_delay_seconds == 5.0
            assert config.autostart_schedulers is True
            assert config.random_seed is None
            assert config._repo_root.is_dir()

    def test_db_path_from_env_absolute(self):
        with patch.dict(os.environ, {"ATS_DB": "/srv/ats/ats.db"}, clear=True):
            assert str(Config().db_path) == "/srv/ats/ats.db"

    def test_db_path_from_env_relative(self):
        """Relative ATS_DB paths resolve against the repository root."""
        with patch.dict(os.environ, {"ATS_DB": "custom/ats.db"}, clear=True):
            config = Config()
            assert config.db_path == config._repo_root / "custom" / "ats.db"

    def test_db_path_from_ats_root(self):
        with patch.dict(os.environ, {"ATS_ROOT": "/opt/ats"}, clear=True):
            assert Config().db_path == Path("/opt/ats") / "data" / "ats.db"

    def test_db_path_default(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config()
            assert config.db_path == config._repo_root / "data" / "ats.db"

    def test_db_path_priority(self):
        """ATS_DB takes priority over ATS_ROOT."""
        with patch.dict(os.environ, {"ATS_DB": "/custom/ats.db", "ATS_ROOT": "/opt/ats"}, clear=True):
            assert Config().get_db_path_str() == "/custom/ats.db"

    def test_log_level_case_insensitive(self):
        with patch.dict(os.environ, {"ATS_LOG_LEVEL": "debug"}, clear=True):
            assert Config().log_level == "DEBUG"

    def test_log_file_relative(self):
        with patch.dict(os.environ, {"ATS_LOG_FILE": "logs/server.log"}, clear=True):
            config = Config()
            assert config.log_file == config._repo_root / "logs" / "server.log"

    def test_server_name_from_env(self):
        with patch.dict(os.environ, {"ATS_SERVER_NAME": "custom-server"}, clear=True):
            assert Config().server_name == "custom-server"

    def test_scheduler_settings_from_env(self):
        env = {
            "ATS_AUTOMATION_INTERVAL_SECONDS": "15",
            "ATS_MIMIC_INTERVAL_SECONDS": "2.5",
            "ATS_MIMIC_STARTUP_DELAY_SECONDS": "0",
            "ATS_RANDOM_SEED": "42",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Config()
            assert config.automation_interval_seconds == 15.0
            assert config.mimic_interval_seconds == 2.5
            assert config.mimic_startup_delay_seconds == 0.0
            assert config.random_seed == 42

    @pytest.mark.parametrize(
        "value,expected",
        [("false", False), ("0", False), ("no", False), ("TRUE", True), ("yes", True)],
    )
    def test_autostart_flag(self, value, expected):
        with patch.dict(os.environ, {"ATS_AUTOSTART_SCHEDULERS": value}, clear=True):
            assert Config().autostart_schedulers is expected

    def test_blank_seed_means_unseeded(self):
        with patch.dict(os.environ, {"ATS_RANDOM_SEED": "  "}, clear=True):
            assert Config().random_seed is None


class TestValidate:
    """Tests for Config.validate warnings."""

    def test_missing_database(self, tmp_path):
        missing = tmp_path / "missing.db"
        with patch.dict(os.environ, {"ATS_DB": str(missing)}, clear=True):
            warnings = Config().validate()

        assert len(warnings) == 1
        assert "Database file not found" in warnings[0]
        assert "created on startup" in warnings[0]

    def test_existing_database(self, tmp_path):
        db_file = tmp_path / "ats.db"
        db_file.touch()
        with patch.dict(os.environ, {"ATS_DB": str(db_file)}, clear=True):
            assert Config().validate() == []

    def test_non_positive_intervals(self, tmp_path):
        db_file = tmp_path / "ats.db"
        db_file.touch()
        env = {
            "ATS_DB": str(db_file),
            "ATS_AUTOMATION_INTERVAL_SECONDS": "0",
            "ATS_MIMIC_INTERVAL_SECONDS": "-1",
            "ATS_MIMIC_STARTUP_DELAY_SECONDS": "-3",
        }
        with patch.dict(os.environ, env, clear=True):
            warnings = Config().validate()

        assert len(warnings) == 3
        assert any("ATS_AUTOMATION_INTERVAL_SECONDS" in w for w in warnings)
        assert any("ATS_MIMIC_INTERVAL_SECONDS" in w for w in warnings)
        assert any("must not be negative" in w for w in warnings)


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_setup_logging_default(self):
        with patch.dict(os.environ, {}, clear=True):
            Config().setup_logging()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "nested" / "logs" / "server.log"
        env = {"ATS_LOG_FILE": str(log_file), "ATS_LOG_LEVEL": "DEBUG"}
        with patch.dict(os.environ, env, clear=True):
            Config().setup_logging()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 2

        logging.getLogger("test").info("Scheduler tick")
        for handler in root_logger.handlers:
            handler.flush()
        assert "Scheduler tick" in log_file.read_text()

    def test_invalid_level_falls_back_to_info(self):
        with patch.dict(os.environ, {"ATS_LOG_LEVEL": "INVALID"}, clear=True):
            Config().setup_logging()

        assert logging.getLogger().level == logging.INFO
