"""
Configuration for the ATS Workflow MCP Server.

Every setting comes from an ``ATS_*`` environment variable (a ``.env`` file at
the repository root is loaded first) and falls back to a default:

    ATS_DB                            database file (absolute or repo-relative)
    ATS_ROOT                          data root; database at <root>/data/ats.db
    ATS_LOG_LEVEL                     logging level name (INFO)
    ATS_LOG_FILE                      optional log file (absolute or repo-relative)
    ATS_SERVER_NAME                   MCP server name
    ATS_AUTOMATION_INTERVAL_SECONDS   Bot Automation tick interval (120)
    ATS_MIMIC_INTERVAL_SECONDS        Bot Mimic tick interval (180)
    ATS_MIMIC_STARTUP_DELAY_SECONDS   delay before the first Bot Mimic tick (5)
    ATS_AUTOSTART_SCHEDULERS          start both schedulers with the server (true)
    ATS_RANDOM_SEED                   optional seed for reproducible bot outcomes
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parent

load_dotenv(dotenv_path=REPO_ROOT / ".env")

DEFAULT_SERVER_NAME = "ats-workflow-mcp-server"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE_VALUES = ("true", "1", "t", "y", "yes")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


class Config:
    """
    Snapshot of the environment taken at construction time.

    Relative paths resolve against the repository root, not the working
    directory, so the server behaves the same however it is launched.
    """

    def __init__(self):
        self._repo_root = REPO_ROOT

        self.db_path = self._resolve_db_path()
        self.log_level = os.getenv("ATS_LOG_LEVEL", "INFO").upper()
        self.log_file = self._repo_path(os.getenv("ATS_LOG_FILE"))
        self.server_name = os.getenv("ATS_SERVER_NAME", DEFAULT_SERVER_NAME)

        self.automation_interval_seconds = _env_float("ATS_AUTOMATION_INTERVAL_SECONDS", 120.0)
        self.mimic_interval_seconds = _env_float("ATS_MIMIC_INTERVAL_SECONDS", 180.0)
        self.mimic_startup_delay_seconds = _env_float("ATS_MIMIC_STARTUP_DELAY_SECONDS", 5.0)
        self.autostart_schedulers = _env_bool("ATS_AUTOSTART_SCHEDULERS", True)
        self.random_seed = _env_optional_int("ATS_RANDOM_SEED")

    def _repo_path(self, value: Optional[str]) -> Optional[Path]:
        if not value:
            return None
        path = Path(value)
        return path if path.is_absolute() else self._repo_root / path

    def _resolve_db_path(self) -> Path:
        """ATS_DB wins over ATS_ROOT; both fall back to <repo>/data/ats.db."""
        db_path = self._repo_path(os.getenv("ATS_DB"))
        if db_path is not None:
            return db_path

        root_env = os.getenv("ATS_ROOT")
        if root_env:
            return Path(root_env) / "data" / "ats.db"

        return self._repo_root / "data" / "ats.db"

    def setup_logging(self):
        """
        Configure the root logger.

        Logs go to stderr (stdout carries the MCP stdio transport) and,
        when ATS_LOG_FILE is set, to that file as well. Unknown level names
        fall back to INFO.
        """
        level = getattr(logging, self.log_level, logging.INFO)
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        handlers = [logging.StreamHandler()]
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.log_file))

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        if self.log_file:
            logging.info(f"Logging to file: {self.log_file}")
        logging.info(f"Log level set to: {self.log_level}")
        logging.info(f"Database path: {self.db_path}")
        logging.info(
            f"Scheduler intervals: automation={self.automation_interval_seconds}s "
            f"mimic={self.mimic_interval_seconds}s "
            f"(first mimic tick after {self.mimic_startup_delay_seconds}s)"
        )

    def get_db_path_str(self) -> str:
        return str(self.db_path)

    def validate(self) -> list[str]:
        """
        Check the settings and return human-readable warnings.

        Nothing here is fatal: a missing database is created on startup and
        bad intervals surface again when the schedulers are built.
        """
        warnings = []

        if not self.db_path.exists():
            warnings.append(
                f"Database file not found: {self.db_path}. It will be created on startup."
            )

        if self.log_file:
            log_dir = self.log_file.parent
            if not log_dir.exists():
                try:
                    log_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    warnings.append(f"Cannot create log directory {log_dir}: {e}")
            elif not os.access(log_dir, os.W_OK):
                warnings.append(f"Log directory not writable: {log_dir}")

        for name, value in (
            ("ATS_AUTOMATION_INTERVAL_SECONDS", self.automation_interval_seconds),
            ("ATS_MIMIC_INTERVAL_SECONDS", self.mimic_interval_seconds),
        ):
            if value <= 0:
                warnings.append(f"{name} must be positive, got {value}")

        if self.mimic_startup_delay_seconds < 0:
            warnings.append(
                "ATS_MIMIC_STARTUP_DELAY_SECONDS must not be negative, "
                f"got {self.mimic_startup_delay_seconds}"
            )

        return warnings


config = Config()


def get_config() -> Config:
    """Return the process-wide configuration instance."""
    return config
