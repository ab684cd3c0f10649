"""
Configuration management for the 12 Week Year Tracker.

Provides centralized configuration using Pydantic for validation and
environment variable support. Supports tracker.yaml for per-user settings.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Default data paths relative to project root
DB_PATH = PROJECT_ROOT / "data" / "db" / "twelve_week_year.db"
BACKUP_DIR = PROJECT_ROOT / "data" / "backups"

YAML_FILENAME = "tracker.yaml"


def load_tracker_yaml(search_dir: Optional[Path] = None) -> dict:
    """
    Load tracker.yaml configuration file.

    Searches for tracker.yaml starting from search_dir (or the current
    working directory) and walking up to 3 parent directories.

    Args:
        search_dir: Directory to start searching from

    Returns:
        Dictionary with tracker.yaml contents, or empty dict if not found
    """
    start = search_dir or Path.cwd()
    for parent in [start] + list(start.parents)[:3]:
        candidate = parent / YAML_FILENAME
        if candidate.exists():
            with open(candidate, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
    return {}


class Config(BaseSettings):
    """
    Application configuration with environment variable support.

    Configuration can be provided via:
    1. Explicit keyword arguments
    2. Environment variables (prefixed with TWELVE_WEEK_)
    3. .env file
    4. tracker.yaml (see get_config)
    5. Default values

    Example:
        export TWELVE_WEEK_DB_PATH="/custom/path/tracker.db"
        export TWELVE_WEEK_LOG_LEVEL="DEBUG"
    """

    model_config = SettingsConfigDict(
        env_prefix="TWELVE_WEEK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage paths
    db_path: Path = Field(
        default=DB_PATH,
        description="Path to SQLite database file"
    )
    backup_dir: Path = Field(
        default=BACKUP_DIR,
        description="Directory where snapshot exports are written"
    )

    # Behaviour
    seed_demo_data: bool = Field(
        default=False,
        description="Seed a demo cycle when a fresh database is created"
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level for the command line interface"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)


def get_config(search_dir: Optional[Path] = None) -> Config:
    """
    Get the application configuration instance.

    Values from tracker.yaml (if present) are used for any setting that is
    not given through the environment or .env file.

    Args:
        search_dir: Directory to start the tracker.yaml search from

    Returns:
        Config: Application configuration
    """
    yaml_config = load_tracker_yaml(search_dir)
    known = {k: v for k, v in yaml_config.items() if k in Config.model_fields}
    config = Config()
    # Environment wins over the YAML file
    overrides = {
        k: v for k, v in known.items() if k not in config.model_fields_set
    }
    if overrides:
        config = Config(**{**config.model_dump(exclude_unset=True), **overrides})
    config.ensure_directories()
    return config
