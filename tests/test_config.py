"""Tests for configuration loading (config.py)."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from twelve_week_year.config import Config, get_config, load_tracker_yaml


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each test in an empty directory with no tracker variables set."""
    for name in ("DB_PATH", "BACKUP_DIR", "SEED_DEMO_DATA", "LOG_LEVEL"):
        monkeypatch.delenv(f"TWELVE_WEEK_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestTrackerYaml:
    def test_missing_file(self, tmp_path):
        assert load_tracker_yaml(tmp_path) == {}

    def test_found_in_parent(self, tmp_path):
        (tmp_path / "tracker.yaml").write_text("log_level: debug\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert load_tracker_yaml(nested) == {"log_level": "debug"}

    def test_empty_file(self, tmp_path):
        (tmp_path / "tracker.yaml").write_text("", encoding="utf-8")
        assert load_tracker_yaml(tmp_path) == {}


class TestConfig:
    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TWELVE_WEEK_DB_PATH", str(tmp_path / "env.db"))
        monkeypatch.setenv("TWELVE_WEEK_SEED_DEMO_DATA", "true")
        config = Config()
        assert config.db_path == tmp_path / "env.db"
        assert config.seed_demo_data is True

    def test_log_level_normalized(self):
        assert Config(log_level="info").log_level == "INFO"

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            Config(log_level="chatty")

    def test_yaml_used_when_env_silent(self, tmp_path):
        (tmp_path / "tracker.yaml").write_text(
            f"db_path: {tmp_path / 'yaml.db'}\n"
            f"backup_dir: {tmp_path / 'yaml_backups'}\n"
            "unknown_key: 1\n",
            encoding="utf-8",
        )
        config = get_config(tmp_path)
        assert config.db_path == tmp_path / "yaml.db"
        assert (tmp_path / "yaml_backups").is_dir()

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        (tmp_path / "tracker.yaml").write_text(
            f"db_path: {tmp_path / 'yaml.db'}\n"
            f"backup_dir: {tmp_path / 'backups'}\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("TWELVE_WEEK_DB_PATH", str(tmp_path / "env" / "env.db"))
        config = get_config(tmp_path)
        assert config.db_path == Path(tmp_path / "env" / "env.db")
        assert config.db_path.parent.is_dir()
