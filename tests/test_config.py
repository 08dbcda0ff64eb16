"""Test engine configuration loading"""

import pytest
from datetime import timedelta

from pydantic import ValidationError

from archive_threads import EngineConfig, load_config


@pytest.fixture
def isolated_dirs(tmp_path, monkeypatch):
    """Run with empty working and home directories"""
    work = tmp_path / "work"
    home = tmp_path / "home"
    work.mkdir()
    home.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HOME", str(home))
    return work, home


class TestEngineConfig:
    """Test EngineConfig validation"""

    def test_defaults(self):
        """Test default settings"""
        config = EngineConfig()

        assert config.significance_threshold == timedelta(minutes=5)
        assert config.burst_multiplier == 3.0
        assert config.burst_window == timedelta(hours=1)
        assert config.target_account is None
        assert config.exclude_reposts is True
        assert config.workers == 1

    def test_durations_from_seconds_and_iso(self):
        """Test durations accept seconds and ISO 8601 strings"""
        config = EngineConfig(significance_threshold=600, burst_window="PT30M")

        assert config.significance_threshold == timedelta(minutes=10)
        assert config.burst_window == timedelta(minutes=30)

    @pytest.mark.parametrize("settings", [
        {"significance_threshold": -1},
        {"burst_window": 0},
        {"burst_multiplier": 0},
        {"burst_min_items": 0},
        {"workers": 0},
        {"unknown_setting": True},
    ])
    def test_invalid_settings(self, settings):
        """Test out-of-range and unknown settings are rejected"""
        with pytest.raises(ValidationError):
            EngineConfig(**settings)

    def test_immutable(self):
        """Test settings cannot change after construction"""
        config = EngineConfig()
        with pytest.raises(ValidationError):
            config.workers = 4


class TestLoadConfig:
    """Test load_config function"""

    def test_explicit_path(self, tmp_path):
        """Test settings are read from an explicit file"""
        path = tmp_path / "settings.yaml"
        path.write_text("target_account: alice\nsignificance_threshold: 120\nworkers: 4\n")

        config = load_config(path)

        assert config.target_account == "alice"
        assert config.significance_threshold == timedelta(minutes=2)
        assert config.workers == 4

    def test_engine_section(self, tmp_path):
        """Test settings nested under an engine key"""
        path = tmp_path / "settings.yaml"
        path.write_text("engine:\n  burst_multiplier: 5\n  exclude_reposts: false\n")

        config = load_config(str(path))

        assert config.burst_multiplier == 5.0
        assert config.exclude_reposts is False

    def test_explicit_path_missing(self, tmp_path):
        """Test a missing explicit file is an error"""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises ValueError"""
        path = tmp_path / "settings.yaml"
        path.write_text("target_account: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        """Test a YAML list is rejected"""
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="Expected a mapping"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        """Test invalid settings raise ValueError"""
        path = tmp_path / "settings.yaml"
        path.write_text("workers: 0\n")

        with pytest.raises(ValueError, match="Invalid settings"):
            load_config(path)

    def test_empty_file(self, tmp_path):
        """Test an empty file gives default settings"""
        path = tmp_path / "settings.yaml"
        path.write_text("")

        assert load_config(path) == EngineConfig()

    def test_working_directory_file(self, isolated_dirs):
        """Test the working directory file is found"""
        work, home = isolated_dirs
        (work / ".archive-threads.yaml").write_text("target_account: alice\n")
        (home / ".archive-threads.yaml").write_text("target_account: bob\n")

        assert load_config().target_account == "alice"

    def test_home_directory_file(self, isolated_dirs):
        """Test the home directory file is used as a fallback"""
        _, home = isolated_dirs
        (home / ".archive-threads.yaml").write_text("target_account: bob\n")

        assert load_config().target_account == "bob"

    def test_defaults_without_file(self, isolated_dirs):
        """Test defaults are returned when no file exists"""
        assert load_config() == EngineConfig()
