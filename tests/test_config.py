#!/usr/bin/env python3
"""
Tests for CLI configuration management.

Tests cover:
- Configuration creation with defaults
- Loading from environment variables
- Loading from files
- Field validation (paths, formats, ranges)
- Configuration precedence
- Serialization (save/load)
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from csvgrid.cli.config import CLIConfig, load_config_with_precedence


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep user and project config files out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for name in CLIConfig.model_fields:
        monkeypatch.delenv(f"CSVGRID_{name.upper()}", raising=False)
    return home


class TestConfigCreation:
    """Test configuration creation and defaults."""

    def test_default_config_creation(self):
        """Test that config can be created with default values."""
        config = CLIConfig()

        assert config.config_path == Path("config.json").resolve()
        assert config.data_root is None
        assert config.log_dir == Path("logs").resolve()
        assert config.verbose is False
        assert config.workers == 4
        assert config.output_format == "table"

    def test_default_paths_are_absolute(self):
        """Default paths go through the same resolution as explicit ones."""
        config = CLIConfig()

        assert config.config_path.is_absolute()
        assert config.log_dir.is_absolute()
        assert config.get_field_source("log_dir") == "default"

    def test_config_with_overrides(self, tmp_path):
        """Test creating config with field overrides."""
        config = CLIConfig(verbose=True, workers=8, data_root=tmp_path / "data")

        assert config.verbose is True
        assert config.workers == 8
        assert config.data_root == tmp_path / "data"
        assert config.output_format == "table"

    def test_effective_data_root(self, tmp_path):
        """Data root defaults to the directory of the catalog config."""
        config = CLIConfig(config_path=tmp_path / "db" / "config.json")
        assert config.effective_data_root == tmp_path / "db"

        config = CLIConfig(config_path=tmp_path / "config.json", data_root=tmp_path / "data")
        assert config.effective_data_root == tmp_path / "data"


class TestFieldValidation:
    """Test field validation."""

    def test_relative_path_resolution(self):
        """Test that relative paths are resolved to absolute."""
        config = CLIConfig(log_dir="relative/path")

        assert config.log_dir.is_absolute()
        assert config.log_dir == (Path.cwd() / "relative/path").resolve()

    def test_output_format(self):
        assert CLIConfig(output_format="parquet").output_format == "parquet"

        with pytest.raises(ValidationError):
            CLIConfig(output_format="xlsx")

    @pytest.mark.parametrize("workers", [0, 33])
    def test_workers_range_validation(self, workers):
        with pytest.raises(ValidationError):
            CLIConfig(workers=workers)

    def test_validate_assignment(self):
        config = CLIConfig()
        with pytest.raises(ValidationError):
            config.workers = 0


class TestEnvironmentVariables:
    """Test loading configuration from environment variables."""

    def test_from_env_basic(self, monkeypatch):
        monkeypatch.setenv("CSVGRID_VERBOSE", "true")
        monkeypatch.setenv("CSVGRID_WORKERS", "8")
        monkeypatch.setenv("CSVGRID_OUTPUT_FORMAT", "csv")

        config = CLIConfig.from_env()

        assert config.verbose is True
        assert config.workers == 8
        assert config.output_format == "csv"

    @pytest.mark.parametrize("value, expected", [("true", True), ("1", True), ("yes", True), ("false", False)])
    def test_from_env_boolean_variations(self, monkeypatch, value, expected):
        monkeypatch.setenv("CSVGRID_VERBOSE", value)
        assert CLIConfig.from_env().verbose is expected

    def test_from_env_path_fields(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CSVGRID_DATA_ROOT", str(tmp_path / "data"))
        assert CLIConfig.from_env().data_root == tmp_path / "data"

    def test_from_env_with_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_WORKERS", "12")
        assert CLIConfig.from_env(prefix="CUSTOM_").workers == 12


class TestFileOperations:
    """Test saving and loading configuration files."""

    def test_save_and_load_roundtrip(self, tmp_path):
        config_file = tmp_path / "cli.json"
        original = CLIConfig(verbose=True, workers=2, output_format="csv", data_root=tmp_path)

        original.save(config_file)
        loaded = CLIConfig.from_file(config_file)

        assert loaded == original

    def test_save_creates_parent_directories(self, tmp_path):
        config_file = tmp_path / "nested" / "dir" / "cli.json"
        CLIConfig().save(config_file)
        assert config_file.exists()

    def test_from_file_nonexistent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CLIConfig.from_file(tmp_path / "missing.json")

    def test_from_file_invalid_json(self, tmp_path):
        config_file = tmp_path / "cli.json"
        config_file.write_text("{ invalid json }")

        with pytest.raises(json.JSONDecodeError):
            CLIConfig.from_file(config_file)

    def test_from_file_ignores_extra_fields(self, tmp_path):
        config_file = tmp_path / "cli.json"
        config_file.write_text(json.dumps({"workers": 6, "_comment": "local settings"}))

        assert CLIConfig.from_file(config_file).workers == 6


class TestConfigPrecedence:
    """Test configuration precedence handling."""

    def test_defaults(self):
        assert load_config_with_precedence() == CLIConfig()

    def test_env_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("CSVGRID_WORKERS", "8")
        config = load_config_with_precedence()
        assert config.workers == 8
        assert config.get_field_source("workers") == "env"

    def test_user_config(self, isolated_home):
        (isolated_home / ".csvgrid_config.json").write_text(json.dumps({"workers": 3}))
        assert load_config_with_precedence().workers == 3

    def test_project_config_overrides_user_config(self, isolated_home, tmp_path):
        (isolated_home / ".csvgrid_config.json").write_text(json.dumps({"workers": 3}))
        (tmp_path / ".csvgrid_config.json").write_text(json.dumps({"workers": 5}))
        assert load_config_with_precedence().workers == 5

    def test_invalid_user_config_is_ignored(self, isolated_home):
        (isolated_home / ".csvgrid_config.json").write_text("{ broken")
        assert load_config_with_precedence().workers == 4

    def test_explicit_file_and_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CSVGRID_VERBOSE", "true")
        config_file = tmp_path / "cli.json"
        config_file.write_text(json.dumps({"verbose": False, "workers": 7}))

        config = load_config_with_precedence(config_file=config_file, output_format="csv")

        assert config.verbose is False
        assert config.workers == 7
        assert config.output_format == "csv"
        assert config.get_field_source("output_format") == "override"
        assert config.get_field_source("config_path") == "default"
