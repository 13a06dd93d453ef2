#!/usr/bin/env python3
"""
Configuration Management Layer for the csvgrid CLI

Provides centralized configuration with support for:
- Environment variables (CSVGRID_* prefix)
- Config files (~/.csvgrid_config.json or project-specific)
- Command-line overrides
- Validated defaults

Configuration priority (highest to lowest):
1. Command-line overrides
2. Config file
3. Environment variables
4. Hardcoded defaults
"""

import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "CSVGRID_"
CONFIG_FILE_NAME = ".csvgrid_config.json"


class CLIConfig(BaseModel):
    """
    Central configuration for the csvgrid command line interface.

    Paths are resolved to absolute paths during validation.
    """

    # Paths
    config_path: Path = Field(
        default=Path("config.json"),
        description="Catalog configuration file (JSON or YAML)"
    )
    data_root: Optional[Path] = Field(
        default=None,
        description="Directory that sample file paths are relative to (default: config file directory)"
    )
    log_dir: Path = Field(
        default=Path("logs"),
        description="Directory for rotating log files"
    )

    # Behavior settings
    verbose: bool = Field(
        default=False,
        description="Enable verbose logging output"
    )

    # Processing settings
    workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Number of threads for concurrent file reads"
    )

    # Output
    output_format: Literal["table", "csv", "parquet"] = Field(
        default="table",
        description="Default output format of the read command"
    )

    # Config metadata (not user-configurable)
    config_version: str = Field(
        default="1.0.0",
        description="Configuration schema version"
    )

    model_config = {
        "validate_assignment": True,
        "validate_default": True,
    }

    @field_validator("config_path", "data_root", "log_dir", mode="before")
    @classmethod
    def resolve_path(cls, v) -> Optional[Path]:
        """
        Resolve paths to absolute paths.
        Relative paths are resolved relative to current working directory.
        """
        if v is None:
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        return path.resolve()

    @property
    def effective_data_root(self) -> Path:
        return self.data_root if self.data_root is not None else self.config_path.parent

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "CLIConfig":
        """
        Load configuration from environment variables.

        Environment variable format: {prefix}{FIELD_NAME}
        Example: CSVGRID_VERBOSE=true, CSVGRID_WORKERS=8

        Args:
            prefix: Prefix for environment variables (default: "CSVGRID_")

        Returns:
            CLIConfig instance with values from environment
        """
        config_dict = {}

        for field_name, field_info in cls.model_fields.items():
            env_value = os.getenv(f"{prefix}{field_name.upper()}")

            if env_value is None:
                continue

            field_type = field_info.annotation
            if field_type is bool:
                config_dict[field_name] = env_value.lower() in ("true", "1", "yes", "on")
            elif field_type is int:
                config_dict[field_name] = int(env_value)
            else:
                config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_file(cls, config_file: Path) -> "CLIConfig":
        """
        Load configuration from JSON config file.

        Args:
            config_file: Path to JSON configuration file

        Returns:
            CLIConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
            json.JSONDecodeError: If config file is invalid JSON
        """
        config_file = Path(config_file)

        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        with open(config_file, "r") as f:
            config_dict = json.load(f)

        # Drop comments or metadata fields that aren't part of the model
        config_dict = {k: v for k, v in config_dict.items() if k in cls.model_fields}

        return cls(**config_dict)

    def save(self, config_file: Path, pretty: bool = True) -> None:
        """
        Save current configuration to JSON file.

        Args:
            config_file: Path where to save configuration
            pretty: If True, format JSON with indentation
        """
        config_file = Path(config_file)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json")

        with open(config_file, "w") as f:
            if pretty:
                json.dump(config_dict, f, indent=2, sort_keys=False)
                f.write("\n")
            else:
                json.dump(config_dict, f)

    def merge_with(self, **overrides) -> "CLIConfig":
        """
        Create a new config with specified overrides.

        Args:
            **overrides: Field values to override

        Returns:
            New CLIConfig instance with overrides applied
        """
        config_dict = self.model_dump()
        config_dict.update(overrides)
        return CLIConfig(**config_dict)

    def get_field_source(self, field_name: str) -> str:
        """
        Determine the source of a configuration field value.

        Returns:
            "default", "env" or "override"
        """
        current_value = getattr(self, field_name)
        default_value = getattr(CLIConfig(), field_name)

        if current_value == default_value:
            return "default"

        if os.getenv(f"{ENV_PREFIX}{field_name.upper()}") is not None:
            return "env"

        return "override"


def _apply_file(config: CLIConfig, path: Path) -> CLIConfig:
    try:
        file_config = CLIConfig.from_file(path)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Ignoring config file {path}: {e}")
        return config

    for field_name in CLIConfig.model_fields.keys():
        setattr(config, field_name, getattr(file_config, field_name))
    return config


def load_config_with_precedence(
    config_file: Optional[Path] = None,
    check_env: bool = True,
    check_user_config: bool = True,
    check_project_config: bool = True,
    **overrides
) -> CLIConfig:
    """
    Load configuration with proper precedence handling.

    Precedence (highest to lowest):
    1. Explicit overrides (**overrides)
    2. Specified config file (config_file parameter)
    3. Project-local config (./.csvgrid_config.json)
    4. User config (~/.csvgrid_config.json)
    5. Environment variables (CSVGRID_*)
    6. Defaults

    Args:
        config_file: Explicit config file path (highest priority after overrides)
        check_env: Whether to load from environment variables
        check_user_config: Whether to check user home directory for config
        check_project_config: Whether to check current directory for config
        **overrides: Direct field overrides (highest priority)

    Returns:
        CLIConfig instance with merged configuration
    """
    config = CLIConfig()

    # Layer 1: Environment variables
    if check_env:
        try:
            env_config = CLIConfig.from_env()
        except (ValueError, ValidationError) as e:
            logger.warning(f"Ignoring invalid {ENV_PREFIX}* environment variables: {e}")
        else:
            for field_name in CLIConfig.model_fields.keys():
                env_value = getattr(env_config, field_name)
                if env_value != getattr(config, field_name):
                    setattr(config, field_name, env_value)

    # Layer 2: User config file
    user_config_path = Path.home() / CONFIG_FILE_NAME
    if check_user_config and user_config_path.exists():
        config = _apply_file(config, user_config_path)

    # Layer 3: Project config file
    project_config_path = Path.cwd() / CONFIG_FILE_NAME
    if check_project_config and project_config_path.exists() and project_config_path != user_config_path:
        config = _apply_file(config, project_config_path)

    # Layer 4: Explicit config file
    if config_file is not None:
        config = CLIConfig.from_file(config_file)

    # Layer 5: Direct overrides
    if overrides:
        config = config.merge_with(**overrides)

    return config
