"""Engine configuration

The engine only ever receives an EngineConfig object. ``load_config`` is a
helper for host applications that keep their settings in a YAML file.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".archive-threads.yaml"


class EngineConfig(BaseModel):
    """Settings supplied by the host application

    Durations accept timedelta objects, seconds, or ISO 8601 durations
    ("PT5M").
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    significance_threshold: timedelta = timedelta(minutes=5)
    burst_multiplier: float = 3.0
    burst_window: timedelta = timedelta(hours=1)
    burst_min_items: int = Field(default=2, ge=1)
    target_account: Optional[str] = None
    exclude_reposts: bool = True
    workers: int = Field(default=1, ge=1)

    @field_validator("significance_threshold")
    @classmethod
    def validate_threshold(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("Significance threshold must not be negative")
        return v

    @field_validator("burst_window")
    @classmethod
    def validate_burst_window(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("Burst window must be positive")
        return v

    @field_validator("burst_multiplier")
    @classmethod
    def validate_burst_multiplier(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Burst multiplier must be positive")
        return v


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """Load engine settings from a YAML file or fall back to defaults

    With no explicit path, looks for .archive-threads.yaml in the current
    directory, then the home directory. Settings may sit at the top level of
    the file or under an ``engine`` key.

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file is not valid YAML or holds invalid settings
    """
    if path is not None:
        config_paths = [Path(path)]
        if not config_paths[0].exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        config_paths = [
            Path(CONFIG_FILENAME),
            Path.home() / CONFIG_FILENAME,
        ]

    for config_path in config_paths:
        if not config_path.exists():
            continue

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {config_path}")
        if "engine" in data:
            data = data["engine"] or {}

        try:
            config = EngineConfig(**data)
        except ValidationError as e:
            raise ValueError(f"Invalid settings in {config_path}: {e}") from e

        logger.debug(f"Loaded config from {config_path}")
        return config

    # Fallback to defaults
    return EngineConfig()
