"""Configuration management for techtree using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = ".techtree.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class LayoutConfig(BaseModel):
    """Tree layout configuration section."""
    origin_x: float = Field(alias="originX", default=200.0)
    origin_y: float = Field(alias="originY", default=80.0)
    horizontal_unit: float = Field(alias="horizontalUnit", default=150.0)
    vertical_unit: float = Field(alias="verticalUnit", default=100.0)
    root_spread: float = Field(alias="rootSpread", default=4.0)
    preserve_manual_positions: bool = Field(alias="preserveManualPositions", default=False)

    @field_validator("horizontal_unit", "vertical_unit")
    @classmethod
    def validate_unit(cls, v):
        if v <= 0:
            raise ValueError("layout units must be > 0")
        return v

    @field_validator("root_spread")
    @classmethod
    def validate_root_spread(cls, v):
        if v < 1:
            raise ValueError("root_spread must be >= 1")
        return v

    model_config = ConfigDict(populate_by_name=True)


class StoreConfig(BaseModel):
    """Document store configuration section."""
    dir: str = ".techtree"
    debounce_ms: int = Field(alias="debounceMs", default=250)

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v):
        if v < 0:
            raise ValueError("debounce_ms must be >= 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class TechtreeConfig(BaseModel):
    """Complete techtree configuration model."""
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> TechtreeConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .techtree.json

    Returns:
        TechtreeConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return TechtreeConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .techtree.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILENAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> TechtreeConfig:
    """Create default configuration."""
    return TechtreeConfig()
