"""
Application settings and configuration management.

Supports loading from:
1. YAML config files (config.yaml)
2. Environment variables (fallback)
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from .constants import DEFAULT_LOG_TYPE

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """
    Settings for the log processing pipeline.

    Attributes:
        log_level: Root logging level used by scripts
        default_log_type: Log type used when a caller does not name one
        strict: If True, the processor raises on the first dropped line
            instead of skipping it
        skip_blank_lines: If True, empty lines are ignored before parsing
    """

    log_level: str = "INFO"
    default_log_type: str = DEFAULT_LOG_TYPE
    strict: bool = False
    skip_blank_lines: bool = True

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, "
                f"got {self.log_level!r}"
            )
        if not self.default_log_type:
            errors.append("default_log_type is required")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "log_level": self.log_level,
            "default_log_type": self.default_log_type,
            "strict": self.strict,
            "skip_blank_lines": self.skip_blank_lines,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from a configuration dictionary (e.g., from YAML)."""
        logging_cfg = config.get("logging", {}) or {}
        processing = config.get("processing", {}) or {}

        return cls(
            log_level=str(logging_cfg.get("level", "INFO")).upper(),
            default_log_type=processing.get("default_log_type", DEFAULT_LOG_TYPE),
            strict=bool(processing.get("strict", False)),
            skip_blank_lines=bool(processing.get("skip_blank_lines", True)),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""

        def safe_bool(key: str, default: bool) -> bool:
            """Safely parse bool from env var."""
            return os.environ.get(key, str(default).lower()).lower() == "true"

        return cls(
            log_level=os.environ.get("CLOUDLOG_LOG_LEVEL", "INFO").upper(),
            default_log_type=os.environ.get(
                "CLOUDLOG_DEFAULT_LOG_TYPE", DEFAULT_LOG_TYPE
            ),
            strict=safe_bool("CLOUDLOG_STRICT", False),
            skip_blank_lines=safe_bool("CLOUDLOG_SKIP_BLANK_LINES", True),
        )


def load_config_file(file_path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed configuration (empty dict for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file does not contain a YAML mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Config file {file_path} must contain a mapping, "
            f"got {type(config).__name__}"
        )
    return config


# Default config file path
DEFAULT_CONFIG_PATH = Path("config.yaml")


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from the YAML config file if available, otherwise from env vars.

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Settings instance
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if path.exists():
        try:
            return Settings.from_dict(load_config_file(path))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Falling back to environment variables")

    return Settings.from_env()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
