"""Configuration module."""

from .constants import (
    AWS_ARN_PREFIX,
    DEFAULT_LOG_TYPE,
    LOG_TYPE_S3_SERVER_ACCESS,
    NULL_SENTINEL,
)
from .settings import Settings, clear_settings_cache, get_settings, load_config_file

__all__ = [
    # Log types
    "LOG_TYPE_S3_SERVER_ACCESS",
    "DEFAULT_LOG_TYPE",
    # Decoding and indicators
    "NULL_SENTINEL",
    "AWS_ARN_PREFIX",
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "load_config_file",
]
