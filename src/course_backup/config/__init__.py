"""Configuration system for course-backup.

This module provides TOML-based configuration loading, validation,
and schema definitions for the site the backups are taken from.
"""

from .loader import ConfigError, find_config_file, load_config
from .schema import BackupDefaults, Config, SiteConfig

__all__ = [
    "BackupDefaults",
    "SiteConfig",
    "Config",
    "load_config",
    "find_config_file",
    "ConfigError",
]
