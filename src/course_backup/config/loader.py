"""TOML configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from .schema import BackupDefaults, Config, SiteConfig


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


# Environment variable overriding the search paths
CONFIG_ENV = "COURSE_BACKUP_CONFIG"

# Config file search paths in priority order
CONFIG_PATHS = [
    Path.home() / ".config" / "course-backup" / "config.toml",
    Path("/etc/course-backup/config.toml"),
]


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    explicit_path = explicit_path or os.environ.get(CONFIG_ENV)
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _expect_bool(section: str, data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{section}.{key}' must be true or false")
    return value


def _parse_site(data: dict[str, Any], base_dir: Path | None) -> SiteConfig:
    """Parse site configuration from dict."""
    admins = data.get("admins", [2])
    if isinstance(admins, int):
        admins = [admins]
    if not isinstance(admins, list) or not all(
        isinstance(a, int) and not isinstance(a, bool) for a in admins
    ):
        raise ConfigError("'site.admins' must be a list of user ids")

    database = str(data.get("database", "site.db"))
    dataroot = str(data.get("dataroot", "data"))

    # Relative paths are relative to the config file
    if base_dir is not None:
        if "://" not in database:
            database = str(base_dir / database)
        dataroot = str(base_dir / dataroot)

    return SiteConfig(database=database, dataroot=dataroot, admins=admins)


def _parse_backup(data: dict[str, Any]) -> BackupDefaults:
    """Parse backup defaults from dict."""
    return BackupDefaults(
        users=_expect_bool("backup", data, "users", True),
        anonymize=_expect_bool("backup", data, "anonymize", False),
        use_shortname=_expect_bool("backup", data, "use_shortname", False),
    )


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    if not config.site.admins:
        warnings.append("No site administrators configured")

    if not Path(config.site.database).exists():
        warnings.append(f"Site database '{config.site.database}' does not exist")

    if config.backup.anonymize and not config.backup.users:
        warnings.append("'anonymize' has no effect when 'users' is disabled")

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    config = Config(
        site=_parse_site(data.get("site", {}), path.parent),
        backup=_parse_backup(data.get("backup", {})),
    )

    # Validate and collect warnings
    warnings = _validate_config(config)

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# course-backup configuration

[site]
database = "/var/lib/lms/site.db"   # Site records (courses, categories, users)
dataroot = "/var/lib/lms/data"      # Course file areas live below this directory
admins = [2]                        # Backups run as the first existing admin

[backup]
users = true            # Include enrolled users and their data
anonymize = false       # Anonymize user information
use_shortname = false   # Name archives after the course shortname instead of its id
"""
