"""Backup plans and their settings.

A plan carries the settings of one backup; the controller owning it reads
them when writing the archive.
"""

import time
from dataclasses import dataclass
from typing import Any

from .. import clean_filename_part

# Backup types
TYPE_1COURSE = "course"

# Backup formats
FORMAT_MOODLE = "moodle2"

# Interaction and mode flags
INTERACTIVE_YES = True
INTERACTIVE_NO = False
MODE_GENERAL = 10

# Date part of generated archive names
FILENAME_DATE_FORMAT = "%Y%m%d-%H%M"

ARCHIVE_EXTENSION = ".mbz"


class BackupError(Exception):
    """Error raised by the backup engine."""


@dataclass
class BackupSetting:
    """A named value of a backup plan."""

    name: str
    value: Any = None

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        self.value = value


class BackupPlan:
    """The settings of a single backup."""

    def __init__(self, settings: dict[str, Any] | None = None) -> None:
        self._settings: dict[str, BackupSetting] = {}
        for name, value in (settings or {}).items():
            self.add_setting(BackupSetting(name, value))

    def add_setting(self, setting: BackupSetting) -> None:
        if setting.name in self._settings:
            raise BackupError(f"Duplicate backup setting: {setting.name}")
        self._settings[setting.name] = setting

    def get_setting(self, name: str) -> BackupSetting:
        try:
            return self._settings[name]
        except KeyError:
            raise BackupError(f"Unknown backup setting: {name}") from None

    def get_settings(self) -> dict[str, Any]:
        """Return a plain name -> value mapping of all settings."""
        return {name: s.get_value() for name, s in self._settings.items()}


def default_backup_filename(
    backup_format: str,
    backup_type: str,
    item_id: int,
    users: bool,
    anonymised: bool,
    shortname: str | None = None,
    when: float | None = None,
) -> str:
    """Return the default archive name for a backup.

    The name always carries the item id, followed by the cleaned shortname
    when one is given, e.g. ``backup-moodle2-course-12-bio101-20240131-0915-nu.mbz``.
    A ``-nu`` suffix marks backups without users, ``-an`` anonymised ones.
    """
    name = f"{backup_format}-{backup_type}-{item_id}"
    if shortname:
        shortname = clean_filename_part(shortname).strip("_")
        if shortname:
            name += f"-{shortname}"

    date = time.strftime(FILENAME_DATE_FORMAT, time.localtime(when))

    info = ""
    if not users:
        info = "-nu"
    elif anonymised:
        info = "-an"

    return f"backup-{name}-{date}{info}{ARCHIVE_EXTENSION}"
