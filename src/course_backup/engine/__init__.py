"""Backup engine for course-backup.

Builds backup plans for courses and writes their archives into the
course backup areas of a site.
"""

from .controller import BackupController, Status
from .plan import (
    FORMAT_MOODLE,
    INTERACTIVE_NO,
    INTERACTIVE_YES,
    MODE_GENERAL,
    TYPE_1COURSE,
    BackupError,
    BackupPlan,
    BackupSetting,
    default_backup_filename,
)

__all__ = [
    "BackupController",
    "BackupError",
    "BackupPlan",
    "BackupSetting",
    "FORMAT_MOODLE",
    "INTERACTIVE_NO",
    "INTERACTIVE_YES",
    "MODE_GENERAL",
    "Status",
    "TYPE_1COURSE",
    "default_backup_filename",
]
