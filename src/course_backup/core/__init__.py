"""Core backup operations for course-backup.

Resolving which courses to back up, checking where their archives go
and running the backup engine for each of them.
"""

from .operations import (
    BackupOptions,
    BackupResult,
    backup_course,
    plan_backups,
    resolve_courses,
    run_backups,
    validate_destination,
)

__all__ = [
    "BackupOptions",
    "BackupResult",
    "backup_course",
    "plan_backups",
    "resolve_courses",
    "run_backups",
    "validate_destination",
]
