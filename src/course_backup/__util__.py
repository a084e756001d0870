"""course-backup: course_backup/__util__.py
Common utility code shared among modules.
"""

import os
from pathlib import Path


class AbortError(Exception):
    """Exception where the run must be stopped before anything else happens."""


def log_heading(caption: str) -> str:
    """Formatted heading for logging output sections."""
    return f"--[ {caption} ]" + "-" * max(0, 70 - len(caption))


def is_writable(path: Path) -> bool:
    """Check whether the current user may write to path."""
    return os.access(path, os.W_OK)
