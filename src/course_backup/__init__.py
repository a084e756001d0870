"""course-backup: course_backup/__init__.py."""

import re


__version__ = "0.1.0"


def clean_filename_part(value: str) -> str:
    """Lowercase, replace spaces with '_' and drop characters unsafe in filenames"""
    value = str(value).strip().lower().replace(" ", "_")
    return re.sub(r"[^a-z0-9_.\-]", "", value)
