"""course-backup: course_backup/site/__init__.py."""

import logging
from pathlib import Path

from .common import Category, Course, RecordNotFoundError, Site, SiteError, User
from .sqlite import SQLiteSite
from .storage import FileArea, StoredFile

__all__ = [
    "Category",
    "Course",
    "FileArea",
    "RecordNotFoundError",
    "Site",
    "SiteError",
    "SQLiteSite",
    "StoredFile",
    "User",
    "open_site",
]


logger = logging.getLogger(__name__)


def open_site(site_config) -> Site:
    """
    Chooses a suitable site adapter based on the configured database.

    Args:
        site_config (SiteConfig): Site section of the configuration.

    Returns:
        Site: An instance of the appropriate `Site` subclass.

    Raises:
        ValueError: If no adapter handles the database specification.
    """
    database = str(site_config.database)
    config = {"dataroot": site_config.dataroot, "admins": site_config.admins}

    if database.startswith("sqlite:///"):
        config["database"] = Path(database[len("sqlite:///") :])
    elif "://" not in database:
        config["database"] = Path(database)
    else:
        raise ValueError(f"No site adapter for this database: {database}")

    site = SQLiteSite(config=config)
    logger.debug("Site opened: %r", site)
    return site
