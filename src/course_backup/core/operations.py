"""Course backup operations.

Runs sequentially: one backup controller at a time, always destroyed
before the next course starts.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .. import __util__
from ..config.schema import BackupDefaults
from ..engine import (
    FORMAT_MOODLE,
    INTERACTIVE_YES,
    MODE_GENERAL,
    TYPE_1COURSE,
    BackupController,
    default_backup_filename,
)
from ..site import Course, Site, User

logger = logging.getLogger(__name__)


@dataclass
class BackupOptions:
    """What to back up and where to put it.

    Attributes:
        courseid: Back up the course with this id
        courseshortname: Back up the course with this shortname
        categoryid: Back up all courses of this category
        recursive: Include the courses of all subcategories (with categoryid)
        destination: Directory or file receiving the archive(s); empty keeps
            them in the backup area of each course
    """

    courseid: int | None = None
    courseshortname: str = ""
    categoryid: int | None = None
    recursive: bool = False
    destination: str = ""


@dataclass
class BackupResult:
    """Outcome of the backup of one course.

    Attributes:
        course: The course backed up
        filename: Generated archive name
        location: Where the archive ended up
        relocated: True if the archive was moved to the destination
        success: False if the archive could not be moved as requested
    """

    course: Course
    filename: str
    location: Path | None
    relocated: bool = False
    success: bool = True


def validate_destination(destination: str, category: bool = False) -> Path | None:
    """Check that backups can be written to destination.

    Args:
        destination: Directory or file name given by the user
        category: Whether a whole category is backed up

    Returns:
        The destination path, or None when no destination was given

    Raises:
        AbortError: If the destination cannot receive the backup(s)
    """
    if not destination:
        return None

    dest = Path(destination.rstrip("/") or "/")

    if dest.is_dir():
        if not __util__.is_writable(dest):
            raise __util__.AbortError(
                "Destination directory does not exist or is not writable."
            )
        return dest

    if destination.endswith("/"):
        raise __util__.AbortError("Destination directory does not exist or is not writable.")

    if dest.is_file() and not __util__.is_writable(dest):
        raise __util__.AbortError("Destination file is not writable.")

    if category:
        raise __util__.AbortError("You cannot backup entire Category to a file.")

    if not dest.exists():
        parent = dest.parent
        if not parent.is_dir() or not __util__.is_writable(parent):
            raise __util__.AbortError(
                f"Destination directory {parent} does not exist or is not writable."
            )

    return dest


def resolve_courses(site: Site, options: BackupOptions) -> list[Course]:
    """Return the courses selected by options.

    Raises:
        RecordNotFoundError: If the course or category does not exist
    """
    if options.courseid:
        return [site.get_course(options.courseid)]

    if options.courseshortname:
        return [site.get_course_by_shortname(options.courseshortname)]

    if options.categoryid:
        category = site.get_category(options.categoryid)
        courses = site.get_courses_in_category(category.id)
        if options.recursive:
            for subcategory in site.get_descendant_categories(category):
                logger.debug("Including subcategory %s (%s)", subcategory.id, subcategory.path)
                courses.extend(site.get_courses_in_category(subcategory.id))
        return courses

    return []


def plan_backups(site: Site, options: BackupOptions) -> tuple[User, Path | None, list[Course]]:
    """Resolve everything needed before the first backup starts.

    Returns:
        Tuple of (admin user, destination path or None, courses)

    Raises:
        AbortError: If there is no admin or the destination is unusable
        RecordNotFoundError: If the course or category does not exist
    """
    admin = site.get_admin()
    if admin is None:
        raise __util__.AbortError("Error: No admin account was found")
    logger.debug("Running backups as %s (id %d)", admin.username, admin.id)

    destination = validate_destination(options.destination, bool(options.categoryid))
    courses = resolve_courses(site, options)

    return admin, destination, courses


def backup_course(
    site: Site,
    course: Course,
    admin: User,
    destination: Path | None = None,
    defaults: BackupDefaults | None = None,
) -> BackupResult:
    """Back up one course and move the archive to destination, if any.

    Args:
        site: Site holding the course
        course: Course to back up
        admin: User the backup runs as
        destination: Directory or file for the archive, None to keep it in
            the course backup area
        defaults: Default plan settings

    Returns:
        BackupResult describing where the archive is
    """
    defaults = defaults or BackupDefaults()
    logger.info(
        __util__.log_heading(f"Performing backup of {course.fullname} ({course.shortname})...")
    )

    bc = BackupController(
        TYPE_1COURSE,
        course.id,
        FORMAT_MOODLE,
        INTERACTIVE_YES,
        MODE_GENERAL,
        admin.id,
        site,
        defaults,
    )
    try:
        # Set the default filename
        plan = bc.get_plan()
        users = plan.get_setting("users").get_value()
        anonymised = plan.get_setting("anonymize").get_value()
        filename = default_backup_filename(
            bc.get_format(),
            bc.get_type(),
            bc.get_id(),
            users,
            anonymised,
            shortname=course.shortname if defaults.use_shortname else None,
        )
        plan.get_setting("filename").set_value(filename)

        bc.finish_ui()
        bc.execute_plan()
        results = bc.get_results()
        # May be empty if the engine already moved the file
        stored = results.get("backup_destination")

        if destination is None:
            logger.info(
                "Backup completed, the new file is listed in the backup area of the given course"
            )
            return BackupResult(course, filename, stored.path if stored else None)

        destfinal = destination / filename if destination.is_dir() else destination
        if not stored:
            logger.debug("Engine returned no file for course %d", course.id)
            return BackupResult(course, filename, None)

        logger.info("Writing %s", destfinal)
        if stored.copy_content_to(destfinal):
            try:
                stored.delete()
            except OSError as e:
                logger.error(
                    "Backup copied to %s but the original could not be removed from "
                    "the course backup file area: %s",
                    destfinal,
                    e,
                )
                return BackupResult(
                    course, filename, destfinal, relocated=True, success=False
                )
            logger.info("Backup completed.")
            return BackupResult(course, filename, destfinal, relocated=True)

        logger.error(
            "Destination directory does not exist or is not writable. "
            "Leaving the backup in the course backup file area."
        )
        return BackupResult(course, filename, stored.path, success=False)
    finally:
        bc.destroy()


def run_backups(
    site: Site,
    admin: User,
    destination: Path | None,
    courses: list[Course],
    defaults: BackupDefaults | None = None,
) -> list[BackupResult]:
    """Back up the courses resolved by plan_backups, one after another.

    A failed copy to the destination is reported in the results and does not
    stop the remaining courses; engine and site errors propagate.
    """
    logger.info("Backing up %d course(s)", len(courses))
    results = []
    for course in courses:
        results.append(backup_course(site, course, admin, destination, defaults))
    return results
