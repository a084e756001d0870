"""Backup command: back up courses by id, shortname or category."""

import argparse
import logging
import sys
import time

from .. import __util__, __version__
from ..__logger__ import create_logger
from ..config import Config, ConfigError, find_config_file, load_config
from ..config.loader import generate_example_config
from ..core.operations import BackupOptions, plan_backups, run_backups
from ..engine import BackupError
from ..site import RecordNotFoundError, SiteError, open_site
from .common import add_config_args, add_verbosity_args, get_log_level, positive_int

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

EXAMPLES = """\
Example:
  $ sudo -u www-data course-backup --courseid=2 --destination=/srv/backup/course_2.mbz
  $ sudo -u www-data course-backup --categoryid=2 --r --destination=/srv/backup/
"""


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser of the backup command."""
    parser = argparse.ArgumentParser(
        prog="course-backup",
        description="Perform backup of the given course or category.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    group = parser.add_argument_group("Backup options")
    group.add_argument(
        "--courseid",
        type=positive_int,
        metavar="INTEGER",
        help="Course ID to backup",
    )
    group.add_argument(
        "--courseshortname",
        default="",
        metavar="STRING",
        help="Course shortname for backup",
    )
    group.add_argument(
        "--categoryid",
        type=positive_int,
        metavar="INTEGER",
        help="Category ID to backup",
    )
    group.add_argument(
        "-r",
        "--r",
        "--recursive",
        dest="recursive",
        action="store_true",
        help="Recursively backup all subcategories (with --categoryid)",
    )
    group.add_argument(
        "--destination",
        default="",
        metavar="STRING",
        help="Directory or filename to store backup(s)",
    )
    group.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which courses would be backed up without backing them up",
    )

    add_config_args(parser)
    add_verbosity_args(parser)

    return parser


def validate_options(args: argparse.Namespace) -> str | None:
    """Check flag combinations.

    Returns:
        An error message, or None if the combination is valid
    """
    selectors = [
        args.courseid is not None,
        bool(args.courseshortname),
        args.categoryid is not None,
    ]
    if sum(selectors) != 1:
        return "exactly one of --courseid, --courseshortname or --categoryid is required"
    if not args.destination:
        return "--destination is required"
    return None


def _load_config(args: argparse.Namespace) -> Config:
    config_path = find_config_file(getattr(args, "config", None))
    if config_path is None:
        logger.debug("No configuration file found, using defaults")
        return Config()

    logger.debug("Loading configuration from: %s", config_path)
    config, warnings = load_config(config_path)
    for warning in warnings:
        logger.warning("Config: %s", warning)
    return config


def execute_backup(args: argparse.Namespace) -> int:
    """Execute the backup command.

    Args:
        args: Parsed and validated command line arguments

    Returns:
        Exit code
    """
    log_level = get_log_level(args)
    create_logger(log_level)

    options = BackupOptions(
        courseid=args.courseid,
        courseshortname=args.courseshortname,
        categoryid=args.categoryid,
        recursive=args.recursive,
        destination=args.destination,
    )
    if options.recursive and not options.categoryid:
        logger.warning("--r only applies together with --categoryid, ignoring it")

    try:
        config = _load_config(args)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_FAILURE

    try:
        site = open_site(config.site)
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    with site:
        try:
            admin, destination, courses = plan_backups(site, options)
        except __util__.AbortError as e:
            logger.error("%s", e)
            return EXIT_FAILURE
        except RecordNotFoundError as e:
            logger.error("%s", e)
            return EXIT_FAILURE
        except SiteError as e:
            logger.error("Cannot read site: %s", e)
            return EXIT_FAILURE

        if args.dry_run:
            return _dry_run(courses, destination)

        logger.info(__util__.log_heading(f"Started at {time.ctime()}"))
        try:
            results = run_backups(site, admin, destination, courses, config.backup)
        except (BackupError, RecordNotFoundError, SiteError) as e:
            logger.error("Backup failed: %s", e)
            return EXIT_FAILURE

        logger.info(__util__.log_heading(f"Finished at {time.ctime()}"))

    failed = [r for r in results if not r.success]
    if failed:
        logger.warning(
            "Completed with errors: %d backed up, %d left in the course backup area",
            len(results) - len(failed),
            len(failed),
        )
    else:
        logger.info("All %d course(s) backed up", len(results))

    return EXIT_OK


def _dry_run(courses, destination) -> int:
    """Show what would be done without making changes."""
    print("Dry run mode - showing what would be done:")
    print("")

    for course in courses:
        print(f"Course {course.id}: {course.fullname} ({course.shortname})")
    if not courses:
        print("No courses selected.")

    print("")
    if destination is None:
        print("Archives would stay in the backup area of each course.")
    else:
        print(f"Archives would be written to: {destination}")

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the course-backup CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"course-backup {__version__}")
        return EXIT_OK

    if args.example_config:
        print(generate_example_config())
        return EXIT_OK

    error = validate_options(args)
    if error:
        parser.print_help()
        print(f"\nError: {error}", file=sys.stderr)
        return EXIT_USAGE

    return execute_backup(args)
