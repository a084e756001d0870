"""Shared CLI utilities and argument parsers."""

import argparse


def positive_int(value: str) -> int:
    """argparse type accepting record ids (integers > 0)."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid id: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"id must be greater than 0: {value!r}")
    return number


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def add_config_args(parser: argparse.ArgumentParser) -> None:
    """Add configuration-related arguments to a parser."""
    group = parser.add_argument_group("Configuration")
    group.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )
    group.add_argument(
        "--example-config",
        action="store_true",
        help="Print an example configuration file and exit",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    elif getattr(args, "verbose", False):
        return "DEBUG"
    else:
        return "INFO"
