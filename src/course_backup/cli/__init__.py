"""Command line interface for course-backup."""

from .backup import main

__all__ = ["main"]
