"""Backup controller: runs one backup plan and keeps its results."""

import io
import json
import logging
import os
import tarfile
import tempfile
import time
from enum import Enum
from pathlib import Path

from filelock import FileLock

from ..config.schema import BackupDefaults
from ..site import Course, Site, StoredFile
from .plan import (
    FORMAT_MOODLE,
    TYPE_1COURSE,
    BackupError,
    BackupPlan,
)

logger = logging.getLogger(__name__)

class Status(Enum):
    """Lifecycle of a controller."""

    CREATED = "created"
    AWAITING = "awaiting"
    EXECUTING = "executing"
    FINISHED_OK = "finished_ok"
    FINISHED_ERR = "finished_err"
    DESTROYED = "destroyed"


class BackupController:
    """Create, configure and execute the backup of a single course."""

    def __init__(
        self,
        backup_type: str,
        item_id: int,
        backup_format: str,
        interactive: bool,
        mode: int,
        user_id: int,
        site: Site,
        defaults: BackupDefaults | None = None,
    ) -> None:
        """
        Initialize the controller and build its plan.

        Args:
            backup_type: What is backed up, only TYPE_1COURSE is supported.
            item_id: Id of the course.
            backup_format: Archive format.
            interactive: Whether settings may still change before finish_ui().
            mode: Backup mode.
            user_id: User the backup runs as.
            site: Site holding the course.
            defaults: Default settings of the plan.
        """
        if backup_type != TYPE_1COURSE:
            raise BackupError(f"Unsupported backup type: {backup_type}")
        if backup_format != FORMAT_MOODLE:
            raise BackupError(f"Unsupported backup format: {backup_format}")

        defaults = defaults or BackupDefaults()
        self.backup_type = backup_type
        self.item_id = item_id
        self.backup_format = backup_format
        self.interactive = interactive
        self.mode = mode
        self.user_id = user_id
        self.site = site
        self.course: Course = site.get_course(item_id)
        self.plan: BackupPlan | None = BackupPlan(
            {
                "users": defaults.users,
                "anonymize": defaults.anonymize,
                "filename": "",
            }
        )
        self.results: dict = {}
        self.status = Status.CREATED if interactive else Status.AWAITING
        logger.debug(
            "Backup controller for course %d created (mode %d, user %d)",
            item_id,
            mode,
            user_id,
        )

    def __repr__(self) -> str:
        return f"BackupController({self.backup_type} {self.item_id}, {self.status.value})"

    def get_type(self) -> str:
        return self.backup_type

    def get_format(self) -> str:
        return self.backup_format

    def get_id(self) -> int:
        return self.item_id

    def get_plan(self) -> BackupPlan:
        if self.plan is None:
            raise BackupError("Backup controller has been destroyed")
        return self.plan

    def finish_ui(self) -> None:
        """Freeze the settings; the plan may run afterwards."""
        if self.status != Status.CREATED:
            raise BackupError(f"Cannot finish settings in status {self.status.value}")
        self.status = Status.AWAITING

    def execute_plan(self) -> None:
        """Write the archive into the backup area of the course."""
        if self.status != Status.AWAITING:
            raise BackupError(f"Cannot execute plan in status {self.status.value}")

        settings = self.get_plan().get_settings()
        filename = settings["filename"]
        if not filename:
            raise BackupError("No filename set for the backup")

        self.status = Status.EXECUTING
        area = self.site.backup_area(self.course.id)
        try:
            area.prepare()
            lock_path = self.site.backup_lock_path(self.course.id)
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(lock_path):
                self._write_archive(area.path_for(filename), settings)
        except (OSError, tarfile.TarError) as e:
            self.status = Status.FINISHED_ERR
            raise BackupError(f"Writing backup of course {self.course.id} failed: {e}")

        self.results = {"backup_destination": StoredFile(area.path_for(filename))}
        self.status = Status.FINISHED_OK
        logger.debug("Backup written to %s", area.path_for(filename))

    def get_results(self) -> dict:
        return dict(self.results)

    def destroy(self) -> None:
        """Release the plan and results of this controller."""
        self.plan = None
        self.results = {}
        self.status = Status.DESTROYED

    def _manifest(self, settings: dict) -> dict:
        return {
            "type": self.backup_type,
            "format": self.backup_format,
            "mode": self.mode,
            "created": int(time.time()),
            "user": self.user_id,
            "course": {
                "id": self.course.id,
                "fullname": self.course.fullname,
                "shortname": self.course.shortname,
                "category": self.course.category,
            },
            "settings": settings,
        }

    def _write_archive(self, target: Path, settings: dict) -> None:
        content_dir = (
            Path(self.site.config["dataroot"]) / "content" / "course" / str(self.course.id)
        )
        manifest = json.dumps(self._manifest(settings), indent=2).encode()

        # Build next to the target so the final rename stays on one filesystem
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f, tarfile.open(fileobj=f, mode="w:gz") as tar:
                info = tarfile.TarInfo("course_backup.json")
                info.size = len(manifest)
                info.mtime = int(time.time())
                tar.addfile(info, io.BytesIO(manifest))
                if content_dir.is_dir():
                    tar.add(content_dir, arcname="files")
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
