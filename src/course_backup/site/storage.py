"""course-backup: course_backup/site/storage.py
Files kept in the file areas of a site.
"""

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class StoredFile:
    """A file living in a site file area."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"StoredFile({self.path})"

    def get_filename(self) -> str:
        return self.path.name

    def get_filesize(self) -> int:
        return self.path.stat().st_size

    def copy_content_to(self, destination: Path | str) -> bool:
        """Copy the file content to destination, returning whether it worked."""
        try:
            shutil.copyfile(self.path, destination)
        except OSError as e:
            logger.debug("Copying %s to %s failed: %s", self.path, destination, e)
            return False
        return True

    def delete(self) -> None:
        """Remove the file from its file area."""
        self.path.unlink(missing_ok=True)


class FileArea:
    """A directory of a site's data root reserved to one component."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"FileArea({self.root})"

    def prepare(self) -> None:
        """Create the area on disk if needed."""
        if not self.root.is_dir():
            logger.debug("Creating file area: %s", self.root)
            self.root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def get_file(self, filename: str) -> StoredFile | None:
        path = self.root / filename
        if filename.startswith(".") or not path.is_file():
            return None
        return StoredFile(path)

    def list_files(self) -> list[StoredFile]:
        if not self.root.is_dir():
            return []
        # Hidden entries are partial writes, not stored files
        return [
            StoredFile(p)
            for p in sorted(self.root.iterdir())
            if p.is_file() and not p.name.startswith(".")
        ]

    def path_for(self, filename: str) -> Path:
        return self.root / filename
