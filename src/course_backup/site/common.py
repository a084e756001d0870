"""course-backup: course_backup/site/common.py
Records and the generic structure of a site the backups are taken from.
"""

from dataclasses import dataclass
from pathlib import Path

from .storage import FileArea


class SiteError(Exception):
    """The site records cannot be read."""


class RecordNotFoundError(Exception):
    """A record that must exist was not found on the site."""

    def __init__(self, table: str, conditions: dict) -> None:
        self.table = table
        self.conditions = conditions
        where = ", ".join(f"{key}={value!r}" for key, value in conditions.items())
        super().__init__(f"Can't find data record in database table {table} ({where})")


@dataclass(frozen=True)
class User:
    id: int
    username: str


@dataclass(frozen=True)
class Course:
    id: int
    fullname: str
    shortname: str
    category: int = 0


@dataclass(frozen=True)
class Category:
    """A course category.

    Attributes:
        id: Category id
        name: Display name
        path: Ids of all ancestors and the category itself, e.g. "/2/5/9"
    """

    id: int
    name: str
    path: str


class Site:
    """Generic structure of a site."""

    def __init__(self, config=None, **kwargs) -> None:
        """
        Initialize the Site with a configuration dictionary.

        Args:
            config (dict): Configuration dictionary containing site settings.
            kwargs: Additional settings overriding the dictionary.
        """
        config = config or {}
        self.config = {}
        self.config["dataroot"] = Path(config.get("dataroot", "data")).expanduser()
        self.config["admins"] = list(config.get("admins", [2]))

        for key, value in kwargs.items():
            self.config[key] = value

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_id()})"

    def backup_area(self, course_id: int) -> FileArea:
        """Return the backup file area of the given course."""
        return FileArea(
            Path(self.config["dataroot"]) / "backup" / "course" / str(course_id)
        )

    def backup_lock_path(self, course_id: int) -> Path:
        """Return the lock file guarding writes to a course backup area."""
        root = Path(self.config["dataroot"]) / "backup" / ".locks"
        return root / f"course-{course_id}.lock"

    def get_admin(self) -> User | None:
        """Return the first configured administrator that exists, if any."""
        for user_id in self.config["admins"]:
            user = self._get_user(user_id)
            if user is not None:
                return user
        return None

    def get_descendant_categories(self, category: Category) -> list[Category]:
        """Return every category below the given one, at any depth."""
        return self._get_categories_by_path(f"/{category.id}/")

    # The following methods must be implemented by sites, close() may be
    # left alone if nothing needs releasing.

    def get_id(self) -> str:
        """Return an id string to identify this site."""
        return f"unknown://{self.config['dataroot']}"

    def close(self) -> None:
        """Release any connection held by the site."""
        pass

    def get_course(self, course_id: int) -> Course:
        raise NotImplementedError

    def get_course_by_shortname(self, shortname: str) -> Course:
        raise NotImplementedError

    def get_category(self, category_id: int) -> Category:
        raise NotImplementedError

    def get_courses_in_category(self, category_id: int) -> list[Course]:
        raise NotImplementedError

    def _get_user(self, user_id: int) -> User | None:
        raise NotImplementedError

    def _get_categories_by_path(self, fragment: str) -> list[Category]:
        """Return categories whose path contains fragment."""
        raise NotImplementedError
