"""course-backup: course_backup/site/sqlite.py
Site records read from a SQLite database.
"""

import logging
import sqlite3
from pathlib import Path

from .common import Category, Course, RecordNotFoundError, Site, SiteError, User

logger = logging.getLogger(__name__)

# Reference schema for site operators: the tables and columns the lookups
# rely on. Sites exporting their records for course-backup create these with
# create_schema(), other columns are ignored.
SCHEMA = """
CREATE TABLE IF NOT EXISTS course_categories (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    parent INTEGER NOT NULL DEFAULT 0,
    path TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS course (
    id INTEGER PRIMARY KEY,
    category INTEGER NOT NULL DEFAULT 0,
    fullname TEXT NOT NULL DEFAULT '',
    shortname TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS course_category_idx ON course (category);
CREATE TABLE IF NOT EXISTS "user" (
    id INTEGER PRIMARY KEY,
    username TEXT NOT NULL DEFAULT '',
    deleted INTEGER NOT NULL DEFAULT 0
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the site tables on conn if they are missing.

    Args:
        conn: Writable connection to the database later opened by SQLiteSite
    """
    conn.executescript(SCHEMA)


class SQLiteSite(Site):
    """Create a site reading its records from a SQLite database."""

    def __init__(self, config=None, **kwargs) -> None:
        super().__init__(config=config, **kwargs)
        config = config or {}
        self.config.setdefault("database", Path(config.get("database", "site.db")))
        self.config["database"] = Path(self.config["database"]).expanduser()
        self._conn: sqlite3.Connection | None = None

    def get_id(self) -> str:
        return f"sqlite://{self.config['database']}"

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            database = self.config["database"]
            if not database.is_file():
                raise SiteError(f"Site database not found: {database}")
            logger.debug("Opening site database %s", database)
            # Read only, the site records are never modified here
            try:
                self._conn = sqlite3.connect(
                    f"{database.resolve().as_uri()}?mode=ro", uri=True
                )
            except sqlite3.Error as e:
                raise SiteError(f"Cannot open site database {database}: {e}")
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise SiteError(f"Site query failed: {e}")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _get_user(self, user_id: int) -> User | None:
        row = self._execute(
            'SELECT id, username FROM "user" WHERE id = ? AND deleted = 0', (user_id,)
        ).fetchone()
        return User(id=row["id"], username=row["username"]) if row else None

    def get_course(self, course_id: int) -> Course:
        return self._must_get_course("id", course_id)

    def get_course_by_shortname(self, shortname: str) -> Course:
        return self._must_get_course("shortname", shortname)

    def _must_get_course(self, column: str, value) -> Course:
        rows = self._execute(
            f"SELECT id, fullname, shortname, category FROM course WHERE {column} = ?",
            (value,),
        ).fetchall()
        if not rows:
            raise RecordNotFoundError("course", {column: value})
        if len(rows) > 1:
            logger.warning(
                "Found %d courses with %s=%r, using id %d",
                len(rows),
                column,
                value,
                rows[0]["id"],
            )
        return _course(rows[0])

    def get_category(self, category_id: int) -> Category:
        row = self._execute(
            "SELECT id, name, path FROM course_categories WHERE id = ?", (category_id,)
        ).fetchone()
        if row is None:
            raise RecordNotFoundError("course_categories", {"id": category_id})
        return Category(id=row["id"], name=row["name"], path=row["path"])

    def get_courses_in_category(self, category_id: int) -> list[Course]:
        rows = self._execute(
            "SELECT id, fullname, shortname, category FROM course"
            " WHERE category = ? ORDER BY id",
            (category_id,),
        )
        return [_course(row) for row in rows]

    def _get_categories_by_path(self, fragment: str) -> list[Category]:
        rows = self._execute(
            "SELECT id, name, path FROM course_categories"
            " WHERE path LIKE ? ESCAPE '\\' ORDER BY id",
            ("%" + _escape_like(fragment) + "%",),
        )
        return [Category(id=row["id"], name=row["name"], path=row["path"]) for row in rows]


def _course(row: sqlite3.Row) -> Course:
    return Course(
        id=row["id"],
        fullname=row["fullname"],
        shortname=row["shortname"],
        category=row["category"],
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
