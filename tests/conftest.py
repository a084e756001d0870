"""Pytest configuration and shared fixtures."""

import sqlite3

import pytest

from course_backup.site.sqlite import SQLiteSite, create_schema

# (id, name, parent, path)
CATEGORIES = [
    (1, "Miscellaneous", 0, "/1"),
    (2, "Science", 0, "/2"),
    (5, "Biology", 2, "/2/5"),
    (9, "Genetics", 5, "/2/5/9"),
    (12, "Science Archive", 0, "/12"),
    (21, "Chemistry", 2, "/2/21"),
]

# (id, category, fullname, shortname)
COURSES = [
    (1, 0, "Site home", "home"),
    (2, 2, "Introductory Physics", "PHY101"),
    (3, 5, "Cell Biology", "BIO101"),
    (4, 9, "Genomics", "GEN201"),
    (5, 12, "Old Science", "ARC1"),
    (6, 21, "Organic Chemistry", "CHEM200"),
    (7, 1, "Algebra", "MATH1"),
    (8, 2, "Astronomy", "AST100"),
]

# (id, username, deleted)
USERS = [
    (1, "guest", 0),
    (2, "admin", 0),
    (3, "lecturer", 0),
    (4, "oldadmin", 1),
]


@pytest.fixture
def site_db(tmp_path):
    """Create a populated site database."""
    path = tmp_path / "site.db"
    conn = sqlite3.connect(path)
    try:
        create_schema(conn)
        conn.executemany(
            "INSERT INTO course_categories (id, name, parent, path) VALUES (?, ?, ?, ?)",
            CATEGORIES,
        )
        conn.executemany(
            "INSERT INTO course (id, category, fullname, shortname) VALUES (?, ?, ?, ?)",
            COURSES,
        )
        conn.executemany(
            'INSERT INTO "user" (id, username, deleted) VALUES (?, ?, ?)', USERS
        )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def dataroot(tmp_path):
    """Create an empty site data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def site(site_db, dataroot):
    """Open the test site."""
    with SQLiteSite(
        config={"database": site_db, "dataroot": dataroot, "admins": [2]}
    ) as s:
        yield s


@pytest.fixture
def destination(tmp_path):
    """Create an empty destination directory."""
    path = tmp_path / "dest"
    path.mkdir()
    return path


@pytest.fixture
def config_file(tmp_path, site_db, dataroot):
    """Write a config file pointing at the test site."""
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[site]
database = "{site_db}"
dataroot = "{dataroot}"
admins = [4, 2]

[backup]
users = true
anonymize = false
"""
    )
    return path
