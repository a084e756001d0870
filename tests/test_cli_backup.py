"""Tests for the backup command line."""

import logging
from unittest.mock import MagicMock

import pytest

from course_backup import __version__
from course_backup.cli import backup
from course_backup.cli.backup import (
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_USAGE,
    create_parser,
    main,
    validate_options,
)
from course_backup.engine import BackupError


@pytest.fixture(autouse=True)
def no_rich_logging(monkeypatch):
    """Keep log records flowing to caplog instead of a rich console."""
    monkeypatch.setattr(backup, "create_logger", lambda level: None)


@pytest.fixture
def spy_open_site(monkeypatch):
    spy = MagicMock()
    monkeypatch.setattr(backup, "open_site", spy)
    return spy


def archives(path):
    return sorted(p.name for p in path.iterdir() if p.suffix == ".mbz")


class TestCreateParser:
    """Tests for create_parser."""

    def test_recursive_spellings(self):
        parser = create_parser()
        for flag in ["--r", "-r", "--recursive"]:
            args = parser.parse_args(["--categoryid=2", flag])
            assert args.recursive is True

    def test_defaults(self):
        args = create_parser().parse_args([])
        assert args.courseid is None
        assert args.courseshortname == ""
        assert args.categoryid is None
        assert args.recursive is False
        assert args.destination == ""
        assert args.dry_run is False

    def test_rejects_bad_id(self):
        with pytest.raises(SystemExit) as excinfo:
            create_parser().parse_args(["--courseid=abc"])
        assert excinfo.value.code == 2

    def test_rejects_unknown_option(self):
        with pytest.raises(SystemExit) as excinfo:
            create_parser().parse_args(["--courseid=2", "--bogus"])
        assert excinfo.value.code == 2


class TestValidateOptions:
    """Tests for validate_options."""

    def parse(self, *argv):
        return create_parser().parse_args(list(argv))

    def test_single_selector(self):
        assert validate_options(self.parse("--courseid=2", "--destination=/tmp")) is None
        assert (
            validate_options(self.parse("--courseshortname=BIO101", "--destination=/tmp"))
            is None
        )
        assert validate_options(self.parse("--categoryid=2", "--destination=/tmp")) is None

    @pytest.mark.parametrize(
        "argv",
        [
            ["--courseid=2", "--courseshortname=BIO101"],
            ["--courseid=2", "--categoryid=3"],
            ["--courseshortname=BIO101", "--categoryid=3"],
            ["--courseid=2", "--courseshortname=BIO101", "--categoryid=3"],
            [],
        ],
    )
    def test_selector_conflicts(self, argv):
        error = validate_options(self.parse(*argv, "--destination=/tmp"))
        assert "exactly one of" in error

    def test_destination_required(self):
        assert "--destination" in validate_options(self.parse("--courseid=2"))


class TestMain:
    """Tests for main."""

    def test_help(self, capsys, spy_open_site):
        with pytest.raises(SystemExit) as excinfo:
            main(["-h"])
        assert excinfo.value.code == 0
        assert "--courseshortname" in capsys.readouterr().out
        spy_open_site.assert_not_called()

    def test_version(self, capsys):
        assert main(["--version"]) == EXIT_OK
        assert __version__ in capsys.readouterr().out

    def test_example_config(self, capsys):
        assert main(["--example-config"]) == EXIT_OK
        assert "[site]" in capsys.readouterr().out

    def test_conflicting_selectors_print_help(self, capsys, spy_open_site, destination):
        code = main(["--courseid=2", "--categoryid=2", f"--destination={destination}"])

        assert code == EXIT_USAGE
        captured = capsys.readouterr()
        assert "usage: course-backup" in captured.out
        assert "exactly one of" in captured.err
        spy_open_site.assert_not_called()

    def test_missing_destination_prints_help(self, capsys, spy_open_site):
        assert main(["--courseid=2"]) == EXIT_USAGE
        assert "usage: course-backup" in capsys.readouterr().out
        spy_open_site.assert_not_called()

    def test_backup_course_to_directory(self, config_file, dataroot, destination):
        code = main(
            ["-c", str(config_file), "--courseshortname=BIO101", f"--destination={destination}/"]
        )

        assert code == EXIT_OK
        names = archives(destination)
        assert len(names) == 1
        assert names[0].startswith("backup-moodle2-course-3-")
        assert list((dataroot / "backup" / "course" / "3").glob("*.mbz")) == []

    def test_backup_course_to_file(self, config_file, destination):
        target = destination / "course_2.mbz"
        code = main(["-c", str(config_file), "--courseid=2", f"--destination={target}"])

        assert code == EXIT_OK
        assert archives(destination) == ["course_2.mbz"]

    def test_backup_category_recursive(self, config_file, destination):
        code = main(
            ["-c", str(config_file), "--categoryid=2", "--r", f"--destination={destination}"]
        )

        assert code == EXIT_OK
        ids = sorted(int(name.split("-")[3]) for name in archives(destination))
        assert ids == [2, 3, 4, 6, 8]

    def test_category_to_file_is_refused(self, config_file, destination, caplog):
        code = main(
            ["-c", str(config_file), "--categoryid=2", f"--destination={destination}/x.mbz"]
        )

        assert code == EXIT_FAILURE
        assert "entire Category to a file" in caplog.text
        assert archives(destination) == []

    def test_unwritable_destination(self, config_file, destination, monkeypatch, caplog):
        monkeypatch.setattr("course_backup.__util__.is_writable", lambda path: False)
        controller = MagicMock()
        monkeypatch.setattr("course_backup.core.operations.BackupController", controller)

        code = main(["-c", str(config_file), "--courseid=2", f"--destination={destination}"])

        assert code == EXIT_FAILURE
        assert "not writable" in caplog.text
        controller.assert_not_called()

    def test_unknown_course(self, config_file, destination, caplog):
        code = main(["-c", str(config_file), "--courseid=404", f"--destination={destination}"])

        assert code == EXIT_FAILURE
        assert "Can't find data record" in caplog.text

    def test_unknown_category(self, config_file, destination, caplog):
        code = main(["-c", str(config_file), "--categoryid=404", f"--destination={destination}"])

        assert code == EXIT_FAILURE
        assert "course_categories" in caplog.text

    def test_missing_admin(self, tmp_path, site_db, dataroot, destination, caplog):
        config = tmp_path / "noadmin.toml"
        config.write_text(
            f'[site]\ndatabase = "{site_db}"\ndataroot = "{dataroot}"\nadmins = [4]\n'
        )
        code = main(["-c", str(config), "--courseid=2", f"--destination={destination}"])

        assert code == EXIT_FAILURE
        assert "No admin account was found" in caplog.text

    def test_missing_config_file(self, tmp_path, destination, caplog):
        code = main(
            ["-c", str(tmp_path / "none.toml"), "--courseid=2", f"--destination={destination}"]
        )

        assert code == EXIT_FAILURE
        assert "Configuration error" in caplog.text

    def test_missing_site_database(self, tmp_path, destination, caplog):
        config = tmp_path / "nodb.toml"
        config.write_text('[site]\ndatabase = "missing.db"\n')
        code = main(["-c", str(config), "--courseid=2", f"--destination={destination}"])

        assert code == EXIT_FAILURE
        assert "Cannot read site" in caplog.text

    def test_dry_run(self, config_file, dataroot, destination, capsys):
        code = main(
            [
                "-c",
                str(config_file),
                "--categoryid=5",
                "--r",
                "--dry-run",
                f"--destination={destination}",
            ]
        )

        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "Course 3: Cell Biology (BIO101)" in out
        assert "Course 4: Genomics (GEN201)" in out
        assert archives(destination) == []
        assert not (dataroot / "backup").exists()

    def test_copy_failure_still_exits_ok(self, config_file, destination, monkeypatch, caplog):
        caplog.set_level(logging.INFO)
        monkeypatch.setattr(
            "course_backup.site.storage.StoredFile.copy_content_to",
            lambda self, dest: False,
        )
        code = main(["-c", str(config_file), "--categoryid=2", f"--destination={destination}"])

        assert code == EXIT_OK
        assert "Completed with errors: 0 backed up, 2 left" in caplog.text

    def test_delete_failure_still_exits_ok(self, config_file, destination, monkeypatch, caplog):
        def stuck_delete(self):
            raise PermissionError(13, "Permission denied", str(self.path))

        monkeypatch.setattr("course_backup.site.storage.StoredFile.delete", stuck_delete)
        code = main(["-c", str(config_file), "--categoryid=2", f"--destination={destination}"])

        assert code == EXIT_OK
        assert len(archives(destination)) == 2
        assert "could not be removed" in caplog.text

    def test_engine_error_exits_with_failure(self, config_file, destination, monkeypatch, caplog):
        controller = MagicMock()
        controller.return_value.get_format.return_value = "moodle2"
        controller.return_value.get_type.return_value = "course"
        controller.return_value.get_id.return_value = 2
        controller.return_value.execute_plan.side_effect = BackupError("disk full")
        monkeypatch.setattr("course_backup.core.operations.BackupController", controller)

        code = main(["-c", str(config_file), "--courseid=2", f"--destination={destination}"])

        assert code == EXIT_FAILURE
        assert "Backup failed: disk full" in caplog.text
        controller.return_value.destroy.assert_called_once()
