"""Tests for the osl-db command line."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from osl_backup.backup import BackupError
from osl_backup.cli import app
from osl_backup.restore import RestoreError
from osl_backup.target import DirectTarget

runner = CliRunner()


@pytest.fixture
def env_file(tmp_path, config):
    path = tmp_path / "test.env"
    path.write_text(f"BACKUP_DIR={config.backup_dir}\nDB_NAME=osl_test\n")
    return path


def _invoke(env_file, *args, **kwargs):
    return runner.invoke(app, ["--env-file", str(env_file), *args], **kwargs)


class TestBackupCommand:
    def test_success(self, env_file):
        with patch("osl_backup.cli.run_backup") as run:
            result = _invoke(env_file, "backup")
        assert result.exit_code == 0
        config = run.call_args.args[0]
        assert config.db_name == "osl_test"

    def test_dump_failure_exits_1(self, env_file):
        with patch("osl_backup.cli.run_backup", side_effect=BackupError("Backup failed!")):
            result = _invoke(env_file, "backup")
        assert result.exit_code == 1

    def test_takes_no_arguments(self, env_file):
        result = _invoke(env_file, "backup", "extra")
        assert result.exit_code != 0


class TestRestoreCommand:
    def test_passes_backup_argument(self, env_file):
        with patch("osl_backup.cli.run_restore", return_value=True) as run:
            result = _invoke(env_file, "restore", "openstreetlifting_backup_20261018_030000.sql.gz")
        assert result.exit_code == 0
        assert run.call_args.kwargs["backup"] == "openstreetlifting_backup_20261018_030000.sql.gz"

    def test_interactive_when_omitted(self, env_file):
        with patch("osl_backup.cli.run_restore", return_value=True) as run:
            result = _invoke(env_file, "restore")
        assert result.exit_code == 0
        assert run.call_args.kwargs["backup"] is None

    def test_cancel_exits_0(self, env_file):
        with patch("osl_backup.cli.run_restore", return_value=False):
            result = _invoke(env_file, "restore", "x.sql.gz")
        assert result.exit_code == 0

    def test_hard_failure_exits_1(self, env_file):
        with patch("osl_backup.cli.run_restore", side_effect=RestoreError("Backup file not found")):
            result = _invoke(env_file, "restore", "x.sql.gz")
        assert result.exit_code == 1

    def test_missing_file_end_to_end(self, env_file):
        result = _invoke(env_file, "restore", "openstreetlifting_backup_19990101_000000.sql.gz")
        assert result.exit_code == 1

    def test_typed_cancellation(self, env_file, config, make_artifact):
        artifact = make_artifact(config.backup_dir, datetime(2026, 10, 18, 3))
        with patch("osl_backup.restore.restore_database") as restore_db:
            result = _invoke(env_file, "restore", artifact.name, input="no\n")
        assert result.exit_code == 0
        restore_db.assert_not_called()

    def test_typed_invalid_selection(self, env_file, config, make_artifact):
        make_artifact(config.backup_dir, datetime(2026, 10, 18, 3))
        with patch("osl_backup.restore.restore_database") as restore_db:
            result = _invoke(env_file, "restore", input="5\n")
        assert result.exit_code == 1
        restore_db.assert_not_called()


class TestListCommand:
    def test_empty(self, env_file):
        result = _invoke(env_file, "list")
        assert result.exit_code == 0
        assert "No backups found" in result.output

    def test_lists_artifacts(self, env_file, config, make_artifact):
        artifact = make_artifact(config.backup_dir, datetime(2026, 10, 18, 3))
        result = _invoke(env_file, "list")
        assert result.exit_code == 0
        assert artifact.name in result.output


class TestStatusCommand:
    def test_shows_config_without_password(self, env_file, tmp_path):
        env_file.write_text(env_file.read_text() + "DB_PASSWORD=hunter2\n")
        with patch("osl_backup.cli.select_target", side_effect=lambda config: DirectTarget(config)):
            result = _invoke(env_file, "status")
        assert result.exit_code == 0
        assert "osl_test" in result.output
        assert "direct" in result.output
        assert "hunter2" not in result.output


def test_no_args_shows_help():
    result = runner.invoke(app, [])
    assert "backup" in result.output
    assert "restore" in result.output
