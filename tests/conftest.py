"""Pytest configuration and fixtures for osl-backup tests."""

from __future__ import annotations

import gzip
import io
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from osl_backup.config import BackupConfig
from osl_backup.storage import artifact_name

PY = sys.executable


def python_command(code: str) -> list[str]:
    """argv running a snippet in a fresh interpreter."""
    return [PY, "-c", code]


def sink_command(out: Path) -> list[str]:
    """argv that copies its stdin into ``out``."""
    return python_command(f"import sys, pathlib; pathlib.Path({str(out)!r}).write_bytes(sys.stdin.buffer.read())")


@dataclass
class FakeTarget:
    """Execution target whose commands are small Python programs."""

    dump: list[str] = field(default_factory=lambda: python_command("print('CREATE TABLE lifters (id int);')"))
    restore: list[str] = field(default_factory=lambda: python_command("import sys; sys.stdin.buffer.read()"))
    terminate: list[str] = field(default_factory=lambda: python_command("import sys; sys.stdin.read()"))
    name: str = "fake"

    def env(self) -> dict[str, str]:
        return os.environ.copy()

    def dump_command(self) -> list[str]:
        return self.dump

    def restore_command(self) -> list[str]:
        return self.restore

    def terminate_command(self) -> list[str]:
        return self.terminate


class ScriptedPrompter:
    """Answers prompts from a fixed list and records the questions."""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def ask(self, message: str) -> str:
        self.questions.append(message)
        return self.answers.pop(0)


@pytest.fixture
def fake_target():
    return FakeTarget


@pytest.fixture
def prompter():
    return ScriptedPrompter


@pytest.fixture
def sink():
    return sink_command


@pytest.fixture
def config(tmp_path):
    """Config pointing at a temporary backup directory."""
    backup_dir = tmp_path / "backups"
    backup_dir.mkdir()
    return BackupConfig(backup_dir=backup_dir)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def make_artifact():
    """Write a gzipped artifact named after ``ts`` into a directory."""

    def _make(directory: Path, ts: datetime, sql: bytes = b"CREATE TABLE lifters (id int);\n") -> Path:
        path = directory / artifact_name(ts)
        path.write_bytes(gzip.compress(sql))
        return path

    return _make
