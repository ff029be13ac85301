"""Backup artifacts and the places they are stored."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from fnmatch import fnmatchcase
from pathlib import Path

ARTIFACT_PREFIX = "openstreetlifting_backup"
ARTIFACT_SUFFIX = ".sql.gz"
ARTIFACT_GLOB = f"{ARTIFACT_PREFIX}_*{ARTIFACT_SUFFIX}"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


@dataclass
class BackupEntry:
    """Metadata for a single backup file."""

    path: Path
    filename: str
    size: int  # Bytes
    modified: datetime


def artifact_name(ts: datetime) -> str:
    """``openstreetlifting_backup_YYYYMMDD_HHMMSS.sql.gz`` for a capture time."""
    return f"{ARTIFACT_PREFIX}_{ts.strftime(TIMESTAMP_FORMAT)}{ARTIFACT_SUFFIX}"


def is_artifact(name: str) -> bool:
    return fnmatchcase(name, ARTIFACT_GLOB)


def parse_artifact_timestamp(name: str) -> datetime:
    """Capture time embedded in an artifact filename. Raises ValueError otherwise."""
    if not is_artifact(name):
        raise ValueError(f"Not a backup artifact: {name}")
    stamp = name[len(ARTIFACT_PREFIX) + 1 : -len(ARTIFACT_SUFFIX)]
    return datetime.strptime(stamp, TIMESTAMP_FORMAT)


def format_size(size_bytes: int) -> str:
    """Human-readable file size."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.2f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"
