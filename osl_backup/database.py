"""Database operations: streamed dump, streamed restore, connection termination."""

from __future__ import annotations

import contextlib
import gzip
import logging
import shutil
import subprocess
import zlib
from pathlib import Path
from typing import TYPE_CHECKING

from osl_backup.target import TERMINATE_SQL

if TYPE_CHECKING:
    from osl_backup.target import ExecutionTarget

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def _discard(path: Path) -> None:
    """Remove a partially written artifact."""
    if path.exists():
        path.unlink()
        logger.debug(f"Removed incomplete file {path}")


def dump_database(target: ExecutionTarget, output_path: Path, compression_level: int = 6) -> bool:
    """Stream the dump tool's output through gzip into ``output_path``.

    Returns True only when the dump tool exited 0 and the file was fully written.
    """
    cmd = target.dump_command()
    try:
        proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, env=target.env())
    except OSError as e:
        logger.error(f"Could not start {cmd[0]}: {e}")
        return False

    try:
        with proc.stdout, gzip.open(output_path, "wb", compresslevel=compression_level) as out:
            shutil.copyfileobj(proc.stdout, out, CHUNK_SIZE)
    except (OSError, ValueError, zlib.error) as e:
        proc.kill()
        proc.wait()
        logger.error(f"Failed writing {output_path.name}: {e}")
        _discard(output_path)
        return False

    returncode = proc.wait()
    if returncode != 0:
        logger.error(f"Dump command exited with status {returncode}")
        _discard(output_path)
        return False

    return True


def restore_database(target: ExecutionTarget, backup_path: Path) -> bool:
    """Stream the decompressed artifact into the restore tool's stdin."""
    cmd = target.restore_command()
    try:
        proc = subprocess.Popen(cmd, stdin=subprocess.PIPE, env=target.env())
    except OSError as e:
        logger.error(f"Could not start {cmd[0]}: {e}")
        return False

    streamed = True
    try:
        with gzip.open(backup_path, "rb") as src:
            shutil.copyfileobj(src, proc.stdin, CHUNK_SIZE)
    except (OSError, EOFError) as e:
        logger.error(f"Failed streaming {backup_path.name}: {e}")
        streamed = False
    finally:
        with contextlib.suppress(BrokenPipeError):
            proc.stdin.close()

    returncode = proc.wait()
    if returncode != 0:
        logger.error(f"Restore command exited with status {returncode}")
        return False

    return streamed


def terminate_connections(target: ExecutionTarget) -> bool:
    """Terminate other sessions on the target database. Best effort."""
    try:
        result = subprocess.run(
            target.terminate_command(),
            input=TERMINATE_SQL,
            capture_output=True,
            text=True,
            env=target.env(),
        )
    except OSError as e:
        logger.debug(f"Could not terminate connections: {e}")
        return False

    if result.returncode != 0:
        logger.debug(f"Connection termination exited {result.returncode}: {result.stderr.strip()[:500]}")
        return False

    return True
