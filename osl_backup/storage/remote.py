"""Remote server copy over SSH (rsync, falling back to scp)."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def _destination_dir(destination: str) -> str:
    return destination if destination.endswith("/") else f"{destination}/"


def sync_to_remote(path: Path, destination: str) -> bool | None:
    """Copy ``path`` into ``destination`` (``user@host:/dir``).

    Returns True/False for success/failure, or None when neither rsync nor
    scp is installed and the copy was skipped.
    """
    target = _destination_dir(destination)

    if shutil.which("rsync"):
        cmd = ["rsync", "-avz", "--progress", str(path), target]
    else:
        logger.warning("rsync not found. Trying scp...")
        if not shutil.which("scp"):
            logger.warning("scp not found. Skipping remote upload.")
            return None
        cmd = ["scp", str(path), target]

    try:
        result = subprocess.run(cmd)
    except OSError as e:
        logger.error(f"Failed to upload to remote server: {e}")
        return False

    if result.returncode != 0:
        logger.error(f"Failed to upload to remote server ({cmd[0]} exited {result.returncode})")
        return False

    logger.info("Successfully uploaded to remote server")
    return True
