"""PID file helpers so external tools can find the target process."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


def write_pid_file(path: Union[str, Path], pid: Optional[int] = None) -> Path:
    """
    Write ``pid`` (default: our own) to ``path``, creating parent directories.

    Raises:
        OSError: if the file cannot be written
    """
    pid_path = Path(path).expanduser()
    pid = os.getpid() if pid is None else pid
    pid_path.parent.mkdir(parents=True, exist_ok=True)
    pid_path.write_text(f"{pid}\n")
    logger.debug(f"Wrote PID {pid} to {pid_path}")
    return pid_path


def read_pid_file(path: Union[str, Path]) -> Optional[int]:
    """Return the PID stored in ``path``, or None if missing or malformed."""
    try:
        return int(Path(path).expanduser().read_text().strip())
    except (OSError, ValueError):
        return None


def remove_pid_file(path: Union[str, Path], pid: Optional[int] = None) -> bool:
    """
    Remove ``path`` if it still holds ``pid`` (default: our own).

    Returns:
        True if the file was removed
    """
    pid_path = Path(path).expanduser()
    pid = os.getpid() if pid is None else pid

    stored = read_pid_file(pid_path)
    if stored != pid:
        if stored is not None:
            logger.info(f"Leaving {pid_path} in place, it belongs to PID {stored}")
        return False

    try:
        pid_path.unlink()
    except OSError as e:
        logger.warning(f"Failed to remove PID file {pid_path}: {e}")
        return False
    logger.debug(f"Removed PID file {pid_path}")
    return True
