"""Local file storage for cached values.

Each helper opens, drains and closes its handle before returning.
Returns Result types for error handling.
"""

import logging
import os
import stat
import tempfile
import time
from pathlib import Path

from filecached.lib.errors import FileConflictError, FileReadError, FileWriteError
from filecached.lib.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def read(path: Path) -> Result[bytes | None, FileReadError]:
    """Read file contents, or Ok(None) if it doesn't exist."""
    try:
        with path.open("rb") as f:
            data = f.read()
    except FileNotFoundError:
        logger.debug(f"No backing file at {path}")
        return Ok(None)
    except OSError as e:
        return Err(FileReadError(path, str(e)))
    logger.debug(f"Read {len(data)} bytes from {path}")
    return Ok(data)


def write(
    path: Path, data: str, exclusive: bool = False
) -> Result[None, FileWriteError | FileConflictError]:
    """Write data to file, creating parent dirs if needed.

    Overwrites by writing a temporary sibling and replacing the target.
    With exclusive=True the target must not exist yet.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(FileWriteError(path, f"Cannot create directory {path.parent}: {e}"))

    if exclusive:
        return _write_exclusive(path, data)

    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        return Err(FileWriteError(path, str(e)))

    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        # mkstemp creates 0600; keep the target's mode, or the umask default
        os.chmod(tmp, _target_mode(path))
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        return Err(FileWriteError(path, str(e)))

    logger.debug(f"Wrote {len(data)} chars to {path}")
    return Ok(None)


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except OSError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _write_exclusive(path: Path, data: str) -> Result[None, FileWriteError | FileConflictError]:
    try:
        f = path.open("x", encoding="utf-8")
    except FileExistsError:
        return Err(FileConflictError(path))
    except OSError as e:
        return Err(FileWriteError(path, str(e)))

    try:
        with f:
            f.write(data)
    except OSError as e:
        path.unlink(missing_ok=True)
        return Err(FileWriteError(path, str(e)))

    logger.debug(f"Created {path} ({len(data)} chars)")
    return Ok(None)


def age(path: Path, now: float | None = None) -> float | None:
    """Seconds since path was last modified.

    None if the file is missing, its metadata is unreadable, or its
    modification time lies in the future.
    """
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    elapsed = (time.time() if now is None else now) - mtime
    if elapsed < 0:
        return None
    return elapsed


def is_fresh(path: Path, ttl_seconds: float, now: float | None = None) -> bool:
    """Check if file exists and was modified within TTL."""
    elapsed = age(path, now)
    return elapsed is not None and elapsed < ttl_seconds


def delete(path: Path) -> Result[bool, FileWriteError]:
    """Delete file if it exists. Ok(True) if something was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return Ok(False)
    except OSError as e:
        return Err(FileWriteError(path, str(e)))
    logger.debug(f"Deleted {path}")
    return Ok(True)
