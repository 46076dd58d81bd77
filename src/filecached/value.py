"""File-backed cached value.

Flow:
1. Nothing is read until the first accessor call.
2. The in-memory copy is trusted until the backing file goes stale
   (its mtime is older than the staleness threshold) or set_dirty() is called.
3. Every new value is written to disk before it replaces the in-memory copy.

Freshness comes from the backing file's mtime only, so deleting or touching
the file from outside is seen on the next check.
"""

import logging
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Any, Final, Generic, TypeVar

from filecached.lib import paths
from filecached.lib.codec import JsonSerializer, Serializer
from filecached.lib.errors import (
    CacheError,
    CacheInvariantError,
    FileDecodeError,
    FileEncodeError,
    FileWriteError,
    ReadError,
    WriteError,
)
from filecached.lib.result import Err, Ok, Result
from filecached.lib.storage import file

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


# Distinguishes "nothing loaded" from a stored JSON null
_MISSING: Final = _Missing()


def _as_timedelta(duration: timedelta | float) -> timedelta:
    if not isinstance(duration, timedelta):
        duration = timedelta(seconds=duration)
    if duration < timedelta(0):
        raise ValueError(f"Staleness threshold must not be negative: {duration}")
    return duration


class CachedFileValue(Generic[T]):
    """A single value of type T persisted as one JSON file.

    Without a staleness threshold the file is read at most once per instance.
    With one, the value is recomputed by get_or_insert*() once the file is at
    least that old, or when it has disappeared.

    Fallible operations return Result; see filecached.lib.errors.
    """

    def __init__(
        self,
        name: str,
        base_dir: Path | str | None = None,
        *,
        value_type: Any = None,
        serializer: Serializer[T] | None = None,
        staleness_threshold: timedelta | float | None = None,
        exclusive: bool = False,
        clock: Callable[[], float] = time.time,
        app_name: str = paths.APP_NAME,
    ) -> None:
        """
        Args:
            name: Logical name, sanitized into the backing file name.
            base_dir: Directory for the backing file. Defaults to the per-user
                data directory for app_name; DataDirError if there is none.
            value_type: Type to rebuild on decode when no serializer is given.
            serializer: Codec for the file contents. Defaults to JSON.
            staleness_threshold: Age at which the backing file goes stale.
            exclusive: Refuse to overwrite an existing backing file on insert.
            clock: Wall-clock source in epoch seconds, compared against mtime.
        """
        self._path = paths.resolve(name, base_dir, app_name)
        self._serializer: Serializer[T] = serializer or JsonSerializer(value_type)
        self._exclusive = exclusive
        self._clock = clock
        self._value: T | _Missing = _MISSING
        self._invalidated = False
        self._threshold: timedelta | None = None
        if staleness_threshold is not None:
            self.set_staleness_threshold(staleness_threshold)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def staleness_threshold(self) -> timedelta | None:
        return self._threshold

    def set_staleness_threshold(self, duration: timedelta | float) -> None:
        """Treat the value as stale once the backing file is at least duration old.

        Numbers are taken as seconds.
        """
        self._threshold = _as_timedelta(duration)

    def clear_staleness_threshold(self) -> None:
        """Go back to reading the backing file only once."""
        self._threshold = None

    def set_dirty(self) -> T | None:
        """Drop the in-memory value and force a recompute on the next get_or_insert*.

        The backing file is left alone. Returns the dropped value, if any.
        """
        dropped = self.peek()
        self._value = _MISSING
        self._invalidated = True
        logger.debug(f"Invalidated {self._path}")
        return dropped

    def peek(self) -> T | None:
        """In-memory value without any I/O."""
        return None if self._value is _MISSING else self._value

    def age(self) -> timedelta | None:
        """Time since the backing file was modified, None if unknown."""
        elapsed = file.age(self._path, self._clock())
        return None if elapsed is None else timedelta(seconds=elapsed)

    def is_dirty(self) -> bool:
        """Whether the backing file should no longer be trusted.

        A missing file counts as stale when a threshold is set.
        """
        if self._invalidated:
            return True
        if self._threshold is None:
            return False
        return not file.is_fresh(self._path, self._threshold.total_seconds(), self._clock())

    def get(self) -> Result[T | None, ReadError]:
        """Current value, loading the backing file if needed.

        Ok(None) if there is no backing file. Never writes. After set_dirty(),
        every call re-reads the file until the next insert.
        """
        if self._value is _MISSING or self.is_dirty():
            match self._read():
                case Err() as e:
                    return e
                case Ok(value):
                    self._value = value
        return Ok(self.peek())

    def get_or_insert(self, default: T) -> Result[T, CacheError]:
        """Current value, or default written through if the file is stale."""
        return self.get_or_insert_with(lambda: default)

    def get_or_insert_with(self, factory: Callable[[], T]) -> Result[T, CacheError]:
        """Current value, or factory() written through if the file is stale.

        factory is called at most once, and only when a new value is needed.
        Raises CacheInvariantError if the backing file is not stale but cannot
        be found: it vanished after the freshness check, or, with no threshold
        set, nothing was ever stored. Call set_dirty() or insert() first to
        seed a cache with no threshold.
        """
        if self.is_dirty():
            logger.debug(f"Recomputing {self._path}")
            return self.insert(factory())

        if self._value is _MISSING:
            match self._read():
                case Err() as e:
                    return e
                case Ok(value) if value is _MISSING:
                    raise CacheInvariantError(self._path)
                case Ok(value):
                    self._value = value

        return Ok(self._value)

    def insert(self, value: T) -> Result[T, WriteError]:
        """Write value to the backing file, then keep it in memory."""
        match self._serializer.encode(value):
            case Err(reason):
                return Err(FileEncodeError(self._path, reason))
            case Ok(text):
                pass

        match file.write(self._path, text, exclusive=self._exclusive):
            case Err() as e:
                return e
            case Ok(_):
                pass

        self._value = value
        self._invalidated = False
        return Ok(value)

    def delete(self) -> Result[T | None, FileWriteError]:
        """Remove the backing file and drop the in-memory value.

        Returns the dropped value, if any.
        """
        match file.delete(self._path):
            case Err() as e:
                return e
            case Ok(_):
                pass
        dropped = self.peek()
        self._value = _MISSING
        return Ok(dropped)

    def _read(self) -> Result[T | _Missing, ReadError]:
        match file.read(self._path):
            case Err() as e:
                return e
            case Ok(None):
                return Ok(_MISSING)
            case Ok(data):
                pass

        match self._serializer.decode(data):
            case Err(reason):
                logger.warning(f"Cannot decode {self._path}: {reason}")
                return Err(FileDecodeError(self._path, reason))
            case Ok(value):
                return Ok(value)

    def __repr__(self) -> str:
        loaded = self._value is not _MISSING
        return (
            f"{type(self).__name__}(path={str(self._path)!r}, "
            f"staleness_threshold={self._threshold!r}, loaded={loaded})"
        )
