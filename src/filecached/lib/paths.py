"""Per-user data directory lookup and filename sanitization."""

import os
import re
import sys
from pathlib import Path

from filecached.lib.errors import DataDirError

APP_NAME = "filecached"

# Characters illegal in Windows filenames, plus ASCII control characters.
_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')

_WINDOWS_RESERVED = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)

MAX_FILENAME_BYTES = 255


def sanitize_filename(name: str) -> str:
    """Make name safe to use as a single path component.

    Raises ValueError if nothing usable is left.
    """
    cleaned = _ILLEGAL_CHARS.sub("", name).strip(". ")
    if not cleaned:
        raise ValueError(f"Invalid cache name: {name!r}")

    stem = cleaned.split(".")[0]
    if stem.upper() in _WINDOWS_RESERVED:
        cleaned = f"_{cleaned}"

    encoded = cleaned.encode("utf-8")
    if len(encoded) > MAX_FILENAME_BYTES:
        cleaned = encoded[:MAX_FILENAME_BYTES].decode("utf-8", errors="ignore").rstrip(". ")
    return cleaned


def _home() -> Path:
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise DataDirError(f"Cannot determine home directory: {e}") from e


def data_dir(app_name: str = APP_NAME) -> Path:
    """~/.local/share/<app_name>/ or the platform equivalent."""
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        root = Path(base) if base else _home() / "AppData" / "Local"
    elif sys.platform == "darwin":
        root = _home() / "Library" / "Application Support"
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        # Relative XDG_DATA_HOME values are invalid and ignored
        root = Path(xdg) if xdg and os.path.isabs(xdg) else _home() / ".local" / "share"
    return root / app_name


def resolve(name: str, base_dir: Path | str | None = None, app_name: str = APP_NAME) -> Path:
    """Backing file path for name under base_dir, or under data_dir()."""
    base = Path(base_dir) if base_dir is not None else data_dir(app_name)
    return base / sanitize_filename(name)
