"""filecached - a single typed value cached in a JSON file."""

from filecached.lib.codec import JsonSerializer, Serializer
from filecached.lib.errors import (
    CacheError,
    CacheInvariantError,
    DataDirError,
    FileConflictError,
    FileDecodeError,
    FileEncodeError,
    FileReadError,
    FileWriteError,
    ReadError,
    WriteError,
)
from filecached.lib.result import Err, Ok, Result
from filecached.value import CachedFileValue

__version__ = "0.1.0"

__all__ = [
    "CacheError",
    "CacheInvariantError",
    "CachedFileValue",
    "DataDirError",
    "Err",
    "FileConflictError",
    "FileDecodeError",
    "FileEncodeError",
    "FileReadError",
    "FileWriteError",
    "JsonSerializer",
    "Ok",
    "ReadError",
    "Result",
    "Serializer",
    "WriteError",
    "__version__",
]
