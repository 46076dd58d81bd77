"""JSON serialization for cached values.

The backing file holds exactly one JSON document encoding the value.
No envelope, no header.
"""

from __future__ import annotations

import json
import types
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import PurePath
from typing import Any, Generic, Protocol, TypeVar, Union, get_args, get_origin, get_type_hints

from filecached.lib.result import Err, Ok, Result

T = TypeVar("T")

DEFAULT_INDENT = 2


class Serializer(Protocol[T]):
    """Converts values to text and back. Errors are reported as reason strings."""

    def encode(self, value: T) -> Result[str, str]: ...

    def decode(self, data: str | bytes) -> Result[T, str]: ...


class JsonSerializer(Generic[T]):
    """JSON serializer that rebuilds typed values on decode.

    With value_type=None, decode returns whatever json.loads produces.
    """

    def __init__(self, value_type: Any = None, indent: int | None = DEFAULT_INDENT) -> None:
        self.value_type = value_type
        self.indent = indent

    def encode(self, value: T) -> Result[str, str]:
        try:
            return Ok(json.dumps(_to_plain(value), indent=self.indent))
        except RecursionError:
            return Err("Value is nested too deeply or contains a cycle")
        except (TypeError, ValueError) as e:
            return Err(str(e))

    def decode(self, data: str | bytes) -> Result[T, str]:
        try:
            raw = json.loads(data)
        except RecursionError:
            return Err("Invalid JSON: nested too deeply")
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            return Err(f"Invalid JSON: {e}")
        if self.value_type is None:
            return Ok(raw)
        try:
            return Ok(_from_plain(self.value_type, raw))
        except RecursionError:
            return Err(f"Does not match {_type_name(self.value_type)}: nested too deeply")
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            return Err(f"Does not match {_type_name(self.value_type)}: {e}")

    def __repr__(self) -> str:
        return f"JsonSerializer({_type_name(self.value_type)})"


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _to_plain(value: Any) -> Any:
    """Reduce value to JSON-native types."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return _to_plain(value.value)
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, dict):
        return {_key(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [_to_plain(v) for v in sorted(value, key=repr)]
    return value


def _key(key: Any) -> Any:
    if isinstance(key, Enum):
        return key.value
    return key


def _json_key(value: Any) -> str:
    """The string json.dumps writes for a scalar dict key."""
    return value if isinstance(value, str) else json.dumps(value)


def _parse_key(key_type: Any, key: str) -> Any:
    # JSON object keys are always strings
    if key_type is bool:
        if key not in ("true", "false"):
            raise ValueError(f"expected bool key, got {key!r}")
        return key == "true"
    if key_type in (int, float):
        return key_type(key)
    if isinstance(key_type, type) and issubclass(key_type, Enum):
        for member in key_type:
            if _json_key(member.value) == key:
                return member
        raise ValueError(f"{key!r} is not a valid {key_type.__name__} key")
    return _from_plain(key_type, key)


def _check(expected: type, data: Any) -> Any:
    # bool is an int subclass; JSON true must not satisfy int and vice versa
    if expected is bool:
        ok = isinstance(data, bool)
    elif expected is float:
        ok = isinstance(data, (int, float)) and not isinstance(data, bool)
        data = float(data) if ok else data
    else:
        ok = isinstance(data, expected) and not isinstance(data, bool)
    if not ok:
        raise ValueError(f"expected {expected.__name__}, got {type(data).__name__} {data!r}")
    return data


def _from_plain(cls: Any, data: Any) -> Any:
    """Reconstruct a typed value from decoded JSON.

    Handles dataclasses, Enum, Optional/unions, list, set, tuple, dict and
    primitive types.
    """
    if cls is Any:
        return data

    origin = get_origin(cls)

    if cls is None or cls is type(None):
        if data is not None:
            raise ValueError(f"expected null, got {data!r}")
        return None

    # X | Y and Optional[X]: first member that accepts the data wins
    if origin is types.UnionType or origin is Union:
        args = get_args(cls)
        if data is None and type(None) in args:
            return None
        errors = []
        for arg in args:
            if arg is type(None):
                continue
            try:
                return _from_plain(arg, data)
            except (TypeError, ValueError, KeyError, AttributeError) as e:
                errors.append(str(e))
        raise ValueError("; ".join(errors) or f"no union member accepts {data!r}")

    if isinstance(cls, type) and issubclass(cls, Enum):
        return cls(data)

    if is_dataclass(cls):
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} expects an object, got {type(data).__name__}")
        hints = get_type_hints(cls)
        kwargs = {}
        for f in fields(cls):
            if f.name in data:
                kwargs[f.name] = _from_plain(hints[f.name], data[f.name])
        return cls(**kwargs)

    if origin is dict or cls is dict:
        if not isinstance(data, dict):
            raise TypeError(f"expected object, got {type(data).__name__}")
        args = get_args(cls)
        if not args:
            return dict(data)
        key_type, val_type = args
        return {_parse_key(key_type, k): _from_plain(val_type, v) for k, v in data.items()}

    if origin in (list, set, frozenset) or cls in (list, set, frozenset):
        if not isinstance(data, list):
            raise TypeError(f"expected array, got {type(data).__name__}")
        args = get_args(cls)
        items = [_from_plain(args[0], v) for v in data] if args else list(data)
        container = origin or cls
        return container(items)

    if origin is tuple or cls is tuple:
        if not isinstance(data, list):
            raise TypeError(f"expected array, got {type(data).__name__}")
        tuple_args = get_args(cls)
        if not tuple_args:
            return tuple(data)
        if len(tuple_args) == 2 and tuple_args[1] is ...:
            return tuple(_from_plain(tuple_args[0], v) for v in data)
        if len(tuple_args) != len(data):
            raise ValueError(f"expected {len(tuple_args)} items, got {len(data)}")
        return tuple(_from_plain(t, v) for t, v in zip(tuple_args, data))

    if cls in (int, float, str, bool):
        return _check(cls, data)

    if isinstance(cls, type) and issubclass(cls, PurePath):
        return cls(_check(str, data))

    return data
