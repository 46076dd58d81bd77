"""Result type for cache operations.

Every fallible cache operation returns one of these instead of raising:

    match cache.get():
        case Ok(None):
            # nothing stored yet
        case Ok(value):
            # use value
        case Err(error):
            # FileReadError / FileDecodeError
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class UnwrapError(ValueError):
    """Raised when a Result is unwrapped as the wrong variant."""


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success case containing a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Error case containing an error."""

    error: E


type Result[T, E] = Ok[T] | Err[E]


def is_ok(result: Result[T, E]) -> bool:
    return isinstance(result, Ok)


def is_err(result: Result[T, E]) -> bool:
    return isinstance(result, Err)


def map_ok(result: Result[T, E], f: Callable[[T], U]) -> Result[U, E]:
    """Apply f to the value if Ok, otherwise pass the Err through."""
    match result:
        case Ok(value):
            return Ok(f(value))
        case Err() as e:
            return e


def map_err(result: Result[T, E], f: Callable[[E], F]) -> Result[T, F]:
    """Apply f to the error if Err, otherwise pass the Ok through."""
    match result:
        case Ok() as o:
            return o
        case Err(error):
            return Err(f(error))


def expect(result: Result[T, E], message: str) -> T:
    """Extract the value from Ok, or raise UnwrapError with message."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise UnwrapError(f"{message}: {error}")


def unwrap(result: Result[T, E]) -> T:
    """Extract the value from Ok, or raise UnwrapError.

    Intended for tests and scripts; library code should match instead.
    """
    return expect(result, "Called unwrap on Err")


def unwrap_or(result: Result[T, E], default: T) -> T:
    match result:
        case Ok(value):
            return value
        case Err():
            return default


def unwrap_or_else(result: Result[T, E], f: Callable[[E], T]) -> T:
    """Extract the value from Ok, or compute one from the error."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            return f(error)


def unwrap_err(result: Result[T, E]) -> E:
    """Extract the error from Err, or raise UnwrapError if Ok."""
    match result:
        case Ok(value):
            raise UnwrapError(f"Called unwrap_err on Ok: {value}")
        case Err(error):
            return error
