"""Outcome type for registry invocations.

``ToolRegistry.invoke`` never raises: it returns ``Ok(value)`` with the tool's
JSON result or ``Err(ErrorInfo)``. Both variants are frozen dataclasses, so
callers can branch with ``is_ok()`` or with structural pattern matching::

    match registry.invoke("list_dir", {"path": "."}):
        case Ok(value): ...
        case Err(error): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True, repr=False)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise RuntimeError(f"unwrap_err() on {self!r}")

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def ok(self) -> T:
        return self.value

    def err(self) -> None:
        return None

    def match(self, *, ok: Callable[[T], U], err: Callable[[object], U]) -> U:
        return ok(self.value)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True, repr=False)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise RuntimeError(f"unwrap() on {self!r}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[object], object]) -> Err[E]:
        return self

    def ok(self) -> None:
        return None

    def err(self) -> E:
        return self.error

    def match(self, *, ok: Callable[[object], U], err: Callable[[E], U]) -> U:
        return err(self.error)

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
