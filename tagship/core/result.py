"""Result type for explicit error handling.

Release steps report expected failures as values instead of raising, so the
pipeline can decide per stage whether a failure aborts the run or only one
platform branch.

Usage:
    match resolve_version("refs/tags/v1.2.3"):
        case Ok(version):
            console.info(f"version {version}")
        case Err(error):
            print_release_error(error, console)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying a value."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result carrying an error value."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Union[Ok[T], Err[E]]
