"""Result type for explicit error handling.

Operations that can fail in expected ways (a malformed changelog, a script
that exits non-zero, a missing file) return a Result instead of raising.
Exceptions stay reserved for failures nobody anticipated.

Usage:
    match parse_changelog(text):
        case Ok(entries):
            print(f"{len(entries)} versions")
        case Err(error):
            print(f"Bad changelog: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

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
    """Failed result carrying an error payload."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
