"""Console output abstraction.

Services talk to a ConsoleProtocol rather than to Rich directly. The
production backend is RichConsole; tests use MockConsole to assert on what
would have been printed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    DIM = auto()  # captured process output, hints
    BOLD = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Styled line output plus a busy indicator."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def newline(self) -> None: ...

    def busy(self, message: str) -> AbstractContextManager[None]:
        """Show an indeterminate progress indicator while the block runs.

        The indicator is removed when the block exits, including on errors.
        """
        ...


class RichConsole:
    """Console implementation using Rich library."""

    def __init__(self) -> None:
        from rich.console import Console

        # highlight=False keeps build logs free of accidental syntax colouring
        self._console = Console(highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.DIM: "dim",
            Style.BOLD: "bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        # Process output may contain brackets that look like Rich markup.
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]{_escape(message)}[/green]")

    def error(self, message: str) -> None:
        self._console.print(f"[red bold]error:[/red bold] {_escape(message)}")

    def newline(self) -> None:
        self._console.print()

    def busy(self, message: str) -> AbstractContextManager[None]:
        return self._status(message)

    @contextmanager
    def _status(self, message: str) -> Iterator[None]:
        with self._console.status(_escape(message), spinner="dots"):
            yield


def _escape(text: str) -> str:
    from rich.markup import escape

    return escape(text)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


def _empty_busy() -> list[str]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    busy_messages: list[str] = field(default_factory=_empty_busy)
    busy_active: bool = False

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    def busy(self, message: str) -> AbstractContextManager[None]:
        return self._busy(message)

    @contextmanager
    def _busy(self, message: str) -> Iterator[None]:
        self.busy_messages.append(message)
        self.busy_active = True
        try:
            yield
        finally:
            self.busy_active = False

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()
        self.busy_messages.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
