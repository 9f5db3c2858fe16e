from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from bob.changelog.errors import ChangelogFormatError
from bob.platform.process import ExecutionError

OrchestrationErrorKind = Literal[
    "script_missing",
    "changelog_missing",
    "changelog_unreadable",
]


@dataclass(frozen=True, slots=True)
class OrchestrationError:
    """A precondition for running the build is not met."""

    kind: OrchestrationErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class UnhandledError:
    """An unexpected exception, with all output captured before it."""

    error: str
    lines: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return f"Unhandled error: {self.error}"


ReleaseFailure = ChangelogFormatError | ExecutionError | OrchestrationError | UnhandledError
