"""Error presentation utilities.

Centralized failure formatting and exit code mapping for the build and
release commands.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from bob.changelog.errors import ChangelogFormatError
from bob.core.config import ConfigError
from bob.core.errors import ErrorCode
from bob.output.console import Style
from bob.platform.process import ExecutionError
from bob.services.errors import OrchestrationError, ReleaseFailure, UnhandledError

if TYPE_CHECKING:
    from bob.output.console import ConsoleProtocol

__all__ = [
    "print_config_error",
    "print_release_failure",
    "release_failure_exit_code",
]


def _print_log(lines: Sequence[str], console: ConsoleProtocol) -> None:
    if not lines:
        return
    console.newline()
    console.print("Log:", Style.BOLD)
    console.newline()
    for line in lines:
        console.print(line, Style.DIM)


def print_release_failure(failure: ReleaseFailure, console: ConsoleProtocol) -> None:
    """Print a release failure, including captured output where there is any."""
    match failure:
        case OrchestrationError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(hint, Style.DIM)
        case ChangelogFormatError():
            console.error(failure.pretty())
        case ExecutionError(lines=lines):
            console.error(str(failure))
            _print_log(lines, console)
        case UnhandledError(lines=lines):
            console.error(failure.message)
            _print_log(lines, console)


def release_failure_exit_code(failure: ReleaseFailure) -> int:
    match failure:
        case ChangelogFormatError():
            return int(ErrorCode.USER_ERROR)
        case OrchestrationError():
            return int(ErrorCode.ENV_ERROR)
        case ExecutionError():
            return int(ErrorCode.BUILD_ERROR)
        case UnhandledError():
            return int(ErrorCode.INTERNAL_ERROR)
    return int(ErrorCode.INTERNAL_ERROR)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.path is not None:
        console.print(f"config: {error.path}", Style.DIM)
