"""Error codes for CLI exit status.

Every failure path of the `build` and `release` commands ends in one of
these codes, so scripts wrapping bob can tell a broken changelog from a
failing build.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (malformed changelog, bad arguments)
    - 2: Environment error (missing script, missing changelog, bad bob.toml)
    - 3: Build error (script, tag or push failed or timed out)
    - 6: Internal error (unexpected failure, log attached)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    INTERNAL_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
