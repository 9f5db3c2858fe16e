from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChangelogFormatError:
    """Changelog text that does not follow the `## <version>` + `* bullet` layout.

    `block` holds the offending entry text when a single entry is at fault;
    `cause` holds the lower-level reason (e.g. a version parse error).
    """

    message: str
    block: str | None = None
    cause: str | None = None

    def pretty(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"cause: {self.cause}")
        if self.block is not None:
            parts.append(f"<entry>\n{self.block.strip()}\n</entry>")
        return "\n".join(parts)
