from __future__ import annotations

from dataclasses import dataclass

from bob.changelog.semver import SemVer


@dataclass(frozen=True, slots=True)
class VersionEntry:
    """One changelog section: a version and the changes it lists.

    `bullets` is never empty; the parser rejects sections without any.
    """

    version: SemVer
    bullets: tuple[str, ...]

    def render(self) -> str:
        lines = [f"===== {self.version} ====="]
        lines.extend(f" * {bullet}" for bullet in self.bullets)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
