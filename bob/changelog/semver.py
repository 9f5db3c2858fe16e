from __future__ import annotations

import re
from dataclasses import dataclass

from bob.core.result import Err, Ok, Result

__all__ = ["SemVer", "SemVerError", "parse_semver"]


_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class SemVerError:
    text: str
    reason: str

    def __str__(self) -> str:
        return f"invalid semantic version '{self.text}': {self.reason}"


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # Numeric identifiers sort numerically and below alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@dataclass(frozen=True, slots=True)
class SemVer:
    """Semantic version (https://semver.org, 2.0.0).

    Equality is structural, build metadata included. Ordering follows
    SemVer precedence, which ignores build metadata.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def precedence_key(self) -> tuple[object, ...]:
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        ids = tuple(_identifier_key(i) for i in self.prerelease)
        return (self.major, self.minor, self.patch, 0, ids)

    def __lt__(self, other: SemVer) -> bool:
        return self.precedence_key() < other.precedence_key()

    def __le__(self, other: SemVer) -> bool:
        return self.precedence_key() <= other.precedence_key()

    def __gt__(self, other: SemVer) -> bool:
        return self.precedence_key() > other.precedence_key()

    def __ge__(self, other: SemVer) -> bool:
        return self.precedence_key() >= other.precedence_key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def parse_semver(text: str) -> Result[SemVer, SemVerError]:
    """Parse a strict SemVer string such as `2.0.0-a10` or `1.4.0+build.7`."""
    candidate = text.strip()
    if not candidate:
        return Err(SemVerError(text=text, reason="empty version"))

    m = _SEMVER_RE.match(candidate)
    if m is None:
        return Err(
            SemVerError(
                text=text,
                reason="expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]",
            )
        )

    prerelease = m.group("prerelease")
    build = m.group("build")
    return Ok(
        SemVer(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=tuple(build.split(".")) if build else (),
        )
    )
