"""Changelog parsing.

Expected layout (newest version at the bottom):

    # Changelog

    ## 1.0.4

    * Fix subtle bug
    * Fix another thing

    ## 1.1.0

    * Add some function

    ---

    [link-refs]: https://example.com

Everything before the first `##` is a title/header and is ignored. A `---`
after the first entry starts the footer, which is ignored too.
"""

from __future__ import annotations

from collections.abc import Sequence

from bob.changelog.errors import ChangelogFormatError
from bob.changelog.model import VersionEntry
from bob.changelog.semver import parse_semver
from bob.core.result import Err, Ok, Result

__all__ = ["ENTRY_MARKER", "FOOTER_MARKER", "latest_entry", "parse_changelog"]

ENTRY_MARKER = "##"
FOOTER_MARKER = "---"
BULLET_MARKER = "*"


def _trim_header_and_footer(text: str) -> str | None:
    first = text.find(ENTRY_MARKER)
    if first < 0:
        return None

    body = text[first:]
    footer = body.find(FOOTER_MARKER)
    if footer <= 0:
        return body
    return body[:footer]


def _parse_entry(block: str) -> Result[VersionEntry | None, ChangelogFormatError]:
    lines = [line for line in block.splitlines() if line.strip()]
    token = lines[0].strip()

    # HTML comments from the footer region (e.g. `<!-- links -->`).
    if token.startswith("<"):
        return Ok(None)

    version = parse_semver(token)
    if isinstance(version, Err):
        return Err(
            ChangelogFormatError(
                message="Invalid changelog entry format",
                block=block,
                cause=str(version.error),
            )
        )

    bullets: list[str] = []
    for line in lines[1:]:
        text = line.strip()
        if not text.startswith(BULLET_MARKER):
            continue
        bullet = text[len(BULLET_MARKER) :].strip()
        if bullet:
            bullets.append(bullet)

    if not bullets:
        return Err(
            ChangelogFormatError(
                message="Invalid changelog entry format",
                block=block,
                cause=f"No bullets for version {token}",
            )
        )

    return Ok(VersionEntry(version=version.value, bullets=tuple(bullets)))


def parse_changelog(text: str) -> Result[tuple[VersionEntry, ...], ChangelogFormatError]:
    """Parse changelog text into entries, in document order.

    Returns:
        Ok(entries) on success. Err(ChangelogFormatError) if no `##` marker
        exists, a version token is not valid SemVer, or an entry has no
        `*` bullets. One bad entry fails the whole parse.
    """
    body = _trim_header_and_footer(text)
    if body is None:
        return Err(ChangelogFormatError(message="no entries found"))

    entries: list[VersionEntry] = []
    for block in body.split(ENTRY_MARKER):
        if not block.strip():
            continue
        parsed = _parse_entry(block)
        if isinstance(parsed, Err):
            return parsed
        if parsed.value is not None:
            entries.append(parsed.value)

    return Ok(tuple(entries))


def latest_entry(entries: Sequence[VersionEntry]) -> VersionEntry | None:
    """Return the entry to build: the last one in file order.

    Changelogs are authored newest-at-bottom, so position decides, not
    SemVer precedence. The two differ if entries are ever reordered.
    """
    if not entries:
        return None
    return entries[-1]
