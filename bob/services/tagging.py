from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from bob.changelog.model import VersionEntry
from bob.core.result import Err, Ok, Result
from bob.platform.process import ExecutionError, ProcessSupervisor

__all__ = ["create_and_push_tag", "tag_message", "tag_message_file"]


def tag_message(entry: VersionEntry) -> str:
    """Annotation for the release tag: one `* bullet` per line."""
    return "\n".join(f"* {bullet}" for bullet in entry.bullets)


@contextmanager
def tag_message_file(
    entry: VersionEntry,
    report: Callable[[str], None] | None = None,
) -> Iterator[Path]:
    """Write the tag message to a temp file that is removed on exit.

    A file that cannot be removed is left behind and passed to `report`.
    """
    fd, raw_path = tempfile.mkstemp(prefix="bob_tag_", suffix=".txt")
    os.close(fd)
    path = Path(raw_path)
    try:
        path.write_text(tag_message(entry), encoding="utf-8")
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            if report is not None:
                report(f"Could not remove tag message file {path}: {e}")


def create_and_push_tag(
    *,
    supervisor: ProcessSupervisor,
    entry: VersionEntry,
    cwd: Path,
    git: str = "git",
    report: Callable[[str], None] | None = None,
) -> Result[None, ExecutionError]:
    """Create an annotated tag named after the version, then push tags.

    The push only runs if the tag was created. A failed push leaves the local
    tag in place.
    """
    with tag_message_file(entry, report) as message_path:
        if report is not None:
            report(f"Tag message written to {message_path}")
        tagged = supervisor.run(
            git,
            ["tag", str(entry.version), "-a", "-F", str(message_path)],
            cwd=cwd,
        )
    if isinstance(tagged, Err):
        return tagged

    pushed = supervisor.run(git, ["push", "--tags"], cwd=cwd)
    if isinstance(pushed, Err):
        return pushed

    return Ok(None)
