"""Release command - run the release script, then tag and push."""

from __future__ import annotations

from pathlib import Path

import typer

from bob.cli.commands._helpers import PROJECT_DIR_HELP, VERBOSE_HELP, run_script
from bob.cli.context import build_context


def release(
    verbose: bool = typer.Option(False, "--verbose", "-v", help=VERBOSE_HELP),
    project_dir: Path | None = typer.Option(
        None, "--project-dir", "-C", help=PROJECT_DIR_HELP, show_default=False
    ),
) -> None:
    """Release the latest changelog version and push an annotated tag."""
    ctx = build_context(project_dir)
    run_script(ctx, release=True, verbose=verbose)
