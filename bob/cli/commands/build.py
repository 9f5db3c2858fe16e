"""Build command - run the build script for the latest version."""

from __future__ import annotations

from pathlib import Path

import typer

from bob.cli.commands._helpers import PROJECT_DIR_HELP, VERBOSE_HELP, run_script
from bob.cli.context import build_context


def build(
    verbose: bool = typer.Option(False, "--verbose", "-v", help=VERBOSE_HELP),
    project_dir: Path | None = typer.Option(
        None, "--project-dir", "-C", help=PROJECT_DIR_HELP, show_default=False
    ),
) -> None:
    """Build the project at the latest changelog version."""
    ctx = build_context(project_dir)
    run_script(ctx, release=False, verbose=verbose)
