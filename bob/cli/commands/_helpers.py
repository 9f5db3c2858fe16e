"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from bob.core.result import Err
from bob.output.errors import print_release_failure, release_failure_exit_code
from bob.services.release import ReleaseOrchestrator

if TYPE_CHECKING:
    from bob.cli.context import CLIContext


VERBOSE_HELP = "Print the full output while the script runs"
PROJECT_DIR_HELP = "Project directory (defaults to the current directory)"


def run_script(ctx: CLIContext, *, release: bool, verbose: bool) -> None:
    """Run the build or release script for the latest changelog version.

    Exits with the failure's exit code on any error; prints `OK :)` on success.
    """
    orchestrator = ReleaseOrchestrator(console=ctx.console, config=ctx.config, verbose=verbose)
    result = orchestrator.execute(
        script=ctx.config.script_path(ctx.project_dir, release=release),
        project_name=ctx.project_name,
        cwd=ctx.project_dir,
        create_tag=release,
    )

    if isinstance(result, Err):
        print_release_failure(result.error, ctx.console)
        raise typer.Exit(code=release_failure_exit_code(result.error))

    ctx.console.success("OK :)")
