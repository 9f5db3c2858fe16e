from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from bob.core.config import Config, load_project_config
from bob.core.errors import ErrorCode
from bob.core.result import Err
from bob.output.console import ConsoleProtocol, RichConsole
from bob.output.errors import print_config_error


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_dir: Path
    config: Config
    console: ConsoleProtocol

    @property
    def project_name(self) -> str:
        return self.config.project_name(self.project_dir)


def build_context(project_dir: Path | None = None) -> CLIContext:
    console = RichConsole()

    try:
        root = (project_dir or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --project-dir: {e}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        console.error(f"project directory not found: {root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_project_config(root)
    if isinstance(config_result, Err):
        print_config_error(config_result.error, console)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(project_dir=root, config=config_result.value, console=console)
