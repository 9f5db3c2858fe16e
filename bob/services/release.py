"""Build/release orchestration.

Reads the project's changelog, picks the latest version, runs the build or
release script with `<project> <version>`, and optionally tags and pushes.
Every step runs once, in order, and the first failure ends the run.
"""

from __future__ import annotations

from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from pathlib import Path

from bob.changelog.errors import ChangelogFormatError
from bob.changelog.model import VersionEntry
from bob.changelog.parser import latest_entry, parse_changelog
from bob.core.config import Config
from bob.core.result import Err, Ok, Result
from bob.output.console import ConsoleProtocol, Style
from bob.platform.process import ProcessSupervisor
from bob.services.errors import OrchestrationError, ReleaseFailure, UnhandledError
from bob.services.tagging import create_and_push_tag

__all__ = ["ReleaseOrchestrator", "ReleaseSummary"]

_SCRIPT_HINT = (
    "Please create the script at the path shown above, and make it so that\n"
    "it correctly accepts a project name and a version as its arguments."
)

_CHANGELOG_HINT = """Please create a changelog at the path shown above, and use a format where
versions are added like this:

    ## <version>

    * changelog line 1
    * changelog line 2

e.g. like this:

    ## 1.0.4

    * Fix subtle bug
    * Fix another thing

    ## 1.1.0

    * Add some function

etc."""


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    entry: VersionEntry
    versions_found: int
    tagged: bool


class ReleaseOrchestrator:
    """Runs one build or release for one project.

    In verbose mode process output is streamed to the console as it arrives
    and progress messages are printed; otherwise a busy indicator is shown
    while external commands run. Output is captured either way and attached
    to any failure.
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        config: Config | None = None,
        verbose: bool = False,
    ) -> None:
        self._console = console
        self._config = config or Config()
        self._verbose = verbose
        self._log: list[str] = []
        self._supervisor = ProcessSupervisor(
            timeout=self._config.process.timeout_seconds,
            interval=self._config.process.drain_interval_seconds,
            on_line=self._on_line,
        )

    @property
    def log(self) -> tuple[str, ...]:
        """Process output captured by the current or most recent run."""
        return tuple(self._log)

    def execute(
        self,
        *,
        script: Path,
        project_name: str,
        cwd: Path,
        create_tag: bool,
    ) -> Result[ReleaseSummary, ReleaseFailure]:
        self._log = []
        try:
            return self._execute(
                script=script,
                project_name=project_name,
                cwd=cwd,
                create_tag=create_tag,
            )
        except Exception as e:
            return Err(UnhandledError(error=f"{type(e).__name__}: {e}", lines=self.log))

    def _execute(
        self,
        *,
        script: Path,
        project_name: str,
        cwd: Path,
        create_tag: bool,
    ) -> Result[ReleaseSummary, ReleaseFailure]:
        if not script.is_file():
            return Err(
                OrchestrationError(
                    kind="script_missing",
                    message=f"Could not find script: '{script}'",
                    hint=_SCRIPT_HINT,
                )
            )

        self._say(f"Building '{project_name}' in '{cwd}'")

        text = self._read_changelog(self._config.changelog_path(cwd))
        if isinstance(text, Err):
            return text

        parsed = parse_changelog(text.value)
        if isinstance(parsed, Err):
            return parsed
        entries = parsed.value

        self._say(f"Found {len(entries)} versions")

        entry = latest_entry(entries)
        if entry is None:
            return Err(ChangelogFormatError(message="no entries found"))

        self._say(f"Building version:\n\n{entry.render()}\n")

        args = [project_name, str(entry.version)]
        self._console.print(f"EXEC> {script} {' '.join(args)}")

        with self._progress(f"Running {script.name} {entry.version}"):
            built = self._supervisor.run(script, args, cwd=cwd)
            if isinstance(built, Err):
                return built

            if create_tag:
                pushed = create_and_push_tag(
                    supervisor=self._supervisor,
                    entry=entry,
                    cwd=cwd,
                    git=self._config.vcs.executable,
                    report=self._say,
                )
                if isinstance(pushed, Err):
                    return pushed

        return Ok(ReleaseSummary(entry=entry, versions_found=len(entries), tagged=create_tag))

    def _read_changelog(self, path: Path) -> Result[str, OrchestrationError]:
        try:
            return Ok(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Err(
                OrchestrationError(
                    kind="changelog_missing",
                    message=f"Could not find changelog '{path}'.",
                    hint=_CHANGELOG_HINT,
                )
            )
        except (OSError, UnicodeDecodeError) as e:
            return Err(
                OrchestrationError(
                    kind="changelog_unreadable",
                    message=f"Could not read changelog '{path}': {e}",
                )
            )

    def _progress(self, message: str) -> AbstractContextManager[None]:
        # Live output and the spinner would fight over the terminal.
        if self._verbose:
            return nullcontext()
        return self._console.busy(message)

    def _on_line(self, line: str) -> None:
        self._log.append(line)
        if self._verbose:
            self._console.print(line, Style.DIM)

    def _say(self, message: str) -> None:
        if self._verbose:
            self._console.print(message)
