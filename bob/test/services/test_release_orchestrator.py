from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from bob.changelog.errors import ChangelogFormatError
from bob.core.config import Config, ProcessConfig, ScriptsConfig, VcsConfig
from bob.core.result import Err, Ok
from bob.output.console import MockConsole, Style
from bob.platform.process import ExecutionError
from bob.services import release as release_mod
from bob.services.errors import OrchestrationError, UnhandledError
from bob.services.release import ReleaseOrchestrator

ScriptWriter = Callable[[Path, str], Path]

pytestmark = pytest.mark.skipif(os.name == "nt", reason="needs executable scripts with a shebang")


CHANGELOG = """# Widget

## 1.0.0

* First
* Second

## 1.1.0

* Third
"""

BUILD_OK = """import pathlib, sys
pathlib.Path("build_args.txt").write_text(" ".join(sys.argv[1:]), encoding="utf-8")
print("building " + " ".join(sys.argv[1:]))
print("warning: nothing to restore", file=sys.stderr)
"""

BUILD_FAIL = """import sys
print("compiling")
print("error CS1002: ; expected", file=sys.stderr)
sys.exit(3)
"""

FAKE_GIT = """import pathlib, sys
with pathlib.Path("git_calls.txt").open("a", encoding="utf-8") as f:
    f.write(" ".join(sys.argv[1:]) + "\\n")
if sys.argv[1] == "tag":
    message = pathlib.Path(sys.argv[sys.argv.index("-F") + 1]).read_text(encoding="utf-8")
    pathlib.Path("tag_message.txt").write_text(message, encoding="utf-8")
if sys.argv[1] == {fail!r}:
    print("fatal: could not read from remote repository", file=sys.stderr)
    sys.exit(128)
"""


def _project(
    tmp_path: Path,
    write_script: ScriptWriter,
    *,
    build: str = BUILD_OK,
    git_fail: str = "none",
    changelog: str | None = CHANGELOG,
) -> tuple[Path, Config]:
    project = tmp_path / "Widget"
    project.mkdir()
    if changelog is not None:
        (project / "CHANGELOG.md").write_text(changelog, encoding="utf-8")
    write_script(project / "scripts" / "build.py", build)
    write_script(project / "scripts" / "release.py", build)
    git = write_script(tmp_path / "fake-git", FAKE_GIT.format(fail=git_fail))

    config = Config(
        scripts=ScriptsConfig(build="build.py", release="release.py"),
        process=ProcessConfig(timeout_seconds=30.0, drain_interval_seconds=0.05),
        vcs=VcsConfig(executable=str(git)),
    )
    return project, config


def _git_calls(project: Path) -> list[str]:
    path = project / "git_calls.txt"
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()


def _execute(
    orchestrator: ReleaseOrchestrator,
    project: Path,
    config: Config,
    *,
    create_tag: bool,
):
    return orchestrator.execute(
        script=config.script_path(project, release=create_tag),
        project_name="Widget",
        cwd=project,
        create_tag=create_tag,
    )


class TestBuild:
    def test_builds_latest_version(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        project, config = _project(tmp_path, write_script)
        console = MockConsole()
        orchestrator = ReleaseOrchestrator(console=console, config=config)

        result = _execute(orchestrator, project, config, create_tag=False)

        assert isinstance(result, Ok)
        summary = result.value
        assert str(summary.entry.version) == "1.1.0"
        assert summary.entry.bullets == ("Third",)
        assert summary.versions_found == 2
        assert summary.tagged is False
        assert (project / "build_args.txt").read_text(encoding="utf-8") == "Widget 1.1.0"
        assert _git_calls(project) == []

    def test_quiet_mode_shows_busy_indicator_only(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        project, config = _project(tmp_path, write_script)
        console = MockConsole()
        orchestrator = ReleaseOrchestrator(console=console, config=config)

        _execute(orchestrator, project, config, create_tag=False)

        script = config.script_path(project, release=False)
        assert console.messages == [f"EXEC> {script} Widget 1.1.0"]
        assert len(console.busy_messages) == 1
        assert not console.busy_active
        # Output is still captured.
        assert sorted(orchestrator.log) == ["building Widget 1.1.0", "warning: nothing to restore"]

    def test_verbose_mode_streams_output_without_indicator(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        project, config = _project(tmp_path, write_script)
        console = MockConsole()
        orchestrator = ReleaseOrchestrator(console=console, config=config, verbose=True)

        result = _execute(orchestrator, project, config, create_tag=False)

        assert isinstance(result, Ok)
        assert console.busy_messages == []
        assert f"Building 'Widget' in '{project}'" in console.messages
        assert "Found 2 versions" in console.messages
        assert console.find("===== 1.1.0 =====")
        dim = sorted(o.message for o in console.outputs if o.style == Style.DIM)
        assert dim == ["building Widget 1.1.0", "warning: nothing to restore"]

    def test_failing_script_returns_execution_error(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        project, config = _project(tmp_path, write_script, build=BUILD_FAIL)
        console = MockConsole()
        orchestrator = ReleaseOrchestrator(console=console, config=config)

        result = _execute(orchestrator, project, config, create_tag=True)

        assert isinstance(result, Err)
        error = result.error
        assert isinstance(error, ExecutionError)
        assert error.exit_code == 3
        assert error.command[1:] == ("Widget", "1.1.0")
        assert sorted(error.lines) == ["compiling", "error CS1002: ; expected"]
        assert not console.busy_active
        # No tag for a failed build.
        assert _git_calls(project) == []


class TestPreconditions:
    def test_missing_script(self, tmp_path: Path) -> None:
        project = tmp_path / "Widget"
        project.mkdir()
        (project / "CHANGELOG.md").write_text(CHANGELOG, encoding="utf-8")
        script = project / "scripts" / "build.sh"

        result = ReleaseOrchestrator(console=MockConsole()).execute(
            script=script, project_name="Widget", cwd=project, create_tag=False
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, OrchestrationError)
        assert result.error.kind == "script_missing"
        assert str(script) in result.error.message
        assert result.error.hint is not None
        assert "project name and a version" in result.error.hint

    def test_missing_changelog(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        project, config = _project(tmp_path, write_script, changelog=None)

        result = _execute(ReleaseOrchestrator(console=MockConsole(), config=config), project, config, create_tag=False)

        assert isinstance(result, Err)
        assert isinstance(result.error, OrchestrationError)
        assert result.error.kind == "changelog_missing"
        assert str(project / "CHANGELOG.md") in result.error.message
        assert result.error.hint is not None
        assert "## 1.0.4" in result.error.hint

    def test_malformed_changelog_is_returned_as_is(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        project, config = _project(tmp_path, write_script, changelog="## 1.0.0\n\nno bullets\n")

        result = _execute(ReleaseOrchestrator(console=MockConsole(), config=config), project, config, create_tag=False)

        assert isinstance(result, Err)
        assert isinstance(result.error, ChangelogFormatError)
        assert result.error.cause == "No bullets for version 1.0.0"
        assert not (project / "build_args.txt").exists()

    def test_changelog_without_versions(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        project, config = _project(tmp_path, write_script, changelog="##<!-- soon -->\n")

        result = _execute(ReleaseOrchestrator(console=MockConsole(), config=config), project, config, create_tag=False)

        assert isinstance(result, Err)
        assert isinstance(result.error, ChangelogFormatError)
        assert result.error.message == "no entries found"


class TestRelease:
    def test_tags_and_pushes_after_build(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        project, config = _project(tmp_path, write_script)
        console = MockConsole()

        result = _execute(ReleaseOrchestrator(console=console, config=config), project, config, create_tag=True)

        assert isinstance(result, Ok)
        assert result.value.tagged is True
        calls = _git_calls(project)
        assert len(calls) == 2
        assert calls[0].startswith("tag 1.1.0 -a -F ")
        assert calls[1] == "push --tags"
        assert (project / "tag_message.txt").read_text(encoding="utf-8") == "* Third"
        # Temp message file cleaned up.
        assert not Path(calls[0].split(" -F ", 1)[1]).exists()

    def test_push_failure_aborts(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        project, config = _project(tmp_path, write_script, git_fail="push")

        result = _execute(ReleaseOrchestrator(console=MockConsole(), config=config), project, config, create_tag=True)

        assert isinstance(result, Err)
        assert isinstance(result.error, ExecutionError)
        assert result.error.command[1:] == ("push", "--tags")
        assert result.error.exit_code == 128
        # The local tag stays.
        assert _git_calls(project)[0].startswith("tag 1.1.0")

    def test_verbose_reports_tag_message_file(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        project, config = _project(tmp_path, write_script)
        console = MockConsole()

        _execute(ReleaseOrchestrator(console=console, config=config, verbose=True), project, config, create_tag=True)

        assert console.find("Tag message written to ")


class TestUnhandledErrors:
    def test_unexpected_exception_is_wrapped_with_log(
        self,
        tmp_path: Path,
        write_script: ScriptWriter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        project, config = _project(tmp_path, write_script)

        def explode(**_: object) -> None:
            raise RuntimeError("disk full")

        monkeypatch.setattr(release_mod, "create_and_push_tag", explode)
        console = MockConsole()

        result = _execute(ReleaseOrchestrator(console=console, config=config), project, config, create_tag=True)

        assert isinstance(result, Err)
        assert isinstance(result.error, UnhandledError)
        assert result.error.error == "RuntimeError: disk full"
        assert "building Widget 1.1.0" in result.error.lines
        assert not console.busy_active


class TestRepeatedRuns:
    def test_each_run_starts_with_an_empty_log(
        self,
        tmp_path: Path,
        write_script: ScriptWriter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        project, config = _project(tmp_path, write_script)
        orchestrator = ReleaseOrchestrator(console=MockConsole(), config=config)

        first = _execute(orchestrator, project, config, create_tag=False)
        assert isinstance(first, Ok)
        assert "building Widget 1.1.0" in orchestrator.log

        def explode(_: str) -> None:
            raise RuntimeError("parser crashed")

        monkeypatch.setattr(release_mod, "parse_changelog", explode)

        second = _execute(orchestrator, project, config, create_tag=False)

        assert isinstance(second, Err)
        assert isinstance(second.error, UnhandledError)
        assert second.error.lines == ()
        assert orchestrator.log == ()

    def test_second_failure_carries_only_its_own_output(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        project, config = _project(tmp_path, write_script)
        orchestrator = ReleaseOrchestrator(console=MockConsole(), config=config)
        assert isinstance(_execute(orchestrator, project, config, create_tag=False), Ok)

        write_script(project / "scripts" / "build.py", BUILD_FAIL)
        result = _execute(orchestrator, project, config, create_tag=False)

        assert isinstance(result, Err)
        assert isinstance(result.error, ExecutionError)
        assert sorted(result.error.lines) == ["compiling", "error CS1002: ; expected"]
        assert sorted(orchestrator.log) == ["compiling", "error CS1002: ; expected"]
