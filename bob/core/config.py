"""Typed configuration loading.

A project may carry an optional `bob.toml` next to its changelog. Every
setting has a default, so a project without the file works out of the box.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CHANGELOG",
    "DEFAULT_DRAIN_INTERVAL_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "Config",
    "ConfigError",
    "ProcessConfig",
    "ProjectConfig",
    "ScriptsConfig",
    "VcsConfig",
    "default_script_name",
    "load_config",
    "load_project_config",
]

CONFIG_FILENAME = "bob.toml"
DEFAULT_CHANGELOG = "CHANGELOG.md"
DEFAULT_TIMEOUT_SECONDS = 5 * 60.0
DEFAULT_DRAIN_INTERVAL_SECONDS = 1.0


def default_script_name(stem: str) -> str:
    """Platform-appropriate script file name (`build.cmd` or `build.sh`)."""
    suffix = "cmd" if os.name == "nt" else "sh"
    return f"{stem}.{suffix}"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when bob.toml cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Project identity. `name` falls back to the directory name."""

    name: str | None = None
    changelog: str = DEFAULT_CHANGELOG


@dataclass(frozen=True, slots=True)
class ScriptsConfig:
    """Script locations relative to the project directory."""

    dir: str = "scripts"
    build: str = field(default_factory=lambda: default_script_name("build"))
    release: str = field(default_factory=lambda: default_script_name("release"))


@dataclass(frozen=True, slots=True)
class ProcessConfig:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    drain_interval_seconds: float = DEFAULT_DRAIN_INTERVAL_SECONDS


@dataclass(frozen=True, slots=True)
class VcsConfig:
    executable: str = "git"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    scripts: ScriptsConfig = field(default_factory=ScriptsConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    vcs: VcsConfig = field(default_factory=VcsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a timeout or interval is not positive.
        """
        project: StrDict = get_table(data, "project") or {}
        scripts: StrDict = get_table(data, "scripts") or {}
        process: StrDict = get_table(data, "process") or {}
        vcs: StrDict = get_table(data, "vcs") or {}

        timeout = get_number(process, "timeout_seconds")
        interval = get_number(process, "drain_interval_seconds")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"process.timeout_seconds must be positive, got {timeout}")
        if interval is not None and interval <= 0:
            raise ValueError(f"process.drain_interval_seconds must be positive, got {interval}")

        return cls(
            project=ProjectConfig(
                name=get_str(project, "name"),
                changelog=get_str(project, "changelog") or DEFAULT_CHANGELOG,
            ),
            scripts=ScriptsConfig(
                dir=get_str(scripts, "dir") or "scripts",
                build=get_str(scripts, "build") or default_script_name("build"),
                release=get_str(scripts, "release") or default_script_name("release"),
            ),
            process=ProcessConfig(
                timeout_seconds=timeout or DEFAULT_TIMEOUT_SECONDS,
                drain_interval_seconds=interval or DEFAULT_DRAIN_INTERVAL_SECONDS,
            ),
            vcs=VcsConfig(executable=get_str(vcs, "executable") or "git"),
        )

    def script_path(self, project_dir: Path, *, release: bool) -> Path:
        name = self.scripts.release if release else self.scripts.build
        return project_dir / self.scripts.dir / name

    def changelog_path(self, project_dir: Path) -> Path:
        return project_dir / self.project.changelog

    def project_name(self, project_dir: Path) -> str:
        return self.project.name or project_dir.resolve().name


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to bob.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_project_config(project_dir: Path) -> Result[Config, ConfigError]:
    """Load `<project_dir>/bob.toml`, or defaults when the file is absent.

    A file that exists but does not parse is still an error.
    """
    path = project_dir / CONFIG_FILENAME
    if not path.exists():
        return Ok(Config())
    return load_config(path)
