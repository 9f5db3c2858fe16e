"""Changelog model and parsing."""

from .errors import ChangelogFormatError
from .model import VersionEntry
from .parser import latest_entry, parse_changelog
from .semver import SemVer, SemVerError, parse_semver

__all__ = [
    "ChangelogFormatError",
    "SemVer",
    "SemVerError",
    "VersionEntry",
    "latest_entry",
    "parse_changelog",
    "parse_semver",
]
