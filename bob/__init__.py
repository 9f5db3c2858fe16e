"""Changelog-driven build and release helper."""

__version__ = "0.3.0"
