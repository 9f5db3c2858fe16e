"""Services layer - build/release orchestration."""

from .errors import OrchestrationError, ReleaseFailure, UnhandledError
from .release import ReleaseOrchestrator, ReleaseSummary

__all__ = [
    "OrchestrationError",
    "ReleaseFailure",
    "ReleaseOrchestrator",
    "ReleaseSummary",
    "UnhandledError",
]
