"""Platform abstraction layer."""

from .process import (
    ExecutionError,
    LineSink,
    ProcessOutcome,
    ProcessSupervisor,
)

__all__ = [
    "ExecutionError",
    "LineSink",
    "ProcessOutcome",
    "ProcessSupervisor",
]
