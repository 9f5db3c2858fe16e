"""Supervised subprocess execution.

Runs one external command at a time, captures every line it writes to
stdout or stderr, and optionally surfaces each line live while it runs.

Threading model:
- one reader thread per stream pushes lines into a queue (per-stream order
  is preserved);
- one ticker thread drains the queue on a fixed interval;
- the calling thread blocks on the process with a timeout, then performs the
  final drain once the ticker has stopped.

A drain holds a non-blocking lock, so a tick that lands while a drain is
still running is skipped instead of overlapping.

Usage:
    supervisor = ProcessSupervisor(on_line=console.print)
    match supervisor.run(script, ["MyProject", "1.1.0"], cwd=project_dir):
        case Ok(outcome):
            print(f"{len(outcome.lines)} lines")
        case Err(error):
            print(error)
            print("\\n".join(error.lines))
"""

from __future__ import annotations

import queue
import subprocess
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from bob.core.config import DEFAULT_DRAIN_INTERVAL_SECONDS, DEFAULT_TIMEOUT_SECONDS
from bob.core.result import Err, Ok, Result

__all__ = [
    "ExecutionError",
    "LineSink",
    "OutputPump",
    "ProcessOutcome",
    "ProcessSupervisor",
]

LineSink = Callable[[str], None]

_READER_JOIN_TIMEOUT_SECONDS = 5.0
_TERMINATE_GRACE_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class ProcessOutcome:
    """A command that ran to completion with exit code 0."""

    command: tuple[str, ...]
    exit_code: int
    lines: tuple[str, ...]
    timed_out: bool = False

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


@dataclass(frozen=True, slots=True)
class ExecutionError:
    """A command that could not start, timed out, or exited non-zero.

    Attributes:
        command: Program followed by its arguments.
        exit_code: Exit code, or None if the process never started or was
            stopped after the timeout.
        lines: Every output line captured before the failure.
        timed_out: True if the timeout fired before a natural exit.
        reason: System error text when the process could not be started.
        timeout: The timeout that applied, in seconds.
    """

    command: tuple[str, ...]
    exit_code: int | None
    lines: tuple[str, ...] = ()
    timed_out: bool = False
    reason: str | None = None
    timeout: float | None = None

    @property
    def command_line(self) -> str:
        return " ".join(self.command)

    @property
    def message(self) -> str:
        return str(self)

    def __str__(self) -> str:
        if self.timed_out:
            limit = f" of {self.timeout:g}s" if self.timeout is not None else ""
            return f"{self.command_line} did not exit within timeout{limit} (timed out)"
        if self.exit_code is None:
            return f"could not start process {self.command_line}: {self.reason}"
        return f"{self.command_line} exited with code {self.exit_code}"


class OutputPump:
    """Moves lines from a process's pipes into an ordered capture log."""

    def __init__(
        self,
        streams: Sequence[IO[str]],
        *,
        interval: float,
        on_line: LineSink | None = None,
    ) -> None:
        self._queue: queue.Queue[str] = queue.Queue()
        self._lines: list[str] = []
        self._on_line = on_line
        self._interval = interval
        self._drain_lock = threading.Lock()
        self._stop = threading.Event()
        self._readers = [
            threading.Thread(target=self._read, args=(stream,), daemon=True) for stream in streams
        ]
        self._ticker = threading.Thread(target=self._tick, daemon=True)

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    def start(self) -> None:
        for reader in self._readers:
            reader.start()
        self._ticker.start()

    def drain(self) -> bool:
        """Drain queued lines unless another drain is running.

        Returns:
            False if the drain was skipped.
        """
        if not self._drain_lock.acquire(blocking=False):
            return False
        try:
            self._drain_queued()
        finally:
            self._drain_lock.release()
        return True

    def finish(self) -> tuple[str, ...]:
        """Stop the ticker, wait for the readers, run the final drain."""
        self._stop.set()
        if self._ticker.is_alive():
            self._ticker.join()
        for reader in self._readers:
            # A grandchild can inherit the pipe and keep it open.
            reader.join(timeout=_READER_JOIN_TIMEOUT_SECONDS)
        with self._drain_lock:
            self._drain_queued()
        return self.lines

    def _drain_queued(self) -> None:
        while True:
            try:
                line = self._queue.get_nowait()
            except queue.Empty:
                return
            self._lines.append(line)
            if self._on_line is not None:
                self._on_line(line)

    def _read(self, stream: IO[str]) -> None:
        with stream:
            for raw in stream:
                self._queue.put(raw.rstrip("\r\n"))

    def _tick(self) -> None:
        while not self._stop.wait(self._interval):
            self.drain()


def _terminate(proc: subprocess.Popen[str]) -> None:
    try:
        proc.terminate()
    except OSError:
        return

    try:
        proc.wait(timeout=_TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        try:
            proc.kill()
        except OSError:
            return
        try:
            proc.wait(timeout=_TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            return


class ProcessSupervisor:
    """Runs external commands with output capture and a wall-clock timeout.

    Capture into the returned log is unconditional; `on_line` only decides
    whether the caller also sees each line live.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        interval: float = DEFAULT_DRAIN_INTERVAL_SECONDS,
        on_line: LineSink | None = None,
    ) -> None:
        self._timeout = timeout
        self._interval = interval
        self._on_line = on_line

    @property
    def timeout(self) -> float:
        return self._timeout

    def run(
        self,
        program: str | Path,
        args: Sequence[str],
        *,
        cwd: Path,
    ) -> Result[ProcessOutcome, ExecutionError]:
        """Run `program` with `args` in `cwd` and classify the result.

        Returns:
            Ok(ProcessOutcome) on exit code 0.
            Err(ExecutionError) if the process could not be started, did not
            exit within the timeout (it is terminated), or exited non-zero.
        """
        command = (str(program), *args)
        try:
            proc = subprocess.Popen(
                list(command),
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            return Err(ExecutionError(command=command, exit_code=None, reason=str(e)))

        assert proc.stdout is not None and proc.stderr is not None
        pump = OutputPump([proc.stdout, proc.stderr], interval=self._interval, on_line=self._on_line)
        pump.start()

        timed_out = False
        try:
            exit_code = proc.wait(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
        finally:
            if proc.poll() is None:
                _terminate(proc)
            lines = pump.finish()

        if timed_out:
            return Err(
                ExecutionError(
                    command=command,
                    exit_code=None,
                    lines=lines,
                    timed_out=True,
                    timeout=self._timeout,
                )
            )

        if exit_code != 0:
            return Err(ExecutionError(command=command, exit_code=exit_code, lines=lines))

        return Ok(ProcessOutcome(command=command, exit_code=exit_code, lines=lines))
