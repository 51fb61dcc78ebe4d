"""
This module provides a robust way of running external command-line tools.

`ProcessRunner` spawns exactly one child per call, captures its stdout and
stderr, and reports the exit code. A non-zero exit code is a normal result;
the caller decides whether it is fatal. Only failures to launch the tool at
all are raised as exceptions.
"""

import os
import shlex
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from loguru import logger

from ..config.common import (
    PROCESS_POLL_INTERVAL,
    PROCESS_TERMINATE_GRACE,
    STDERR_TAIL_LINES,
)
from ..domain.exceptions import (
    ProcessCancelledException,
    ProcessTimeoutException,
    SpawnFailedException,
    ToolNotFoundException,
)

LineCallback = Callable[[str], None]


def display_command(cmd_list: Sequence[str]) -> str:
    """Formats a command list into a copy-pasteable string for logs."""
    if os.name == "nt":
        return subprocess.list2cmdline(list(cmd_list))
    return shlex.join(cmd_list)


def tail_lines(text: str, max_lines: int = STDERR_TAIL_LINES) -> str:
    """Returns the last `max_lines` non-blank lines of `text`."""
    lines = [line for line in text.splitlines() if line.strip()]
    return "\n".join(lines[-max_lines:])


@dataclass(frozen=True)
class ProcessResult:
    """The outcome of one finished child process."""

    args: Tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def stderr_tail(self, max_lines: int = STDERR_TAIL_LINES) -> str:
        return tail_lines(self.stderr, max_lines)


def _drain(stream, sink: List[str], on_line: Optional[LineCallback]):
    # Text-mode pipes use universal newlines, so ffmpeg's '\r' progress
    # updates arrive here as separate lines.
    for line in stream:
        sink.append(line)
        if on_line is None:
            continue
        try:
            on_line(line.rstrip("\r\n"))
        except Exception as e:
            logger.warning(f"Output line callback raised {type(e).__name__}: {e}")
    stream.close()


class ProcessRunner:
    """
    Runs an external executable and captures its output.

    The runner holds no per-call state, so a single instance may be shared by
    several threads; each `run()` owns its own child process and buffers.
    """

    def __init__(
        self,
        poll_interval: float = PROCESS_POLL_INTERVAL,
        terminate_grace: float = PROCESS_TERMINATE_GRACE,
    ):
        self.poll_interval = poll_interval
        self.terminate_grace = terminate_grace

    @staticmethod
    def locate(executable: str) -> str:
        """
        Resolves an executable name or path to an absolute path.

        A value containing a path separator must point to an existing file; a
        bare name is looked up on the system PATH.

        Raises:
            ToolNotFoundException: If the executable cannot be found.
        """
        separators = [os.sep] + ([os.altsep] if os.altsep else [])
        if any(sep in executable for sep in separators):
            candidate = Path(executable)
            if candidate.is_file():
                return str(candidate.resolve())
            raise ToolNotFoundException(executable)

        found = shutil.which(executable)
        if not found:
            raise ToolNotFoundException(executable)
        return found

    def run(
        self,
        executable: str,
        args: Sequence[Union[str, Path]],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
        on_stderr_line: Optional[LineCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProcessResult:
        """
        Executes `executable` with `args` and waits for it to terminate.

        Args:
            executable: Name or path of the tool to run.
            args: Arguments, in order, without the executable itself.
            cwd: Working directory for the child, if any.
            timeout: Seconds after which the child is killed. None waits forever.
            on_stderr_line: Called with every stderr line as it arrives. Errors
                            raised by the callback are logged and ignored.
            cancel_event: When set, the child is terminated.

        Returns:
            A `ProcessResult`, whatever the exit code.

        Raises:
            ToolNotFoundException: If the executable cannot be located.
            SpawnFailedException: For any other OS-level launch error.
            ProcessTimeoutException: If `timeout` elapsed.
            ProcessCancelledException: If `cancel_event` was set.
        """
        cmd_list = [executable] + [str(arg) for arg in args]
        logger.debug(f"Executing command: {display_command(cmd_list)}")

        if cwd is not None and not Path(cwd).is_dir():
            raise SpawnFailedException(executable, f"working directory {cwd} does not exist")

        started = time.monotonic()
        try:
            proc = subprocess.Popen(
                cmd_list,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                text=True,
                encoding="utf-8",
                errors="replace",
                shell=False,
            )
        except FileNotFoundError as e:
            logger.error(f"Command not found: '{executable}'. Ensure it's in your system's PATH or configured correctly.")
            raise ToolNotFoundException(executable) from e
        except OSError as e:
            logger.error(f"Could not launch '{executable}': {e}")
            raise SpawnFailedException(executable, str(e)) from e

        stdout_chunks: List[str] = []
        stderr_chunks: List[str] = []
        readers = [
            threading.Thread(target=_drain, args=(proc.stdout, stdout_chunks, None), daemon=True),
            threading.Thread(target=_drain, args=(proc.stderr, stderr_chunks, on_stderr_line), daemon=True),
        ]
        for reader in readers:
            reader.start()

        try:
            exit_code = self._wait(proc, executable, started, timeout, cancel_event)
        finally:
            for reader in readers:
                reader.join()

        result = ProcessResult(
            args=tuple(cmd_list),
            exit_code=exit_code,
            stdout="".join(stdout_chunks),
            stderr="".join(stderr_chunks),
            elapsed_seconds=time.monotonic() - started,
        )

        if result.stdout:
            logger.trace(f"Command stdout: {result.stdout[:500]}")
        if result.stderr and not result.succeeded:
            logger.debug(f"Command stderr (error, rc={exit_code}): {result.stderr_tail()}")
        elif result.stderr:
            logger.trace(f"Command stderr (non-error, rc={exit_code}): {result.stderr_tail()}")
        return result

    def _wait(
        self,
        proc: subprocess.Popen,
        executable: str,
        started: float,
        timeout: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> int:
        try:
            while True:
                try:
                    return proc.wait(timeout=self.poll_interval)
                except subprocess.TimeoutExpired:
                    pass

                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(f"Cancelling '{executable}' (pid {proc.pid}).")
                    self._terminate(proc)
                    raise ProcessCancelledException(executable)

                if timeout is not None and time.monotonic() - started > timeout:
                    logger.error(f"'{executable}' exceeded {timeout:g}s, killing pid {proc.pid}.")
                    proc.kill()
                    proc.wait()
                    raise ProcessTimeoutException(executable, timeout)
        except KeyboardInterrupt:
            self._terminate(proc)
            raise

    def _terminate(self, proc: subprocess.Popen):
        if proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=self.terminate_grace)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
