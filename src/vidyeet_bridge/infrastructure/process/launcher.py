"""Process launcher for the external CLI.

Starts one OS process per call, streams its stdout line by line, drains
stderr, and enforces a wall-clock bound. Nothing here knows about JSON.
"""

import os
import queue
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from vidyeet_bridge.shared.logging import get_logger

logger = get_logger(__name__)

# Queue marker for stdout EOF
_EOF = None


@dataclass(frozen=True)
class Completed:
    """The process exited on its own."""

    exit_code: int
    stdout: bytes
    stderr: bytes
    duration: float


@dataclass(frozen=True)
class LaunchFailed:
    """The executable is missing or could not be spawned."""

    reason: str
    executable: str


@dataclass(frozen=True)
class TimedOut:
    """The process was killed after running past its bound.

    ``stdout`` holds whatever was read before the kill.
    """

    timeout: float
    stdout: bytes
    stderr: bytes
    duration: float


@dataclass(frozen=True)
class Cancelled:
    """The process was killed because the caller asked for it."""

    stdout: bytes
    stderr: bytes
    duration: float


LaunchOutcome = Union[Completed, LaunchFailed, TimedOut, Cancelled]


class CancellationToken:
    """Thread-safe flag a caller sets to stop an in-flight invocation."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def check_executable(path: Path) -> Optional[str]:
    """Return why ``path`` cannot be launched, or None if it can."""
    if not path.exists():
        return f"executable not found: {path}"
    if not path.is_file():
        return f"not a regular file: {path}"
    if not os.access(path, os.X_OK):
        return f"not executable: {path}"
    return None


def _send(proc: subprocess.Popen, force: bool) -> None:
    if os.name == "posix":
        sig = signal.SIGKILL if force else signal.SIGTERM
        try:
            # Process group, so helpers spawned by the CLI die too
            os.killpg(proc.pid, sig)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            logger.debug(f"killpg denied for pid {proc.pid}, signalling process only")
    if force:
        proc.kill()
    else:
        proc.terminate()


def terminate_tree(proc: subprocess.Popen, grace: float = 5.0) -> None:
    """Terminate ``proc`` and its process group, escalating to a hard kill.

    Returns only once the process has been reaped.
    """
    if proc.poll() is not None:
        return

    _send(proc, force=False)
    try:
        proc.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning(f"pid {proc.pid} ignored SIGTERM for {grace}s, killing")
        _send(proc, force=True)
        proc.wait()


def _pump_lines(stream, lines: "queue.Queue[Optional[bytes]]") -> None:
    try:
        for line in iter(stream.readline, b''):
            lines.put(line)
    finally:
        lines.put(_EOF)


def _drain(stream, chunks: List[bytes]) -> None:
    for chunk in iter(lambda: stream.read(8192), b''):
        chunks.append(chunk)


class ProcessLauncher:
    """Runs the CLI once per call. Instances hold configuration only."""

    def __init__(self, poll_interval: float = 0.05, kill_grace: float = 5.0):
        self.poll_interval = poll_interval
        self.kill_grace = kill_grace

    def launch(
        self,
        executable: Path,
        args: Sequence[str],
        timeout: float,
        *,
        stdin_data: Optional[bytes] = None,
        on_stdout_line: Optional[Callable[[bytes], None]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> LaunchOutcome:
        """
        Run ``executable`` with ``args`` and wait for it to finish.

        Stdout lines are handed to ``on_stdout_line`` on the calling thread,
        in order, as they arrive. If the callback raises, the process is
        terminated and the exception propagates.

        Args:
            executable: Path to the CLI binary
            args: Argument vector (without the executable)
            timeout: Wall-clock bound in seconds
            stdin_data: Bytes written to the child's stdin, then closed
            on_stdout_line: Per-line stdout callback
            cancel_token: Token the caller may set to stop the process

        Returns:
            Completed, LaunchFailed, TimedOut or Cancelled
        """
        executable = Path(executable)
        reason = check_executable(executable)
        if reason:
            logger.error(f"Cannot launch CLI: {reason}")
            return LaunchFailed(reason=reason, executable=str(executable))

        cmd = [str(executable), *args]
        logger.debug(f"Spawning: {' '.join(cmd)}")
        started = time.monotonic()

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE if stdin_data is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=(os.name == "posix"),
            )
        except OSError as e:
            logger.error(f"Failed to spawn {executable}: {e}")
            return LaunchFailed(reason=f"spawn failed: {e}", executable=str(executable))

        lines: "queue.Queue[Optional[bytes]]" = queue.Queue()
        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []

        stdout_reader = threading.Thread(
            target=_pump_lines, args=(proc.stdout, lines),
            name=f"cli-stdout-{proc.pid}", daemon=True
        )
        stderr_reader = threading.Thread(
            target=_drain, args=(proc.stderr, stderr_chunks),
            name=f"cli-stderr-{proc.pid}", daemon=True
        )
        # A child that never reads stdin must not block the deadline loop
        stdin_writer = None
        if stdin_data is not None:
            stdin_writer = threading.Thread(
                target=self._feed_stdin, args=(proc, stdin_data),
                name=f"cli-stdin-{proc.pid}", daemon=True
            )
        helpers = [t for t in (stdout_reader, stderr_reader, stdin_writer) if t is not None]

        try:
            for helper in helpers:
                helper.start()

            deadline = started + timeout
            stop = self._wait(proc, lines, stdout_chunks, on_stdout_line, deadline, cancel_token)

            if stop is not None:
                terminate_tree(proc, self.kill_grace)
                stdout_reader.join(self.kill_grace)
                # Lines already written before the kill still count
                try:
                    self._flush(lines, stdout_chunks, on_stdout_line)
                except Exception as e:
                    # The stop reason is the outcome; keep the rest as raw output
                    logger.warning(f"stdout callback failed after the CLI was stopped: {e!r}")
                    self._flush(lines, stdout_chunks, None)
        finally:
            if proc.poll() is None:
                terminate_tree(proc, self.kill_grace)
            self._join(*helpers)
            self._close(proc, stdout_reader, stderr_reader, stdin_writer)

        duration = time.monotonic() - started
        stdout = b''.join(stdout_chunks)
        stderr = b''.join(stderr_chunks)

        if stop is Cancelled:
            logger.warning(f"CLI cancelled after {duration:.2f}s")
            return Cancelled(stdout=stdout, stderr=stderr, duration=duration)
        if stop is TimedOut:
            logger.warning(f"CLI timed out after {duration:.2f}s (bound {timeout}s)")
            return TimedOut(timeout=timeout, stdout=stdout, stderr=stderr, duration=duration)

        logger.debug(f"CLI exited with code {proc.returncode} in {duration:.2f}s")
        return Completed(exit_code=proc.returncode, stdout=stdout, stderr=stderr, duration=duration)

    def _feed_stdin(self, proc: subprocess.Popen, data: bytes) -> None:
        try:
            proc.stdin.write(data)
            proc.stdin.close()
        except BrokenPipeError:
            # Child exited before reading; its exit code tells the story
            logger.debug(f"pid {proc.pid} closed stdin before reading input")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not write stdin of pid {proc.pid}: {e!r}")

    def _wait(self, proc, lines, stdout_chunks, on_stdout_line, deadline, cancel_token):
        """Pump stdout until EOF and exit; return None, TimedOut or Cancelled."""
        eof = False
        while True:
            if cancel_token is not None and cancel_token.cancelled:
                return Cancelled

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return TimedOut

            wait_for = min(remaining, self.poll_interval)
            if eof:
                try:
                    proc.wait(timeout=wait_for)
                    return None
                except subprocess.TimeoutExpired:
                    continue

            try:
                line = lines.get(timeout=wait_for)
            except queue.Empty:
                continue

            if line is _EOF:
                eof = True
                continue
            self._accept(line, stdout_chunks, on_stdout_line)

    def _flush(self, lines, stdout_chunks, on_stdout_line) -> None:
        while True:
            try:
                line = lines.get_nowait()
            except queue.Empty:
                return
            if line is _EOF:
                return
            self._accept(line, stdout_chunks, on_stdout_line)

    @staticmethod
    def _accept(line: bytes, stdout_chunks: List[bytes], on_stdout_line) -> None:
        stdout_chunks.append(line)
        if on_stdout_line is not None:
            on_stdout_line(line)

    def _join(self, *readers: threading.Thread) -> None:
        for reader in readers:
            if reader.ident is None:
                # Never started
                continue
            reader.join(self.kill_grace)
            if reader.is_alive():
                # A grandchild outside the process group still holds the pipe
                logger.warning(f"{reader.name} still blocked after {self.kill_grace}s")

    @staticmethod
    def _close(proc: subprocess.Popen, stdout_reader, stderr_reader, stdin_writer) -> None:
        # A pipe is closed only once the helper using it has finished
        writer_done = stdin_writer is None or not stdin_writer.is_alive()
        if writer_done and proc.stdin is not None and not proc.stdin.closed:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                logger.debug(f"pid {proc.pid} stdin already broken on close")
        if not stdout_reader.is_alive():
            proc.stdout.close()
        if not stderr_reader.is_alive():
            proc.stderr.close()
