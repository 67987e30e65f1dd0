from __future__ import annotations

"""Subprocess helpers for talking to asset executables.

This module provides:
- Captured runs for the discovery queries (``asset-type``, ``task-infos``)
- Pass-through runs for asset-provided tasks, so asset output reaches the
  user untouched
- Optional timeouts that terminate the whole process group on expiry
- No shell=True (argv lists only)
"""

import os
import shlex
import signal
import subprocess
import sys
from typing import IO, Any, Optional, Sequence


def _popen_process_group_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        if isinstance(creationflags, int):
            return {"creationflags": creationflags}
    return {}


def _terminate_process_group(proc: subprocess.Popen[Any]) -> None:
    if proc.poll() is not None:
        return
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except (ProcessLookupError, PermissionError):
            proc.terminate()
        try:
            proc.wait(timeout=0.2)
        except subprocess.TimeoutExpired:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except (ProcessLookupError, PermissionError):
                proc.kill()
            proc.wait(timeout=1.0)
        return

    proc.kill()
    proc.wait(timeout=1.0)


def run_capture(
    argv: Sequence[str],
    *,
    timeout: Optional[float] = None,
    merge_stderr: bool = False,
) -> subprocess.CompletedProcess:
    """Run ``argv`` and capture its output as bytes.

    Args:
        argv: Command and arguments.
        timeout: Seconds to wait before terminating the process group.
        merge_stderr: Interleave stderr into the captured stdout (the
            equivalent of reading the combined output).

    Returns:
        CompletedProcess with ``stdout`` (and ``stderr`` unless merged).

    Raises:
        OSError: If the process cannot be started.
        subprocess.TimeoutExpired: If the timeout elapses.
    """
    args = [str(a) for a in argv]
    proc = subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
        **_popen_process_group_kwargs(),
    )
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _terminate_process_group(proc)
        stdout, stderr = proc.communicate()
        raise subprocess.TimeoutExpired(args, exc.timeout, output=stdout, stderr=stderr) from None

    return subprocess.CompletedProcess(
        args,
        proc.returncode if proc.returncode is not None else 0,
        stdout=stdout,
        stderr=stderr,
    )


def _real_fileno(stream: Optional[IO[Any]]) -> Optional[int]:
    if stream is None:
        return None
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _write_through(stream: IO[Any], data: bytes) -> None:
    if not data:
        return
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        buffer.write(data)
        buffer.flush()
        return
    try:
        stream.write(data)  # type: ignore[arg-type]
    except TypeError:
        stream.write(data.decode("utf-8", errors="replace"))
    flush = getattr(stream, "flush", None)
    if flush is not None:
        flush()


def run_passthrough(
    argv: Sequence[str],
    *,
    stdout: Optional[IO[Any]] = None,
    stderr: Optional[IO[Any]] = None,
    timeout: Optional[float] = None,
) -> int:
    """Run ``argv`` with its stdout/stderr connected to the given streams.

    Streams backed by a real file descriptor (the default: this process's own
    stdout/stderr) are handed to the child directly, so output is neither
    buffered nor transformed. In-memory streams cannot be inherited; for those
    the child's output is collected and written once the process exits.

    Returns:
        The process exit code.

    Raises:
        OSError: If the process cannot be started.
        subprocess.TimeoutExpired: If the timeout elapses.
    """
    args = [str(a) for a in argv]

    out_fd = _real_fileno(stdout) if stdout is not None else None
    err_fd = _real_fileno(stderr) if stderr is not None else None
    pipe_out = stdout is not None and out_fd is None
    pipe_err = stderr is not None and err_fd is None

    # Keep host output ordered before the child writes to the same descriptors.
    for stream in (stdout or sys.stdout, stderr or sys.stderr):
        flush = getattr(stream, "flush", None)
        if flush is not None:
            flush()

    proc = subprocess.Popen(
        args,
        stdout=subprocess.PIPE if pipe_out else stdout,
        stderr=subprocess.PIPE if pipe_err else stderr,
        **_popen_process_group_kwargs(),
    )
    try:
        out, err = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _terminate_process_group(proc)
        out, err = proc.communicate()
        if pipe_out and stdout is not None:
            _write_through(stdout, out or b"")
        if pipe_err and stderr is not None:
            _write_through(stderr, err or b"")
        raise subprocess.TimeoutExpired(args, exc.timeout) from None

    if pipe_out and stdout is not None:
        _write_through(stdout, out or b"")
    if pipe_err and stderr is not None:
        _write_through(stderr, err or b"")
    return proc.returncode


def format_command_line(argv: Sequence[str]) -> str:
    """Return ``argv`` as a single shell-like string for messages."""
    return " ".join(shlex.quote(str(a)) for a in argv)


__all__ = [
    "run_capture",
    "run_passthrough",
    "format_command_line",
]
