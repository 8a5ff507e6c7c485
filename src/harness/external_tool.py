"""
External tool invocation - the single seam through which the harness runs
both the transform tool and the validator tool.

invoke_external_tool() never goes through a shell, captures stdout as bytes
(transformed source must be written back verbatim) and stderr as text, and
maps every failure mode onto the harness exception hierarchy:

    launch failure (OSError)  -> error_cls
    non-zero exit             -> error_cls
    timeout                   -> ToolTimeoutError (process killed first)
    anything else             -> process killed, exception re-raised

A ProcessRegistry tracks live processes so that a signal handler running on
the main thread can stop subprocesses owned by worker threads.
"""
from __future__ import annotations

import logging
import subprocess
import threading
import time
from typing import Optional, Sequence, Set, Type

from src.harness.errors import ExternalToolError, ToolTimeoutError
from src.models.tool_output import ToolOutput

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Process registry
# ---------------------------------------------------------------------------

class ProcessRegistry:
    """Thread-safe set of in-flight subprocesses."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._processes: Set[subprocess.Popen] = set()
        self._closed = False

    def add(self, proc: subprocess.Popen) -> None:
        with self._lock:
            self._processes.add(proc)
            closed = self._closed
        if closed:
            # Registered after terminate_all(): stop it right away.
            _kill_quietly(proc)

    def discard(self, proc: subprocess.Popen) -> None:
        with self._lock:
            self._processes.discard(proc)

    def __len__(self) -> int:
        with self._lock:
            return len(self._processes)

    @property
    def closed(self) -> bool:
        return self._closed

    def terminate_all(self) -> int:
        """
        Kill every registered process and refuse new ones.

        Returns:
            Number of processes that were still running.
        """
        with self._lock:
            self._closed = True
            processes = list(self._processes)
        killed = 0
        for proc in processes:
            if proc.poll() is None:
                _kill_quietly(proc)
                killed += 1
        if killed:
            logger.warning("Terminated %d in-flight external process(es)", killed)
        return killed


def _kill_quietly(proc: subprocess.Popen) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------

def invoke_external_tool(
    command: Sequence[str],
    args: Sequence[str],
    *,
    error_cls: Type[ExternalToolError],
    timeout: Optional[float] = None,
    registry: Optional[ProcessRegistry] = None,
) -> ToolOutput:
    """
    Run ``command + args`` and return its captured output.

    Args:
        command:   Executable plus fixed leading arguments (e.g. ``["node", "-c"]``).
        args:      Per-call arguments appended after *command*.
        error_cls: Exception raised on launch failure or non-zero exit.
        timeout:   Seconds before the process is killed; ``None`` waits forever.
        registry:  Optional ProcessRegistry the live process is tracked in.

    Returns:
        ToolOutput of the successful (exit 0) process.

    Raises:
        error_cls:        Launch failure or non-zero exit status.
        ToolTimeoutError: *timeout* elapsed.
    """
    argv = [*command, *args]
    if not argv:
        raise error_cls(argv, None, reason="empty command")

    logger.debug("Running: %s", " ".join(argv))
    start = time.monotonic()
    proc: Optional[subprocess.Popen] = None
    try:
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise error_cls(argv, None, reason=f"could not be launched: {exc}") from exc
        if registry is not None:
            registry.add(proc)
        stdout, stderr_raw = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        _, stderr_raw = proc.communicate()
        raise ToolTimeoutError(argv, timeout, _decode(stderr_raw)) from None
    except BaseException:
        if proc is not None and proc.poll() is None:
            proc.kill()
            proc.wait()
        raise
    finally:
        if registry is not None and proc is not None:
            registry.discard(proc)

    stderr = _decode(stderr_raw)
    if proc.returncode != 0:
        raise error_cls(argv, proc.returncode, stderr)

    return ToolOutput(
        argv=tuple(argv),
        returncode=proc.returncode,
        stdout=stdout,
        stderr=stderr,
        duration_ms=int((time.monotonic() - start) * 1000),
    )


def _decode(raw: Optional[bytes]) -> str:
    return raw.decode("utf-8", errors="replace") if raw else ""
