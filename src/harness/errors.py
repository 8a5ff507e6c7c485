"""
Exception hierarchy for the fixture validation harness.

SetupError is fatal for the whole run. ExternalToolError and its subclasses
are local to one fixture file: FixtureValidator records them on the
ValidationResult and moves on to the next file.
"""
from typing import Optional, Sequence

from src.config.constants import (
    ERROR_KIND_TIMEOUT,
    ERROR_KIND_TRANSFORM,
    ERROR_KIND_VALIDATION,
)


class HarnessError(Exception):
    """Root of every error raised by the harness."""


class SetupError(HarnessError):
    """Raised when the run cannot start (missing fixture dir or tool)."""


class ExternalToolError(HarnessError):
    """Raised when an external tool cannot be launched or exits non-zero."""

    kind: str = "ExternalToolError"

    def __init__(
        self,
        argv: Sequence[str],
        returncode: Optional[int],
        stderr: str = "",
        reason: Optional[str] = None,
    ) -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        self.stderr = stderr
        if reason is None:
            reason = f"exited with status {returncode}"
        self.reason = reason
        super().__init__(f"{self.kind}: '{' '.join(self.argv)}' {reason}")

    @property
    def error_output(self) -> str:
        """Diagnostic text to surface for the failing file."""
        text = self.stderr.strip()
        return text if text else str(self)


class TransformError(ExternalToolError):
    """The transform tool failed on a fixture file."""

    kind = ERROR_KIND_TRANSFORM


class ValidationError(ExternalToolError):
    """The validator tool rejected the transformed output."""

    kind = ERROR_KIND_VALIDATION


class ToolTimeoutError(ExternalToolError, TimeoutError):
    """An external tool did not finish within the per-file timeout."""

    kind = ERROR_KIND_TIMEOUT

    def __init__(self, argv: Sequence[str], timeout: float, stderr: str = "") -> None:
        self.timeout = timeout
        super().__init__(argv, None, stderr, reason=f"timed out after {timeout:g}s")


class RunCancelled(HarnessError):
    """Raised on the main thread when the run receives a termination signal."""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        super().__init__(f"Run cancelled by signal {signum}")
