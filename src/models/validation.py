"""
ValidationResult: outcome of one fixture file's transform-then-validate check.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationResult:
    """Result of checking a single fixture file."""

    file_path: str
    transform_succeeded: bool
    validation_succeeded: bool
    error_output: Optional[str] = None
    error_kind: Optional[str] = None        # "TransformError" | "ValidationError" | "TimeoutError"
    input_bytes: int = 0
    output_bytes: Optional[int] = None      # None when the transform did not produce output
    duration_ms: int = 0

    @property
    def passed(self) -> bool:
        return self.transform_succeeded and self.validation_succeeded

    @property
    def size_reduction_pct(self) -> Optional[float]:
        """Percentage by which the transform shrank the fixture."""
        if self.output_bytes is None or self.input_bytes == 0:
            return None
        return 100.0 - 100.0 * self.output_bytes / self.input_bytes

    def to_dict(self) -> dict:
        return {
            "file_path": self.file_path,
            "transform_succeeded": self.transform_succeeded,
            "validation_succeeded": self.validation_succeeded,
            "passed": self.passed,
            "error_kind": self.error_kind,
            "error_output": self.error_output,
            "input_bytes": self.input_bytes,
            "output_bytes": self.output_bytes,
            "duration_ms": self.duration_ms,
        }

    def __repr__(self) -> str:
        status = "PASS" if self.passed else f"FAIL({self.error_kind})"
        return f"ValidationResult('{self.file_path}', {status})"
