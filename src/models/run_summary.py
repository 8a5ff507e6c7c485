"""
RunSummary: aggregate view over all ValidationResults of a run.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.models.validation import ValidationResult


@dataclass
class RunSummary:
    """Pass/fail totals plus size and timing statistics for a run."""

    total: int
    passed: int
    failed: int
    failures: List[ValidationResult] = field(default_factory=list)
    failures_by_kind: Dict[str, int] = field(default_factory=dict)
    total_input_bytes: int = 0
    total_output_bytes: int = 0
    mean_reduction_pct: Optional[float] = None
    duration_ms_p50: Optional[float] = None
    duration_ms_max: Optional[int] = None

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "failures_by_kind": dict(self.failures_by_kind),
            "total_input_bytes": self.total_input_bytes,
            "total_output_bytes": self.total_output_bytes,
            "mean_reduction_pct": self.mean_reduction_pct,
            "duration_ms_p50": self.duration_ms_p50,
            "duration_ms_max": self.duration_ms_max,
        }
