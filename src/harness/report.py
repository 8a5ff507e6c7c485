"""
Run report - aggregation, JSON report and printed summary.

- summarize()        -> RunSummary (counts, size and timing statistics)
- build_run_report() -> dict validated against RUN_REPORT_SCHEMA
- format_summary()   -> text block printed at the end of a run
- exit_code_for()    -> 0 when every file passed, 1 otherwise
"""
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List

import numpy as np
from jsonschema import validate

from src.config.constants import (
    EXIT_FAILURES,
    EXIT_OK,
    REPORT_SCHEMA_VERSION,
    SUMMARY_WIDTH,
)
from src.config.schemas import RUN_REPORT_SCHEMA
from src.models.run_summary import RunSummary
from src.models.validation import ValidationResult

logger = logging.getLogger(__name__)


# ======================================================================
# Aggregation
# ======================================================================

def summarize(results: Iterable[ValidationResult]) -> RunSummary:
    """Aggregate per-file results into a RunSummary."""
    results = list(results)
    failures = [r for r in results if not r.passed]
    by_kind = Counter(r.error_kind for r in failures if r.error_kind)

    reductions = [r.size_reduction_pct for r in results if r.size_reduction_pct is not None]
    durations = np.array([r.duration_ms for r in results], dtype=float)

    return RunSummary(
        total=len(results),
        passed=len(results) - len(failures),
        failed=len(failures),
        failures=failures,
        failures_by_kind=dict(sorted(by_kind.items())),
        total_input_bytes=sum(r.input_bytes for r in results),
        total_output_bytes=sum(r.output_bytes or 0 for r in results),
        mean_reduction_pct=round(float(np.mean(reductions)), 1) if reductions else None,
        duration_ms_p50=float(np.percentile(durations, 50)) if durations.size else None,
        duration_ms_max=int(durations.max()) if durations.size else None,
    )


def exit_code_for(results: Iterable[ValidationResult]) -> int:
    """0 if every result passed (an empty run passes), 1 otherwise."""
    return EXIT_OK if all(r.passed for r in results) else EXIT_FAILURES


# ======================================================================
# JSON report
# ======================================================================

def build_run_report(
    results: List[ValidationResult],
    fixture_dir: str,
    run_id: str,
) -> dict:
    """
    Build the JSON run report.

    Raises:
        jsonschema.ValidationError: If the assembled report does not match
            RUN_REPORT_SCHEMA.
    """
    report = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "run_id": run_id,
        "fixture_dir": str(fixture_dir),
        "summary": summarize(results).to_dict(),
        "results": [r.to_dict() for r in results],
    }
    validate(instance=report, schema=RUN_REPORT_SCHEMA)
    return report


def write_run_report(report: dict, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(report, f, ensure_ascii=False, indent=2)
    logger.info("Report written to: %s", target)
    return target


# ======================================================================
# Printed summary
# ======================================================================

def format_summary(summary: RunSummary, max_error_chars: int = 2000) -> str:
    """Render the end-of-run summary, listing every failing file."""
    lines = [
        "=" * SUMMARY_WIDTH,
        "FIXTURE VALIDATION - SUMMARY",
        "=" * SUMMARY_WIDTH,
        f"Files   : {summary.total}",
        f"Passed  : {summary.passed}",
        f"Failed  : {summary.failed}",
    ]
    if summary.mean_reduction_pct is not None:
        lines.append(
            f"Size    : {summary.total_input_bytes} -> {summary.total_output_bytes} bytes "
            f"(mean reduction {summary.mean_reduction_pct:.1f}%)"
        )

    if summary.failures:
        lines.append("")
        lines.append(f"Failures ({summary.failed}):")
        for result in summary.failures:
            lines.append(f"  [{result.error_kind or 'unknown':15s}] {result.file_path}")
            output = _truncate(result.error_output or "", max_error_chars)
            for out_line in output.splitlines():
                lines.append(f"      {out_line}")

    lines.append("=" * SUMMARY_WIDTH)
    lines.append("PASS" if summary.all_passed else "FAIL")
    return "\n".join(lines)


def _truncate(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + f"\n... ({len(text) - limit} more characters)"
