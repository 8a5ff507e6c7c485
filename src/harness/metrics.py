"""
Prometheus Metrics - harness observability.

Exposes counters and histograms for:
- Fixture checks by outcome
- External tool failures by tool and error kind
- Per-file check latency
- Size reduction achieved by the transform tool

Metrics live in the default registry; write_metrics_textfile() dumps them in
the node-exporter textfile format so a batch run can be scraped afterwards.

Usage
-----
    from src.harness.metrics import record_result, timed_check

    with timed_check():
        result = validator.validate_file(path)
    record_result(result)
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

from src.models.validation import ValidationResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# Fixture files checked, labelled by outcome ("passed" / "failed").
FIXTURE_CHECKS: Counter = Counter(
    "fixture_checks_total",
    "Fixture files checked, by outcome",
    ["outcome"],
)

# External tool failures, labelled by tool ("transform" / "validator") and kind.
TOOL_FAILURES: Counter = Counter(
    "fixture_tool_failures_total",
    "External tool failures by tool and error kind",
    ["tool", "error_kind"],
)

# Wall time of one transform + validate check (seconds).
CHECK_LATENCY: Histogram = Histogram(
    "fixture_check_seconds",
    "Wall time of a single fixture check in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# output_bytes / input_bytes for every successful transform.
SIZE_RATIO: Histogram = Histogram(
    "fixture_size_reduction_ratio",
    "Transformed size divided by original size",
    buckets=(0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0, 1.5),
)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_result(result: ValidationResult) -> None:
    """Count *result* by outcome and observe its size ratio."""
    FIXTURE_CHECKS.labels(outcome="passed" if result.passed else "failed").inc()
    if result.output_bytes is not None and result.input_bytes > 0:
        SIZE_RATIO.observe(result.output_bytes / result.input_bytes)


def record_tool_failure(tool: str, error_kind: str) -> None:
    """Increment the tool failure counter."""
    TOOL_FAILURES.labels(tool=tool, error_kind=error_kind).inc()


@contextmanager
def timed_check() -> Generator[None, None, None]:
    """
    Context manager that records fixture check latency.

    Usage::

        with timed_check():
            result = validator.validate_file(path)
    """
    with CHECK_LATENCY.time():
        yield


def write_metrics_textfile(path: str | Path) -> None:
    """Write every registered metric to *path* (node-exporter textfile format)."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(target), REGISTRY)
    logger.info("Metrics written to: %s", target)
