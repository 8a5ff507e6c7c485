"""
Unit tests for src.harness.report.
Tests: summarize, exit_code_for, build_run_report, write_run_report,
       format_summary.
"""
import json

import jsonschema
import pytest

from src.config.schemas import RUN_REPORT_SCHEMA
from src.harness.report import (
    build_run_report,
    exit_code_for,
    format_summary,
    summarize,
    write_run_report,
)
from src.models.validation import ValidationResult


@pytest.fixture
def passed_result():
    return ValidationResult(
        file_path="test-js-libs/react.development.js",
        transform_succeeded=True,
        validation_succeeded=True,
        input_bytes=1000,
        output_bytes=400,
        duration_ms=120,
    )


@pytest.fixture
def validation_failure():
    return ValidationResult(
        file_path="test-js-libs/typescript.js",
        transform_succeeded=True,
        validation_succeeded=False,
        error_output="SyntaxError: Unexpected end of input",
        error_kind="ValidationError",
        input_bytes=2000,
        output_bytes=1000,
        duration_ms=300,
    )


@pytest.fixture
def transform_failure():
    return ValidationResult(
        file_path="test-js-libs/broken.js",
        transform_succeeded=False,
        validation_succeeded=False,
        error_output="Unterminated string literal at line 3, column 1",
        error_kind="TransformError",
        input_bytes=50,
        duration_ms=10,
    )


class TestSummarize:
    def test_counts(self, passed_result, validation_failure, transform_failure):
        summary = summarize([passed_result, validation_failure, transform_failure])
        assert summary.total == 3
        assert summary.passed == 1
        assert summary.failed == 2
        assert summary.all_passed is False
        assert [r.file_path for r in summary.failures] == [
            validation_failure.file_path,
            transform_failure.file_path,
        ]
        assert summary.failures_by_kind == {"TransformError": 1, "ValidationError": 1}

    def test_size_statistics(self, passed_result, validation_failure, transform_failure):
        summary = summarize([passed_result, validation_failure, transform_failure])
        assert summary.total_input_bytes == 3050
        assert summary.total_output_bytes == 1400
        # 60% and 50% reductions; the failed transform has no output.
        assert summary.mean_reduction_pct == pytest.approx(55.0)

    def test_duration_statistics(self, passed_result, validation_failure, transform_failure):
        summary = summarize([passed_result, validation_failure, transform_failure])
        assert summary.duration_ms_p50 == pytest.approx(120.0)
        assert summary.duration_ms_max == 300

    def test_empty_run(self):
        summary = summarize([])
        assert summary.total == 0
        assert summary.all_passed is True
        assert summary.mean_reduction_pct is None
        assert summary.duration_ms_p50 is None
        assert summary.duration_ms_max is None

    def test_accepts_generator(self, passed_result):
        summary = summarize(r for r in [passed_result])
        assert summary.total == 1


class TestExitCode:
    def test_all_passed(self, passed_result):
        assert exit_code_for([passed_result]) == 0

    def test_any_failure(self, passed_result, validation_failure):
        assert exit_code_for([passed_result, validation_failure]) == 1

    def test_empty_run_passes(self):
        assert exit_code_for([]) == 0


class TestRunReport:
    def test_report_conforms_to_schema(self, passed_result, validation_failure, transform_failure):
        report = build_run_report(
            [passed_result, validation_failure, transform_failure],
            "test-js-libs",
            run_id="abc123",
        )
        jsonschema.validate(report, RUN_REPORT_SCHEMA)
        assert report["run_id"] == "abc123"
        assert report["summary"]["failed"] == 2
        assert report["results"][0]["passed"] is True
        assert report["results"][2]["output_bytes"] is None

    def test_empty_report_conforms(self):
        report = build_run_report([], "empty", run_id="r0")
        assert report["results"] == []
        assert report["summary"]["total"] == 0

    def test_unknown_error_kind_rejected(self):
        bogus = ValidationResult(
            file_path="x.js",
            transform_succeeded=False,
            validation_succeeded=False,
            error_kind="SegFault",
        )
        with pytest.raises(jsonschema.ValidationError):
            build_run_report([bogus], "d", run_id="r1")

    def test_write_run_report(self, tmp_path, passed_result):
        report = build_run_report([passed_result], "d", run_id="r2")
        target = write_run_report(report, tmp_path / "out" / "report.json")
        with open(target, encoding="utf-8") as f:
            assert json.load(f) == report


class TestFormatSummary:
    def test_lists_failures_with_error_output(self, passed_result, validation_failure):
        text = format_summary(summarize([passed_result, validation_failure]))
        assert "Files   : 2" in text
        assert "Failed  : 1" in text
        assert "typescript.js" in text
        assert "ValidationError" in text
        assert "SyntaxError: Unexpected end of input" in text
        assert text.rstrip().endswith("FAIL")

    def test_all_passed(self, passed_result):
        text = format_summary(summarize([passed_result]))
        assert "Failures" not in text
        assert text.rstrip().endswith("PASS")
        assert "mean reduction 60.0%" in text

    def test_error_output_truncated(self):
        noisy = ValidationResult(
            file_path="big.js",
            transform_succeeded=True,
            validation_succeeded=False,
            error_output="x" * 500,
            error_kind="ValidationError",
        )
        text = format_summary(summarize([noisy]), max_error_chars=100)
        assert "x" * 101 not in text
        assert "400 more characters" in text
