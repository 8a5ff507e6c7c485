"""
JSON Schema for the run report written by the fixture validation harness.

The report is validated against RUN_REPORT_SCHEMA (jsonschema) before it is
returned, so a malformed report never reaches disk.
"""
from src.config.constants import ERROR_KINDS, REPORT_SCHEMA_VERSION

# =============================================================================
# Per-file result
# =============================================================================
RESULT_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "required": [
        "file_path",
        "transform_succeeded",
        "validation_succeeded",
        "passed",
        "error_kind",
        "error_output",
        "input_bytes",
        "output_bytes",
        "duration_ms",
    ],
    "properties": {
        "file_path": {"type": "string"},
        "transform_succeeded": {"type": "boolean"},
        "validation_succeeded": {"type": "boolean"},
        "passed": {"type": "boolean"},
        "error_kind": {
            "anyOf": [
                {"type": "null"},
                {"type": "string", "enum": ERROR_KINDS},
            ],
        },
        "error_output": {"type": ["string", "null"]},
        "input_bytes": {"type": "integer", "minimum": 0},
        "output_bytes": {"type": ["integer", "null"], "minimum": 0},
        "duration_ms": {"type": "integer", "minimum": 0},
    },
}


# =============================================================================
# Run report
# =============================================================================
RUN_REPORT_SCHEMA: dict = {
    "type": "object",
    "required": ["schema_version", "run_id", "fixture_dir", "summary", "results"],
    "properties": {
        "schema_version": {"type": "string", "const": REPORT_SCHEMA_VERSION},
        "run_id": {"type": "string"},
        "fixture_dir": {"type": "string"},
        "summary": {
            "type": "object",
            "required": [
                "total",
                "passed",
                "failed",
                "failures_by_kind",
                "total_input_bytes",
                "total_output_bytes",
                "mean_reduction_pct",
                "duration_ms_p50",
                "duration_ms_max",
            ],
            "properties": {
                "total": {"type": "integer", "minimum": 0},
                "passed": {"type": "integer", "minimum": 0},
                "failed": {"type": "integer", "minimum": 0},
                "failures_by_kind": {
                    "type": "object",
                    "propertyNames": {"enum": ERROR_KINDS},
                    "additionalProperties": {"type": "integer", "minimum": 1},
                },
                "total_input_bytes": {"type": "integer", "minimum": 0},
                "total_output_bytes": {"type": "integer", "minimum": 0},
                "mean_reduction_pct": {"type": ["number", "null"]},
                "duration_ms_p50": {"type": ["number", "null"]},
                "duration_ms_max": {"type": ["integer", "null"]},
            },
        },
        "results": {"type": "array", "items": RESULT_SCHEMA},
    },
}
