"""
Constants used across the harness.
Pinned so that two runs over the same fixtures behave identically.
"""
from typing import Dict, List

# =============================================================================
# Exit codes
# =============================================================================
EXIT_OK: int = 0
EXIT_FAILURES: int = 1
EXIT_SETUP_ERROR: int = 2
EXIT_CANCELLED: int = 130

# =============================================================================
# Transform tool languages (minify <css|js|xml|html|json> <file>)
# =============================================================================
SUPPORTED_LANGUAGES: List[str] = ["css", "js", "xml", "html", "json"]

EXTENSION_LANGUAGES: Dict[str, str] = {
    ".js": "js",
    ".mjs": "js",
    ".cjs": "js",
    ".css": "css",
    ".xml": "xml",
    ".svg": "xml",
    ".html": "html",
    ".htm": "html",
    ".json": "json",
}

# =============================================================================
# Error kinds (as reported on ValidationResult.error_kind)
# =============================================================================
ERROR_KIND_TRANSFORM: str = "TransformError"
ERROR_KIND_VALIDATION: str = "ValidationError"
ERROR_KIND_TIMEOUT: str = "TimeoutError"

ERROR_KINDS: List[str] = [ERROR_KIND_TRANSFORM, ERROR_KIND_VALIDATION, ERROR_KIND_TIMEOUT]

# =============================================================================
# Temporary artifacts
# =============================================================================
TEMP_PREFIX: str = "fixture-check-"

# =============================================================================
# Report
# =============================================================================
REPORT_SCHEMA_VERSION: str = "fixture-report-v1"
SUMMARY_WIDTH: int = 70

# =============================================================================
# Logging
# =============================================================================
PROGRESS_LOGGER: str = "src.harness.progress"
