"""
Runner for the Fixture Validation Harness.

Reads:
  - <fixture_dir>/*.js   (default: test-js-libs/, see FIXTURE_DIR)

For every fixture:
  - build/native/minify js <fixture>   (TRANSFORM_COMMAND)
  - node -c <minified>                 (VALIDATOR_COMMAND)

Writes (optional):
  - JSON report (--report / REPORT_PATH)
  - Prometheus textfile metrics (METRICS_TEXTFILE)

Exit code: 0 all passed, 1 any failure, 2 setup error, 130 cancelled.
"""
import argparse
import logging
import signal
import sys
import uuid
from typing import List, Optional

from src.config import settings
from src.config.constants import EXIT_CANCELLED, EXIT_SETUP_ERROR, PROGRESS_LOGGER
from src.harness.errors import RunCancelled, SetupError
from src.harness.fixture_validator import FixtureValidator
from src.harness.metrics import write_metrics_textfile
from src.harness.report import (
    build_run_report,
    exit_code_for,
    format_summary,
    summarize,
    write_run_report,
)

logger = logging.getLogger("run_fixture_validation")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Minify every fixture file and syntax-check the result.",
    )
    parser.add_argument(
        "fixture_dir",
        nargs="?",
        default=settings.FIXTURE_DIR,
        help=f"directory holding the fixture files (default: {settings.FIXTURE_DIR})",
    )
    parser.add_argument("--workers", type=int, default=settings.MAX_WORKERS)
    parser.add_argument("--timeout", type=float, default=settings.FILE_TIMEOUT_SECONDS)
    parser.add_argument("--language", default=settings.TRANSFORM_LANGUAGE or None)
    parser.add_argument("--report", default=settings.REPORT_PATH or None)
    return parser.parse_args(argv)


def _raise_cancelled(signum, _frame):
    raise RunCancelled(signum)


def main(argv: Optional[List[str]] = None) -> int:
    # ---------------------------------------------------------------------------
    # Setup logging
    # ---------------------------------------------------------------------------
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger(PROGRESS_LOGGER).setLevel(logging.INFO)
    args = _parse_args(argv)
    run_id = uuid.uuid4().hex[:12]

    logger.info("run_id            : %s", run_id)
    logger.info("fixture_dir       : %s", args.fixture_dir)
    logger.info("transform command : %s", " ".join(settings.TRANSFORM_COMMAND))
    logger.info("validator command : %s", " ".join(settings.VALIDATOR_COMMAND))
    logger.info("workers           : %d", args.workers)

    # ---------------------------------------------------------------------------
    # Validator + setup checks
    # ---------------------------------------------------------------------------
    try:
        validator = FixtureValidator(
            settings.TRANSFORM_COMMAND,
            settings.VALIDATOR_COMMAND,
            language=args.language,
            fixture_glob=settings.FIXTURE_GLOB,
            max_workers=args.workers,
            timeout=args.timeout,
            scratch_dir=settings.SCRATCH_DIR or None,
        )
        results_iter = validator.run(args.fixture_dir)
    except SetupError as exc:
        logger.error("Setup failed: %s", exc)
        return EXIT_SETUP_ERROR

    # ---------------------------------------------------------------------------
    # Run (SIGTERM / SIGINT cancel in-flight tools)
    # ---------------------------------------------------------------------------
    previous_handlers = {
        signum: signal.signal(signum, _raise_cancelled)
        for signum in (signal.SIGTERM, signal.SIGINT)
    }
    results = []
    try:
        for result in results_iter:
            results.append(result)
    except RunCancelled as exc:
        validator.cancel()
        logger.error("%s - %d file(s) completed before cancellation", exc, len(results))
        return EXIT_CANCELLED
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)

    # ---------------------------------------------------------------------------
    # Output
    # ---------------------------------------------------------------------------
    if args.report:
        write_run_report(build_run_report(results, args.fixture_dir, run_id), args.report)
    if settings.METRICS_TEXTFILE:
        write_metrics_textfile(settings.METRICS_TEXTFILE)

    print("\n" + format_summary(summarize(results), settings.MAX_ERROR_OUTPUT_CHARS) + "\n")
    return exit_code_for(results)


if __name__ == "__main__":
    sys.exit(main())
