"""
FixtureValidator - runs every fixture file through the transform tool and
checks the transformed output with the validator tool.

Per-file pipeline:
    1. Transform  (<transform command> <language> <fixture>  -> stdout)
    2. Validate   (<validator command> <tmpfile holding stdout>)
    3. Record a ValidationResult

A failure at either step marks only that file failed; the run continues
with the next file. Results are yielded in fixture path order whether the
files are checked sequentially or on a thread pool.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from src.config.constants import (
    EXTENSION_LANGUAGES,
    PROGRESS_LOGGER,
    SUPPORTED_LANGUAGES,
    TEMP_PREFIX,
)
from src.harness.errors import (
    ExternalToolError,
    SetupError,
    TransformError,
    ValidationError,
)
from src.harness.external_tool import ProcessRegistry, invoke_external_tool
from src.harness.metrics import record_result, record_tool_failure, timed_check
from src.models.validation import ValidationResult

logger = logging.getLogger(__name__)
# Per-file progress lines; kept at INFO by the runner whatever LOG_LEVEL is.
progress_logger = logging.getLogger(PROGRESS_LOGGER)


# ======================================================================
# Temporary output artifact
# ======================================================================

@contextmanager
def transformed_output_file(
    content: bytes,
    suffix: str = "",
    directory: Optional[str | Path] = None,
) -> Iterator[Path]:
    """
    Write *content* to a uniquely named temporary file and yield its path.

    The file is removed when the block exits, whether it exits normally or
    through an exception.
    """
    name: Optional[str] = None
    try:
        fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=suffix, dir=directory)
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
        yield Path(name)
    finally:
        if name is not None:
            try:
                os.unlink(name)
            except FileNotFoundError:
                pass


# ======================================================================
# Validator
# ======================================================================

class FixtureValidator:
    """
    Drives the transform -> validate check over a directory of fixtures.

    Args:
        transform_command: Transform executable plus fixed arguments.
        validator_command: Validator executable plus fixed arguments
                           (e.g. ``["node", "-c"]``).
        language:          Fixed language tag for the transform tool. When
                           ``None`` the tag is inferred from each file's extension.
        fixture_glob:      Pattern selecting fixture files in the directory.
        max_workers:       1 runs files sequentially, >1 uses a thread pool.
        timeout:           Per-tool-invocation timeout in seconds (``None`` = none).
        scratch_dir:       Where temporary outputs are written (``None`` = system temp).
    """

    def __init__(
        self,
        transform_command: Sequence[str],
        validator_command: Sequence[str],
        *,
        language: Optional[str] = None,
        fixture_glob: str = "*.js",
        max_workers: int = 1,
        timeout: Optional[float] = None,
        scratch_dir: Optional[str | Path] = None,
    ) -> None:
        if language is not None and language not in SUPPORTED_LANGUAGES:
            raise SetupError(
                f"Unsupported language '{language}' (expected one of {SUPPORTED_LANGUAGES})"
            )
        if max_workers < 1:
            raise SetupError(f"max_workers must be >= 1, got {max_workers}")
        if timeout is not None and timeout < 0:
            raise SetupError(f"timeout must be >= 0 seconds, got {timeout:g}")

        self.transform_command: List[str] = list(transform_command)
        self.validator_command: List[str] = list(validator_command)
        self.language = language
        self.fixture_glob = fixture_glob
        self.max_workers = max_workers
        self.timeout = timeout if timeout else None
        self.scratch_dir = Path(scratch_dir) if scratch_dir else None
        self._registry = ProcessRegistry()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def discover(self, fixture_dir: str | Path) -> List[Path]:
        """Return the fixture files in *fixture_dir*, sorted by path."""
        root = Path(fixture_dir)
        if not root.exists():
            raise SetupError(f"Fixture directory not found: {root}")
        if not root.is_dir():
            raise SetupError(f"Fixture path is not a directory: {root}")
        return sorted(p for p in root.glob(self.fixture_glob) if p.is_file())

    def check_tools(self) -> None:
        """Fail fast when either external tool cannot be found."""
        for role, command in (
            ("transform", self.transform_command),
            ("validator", self.validator_command),
        ):
            if not command:
                raise SetupError(f"No {role} command configured")
            if shutil.which(command[0]) is None:
                raise SetupError(f"{role.capitalize()} tool not found or not executable: {command[0]}")
        if self.scratch_dir is not None and not self.scratch_dir.is_dir():
            raise SetupError(f"Scratch directory not found: {self.scratch_dir}")

    def language_for(self, path: Path) -> str:
        """Language tag passed to the transform tool for *path*."""
        if self.language is not None:
            return self.language
        language = EXTENSION_LANGUAGES.get(path.suffix.lower())
        if language is None:
            raise TransformError(
                [*self.transform_command, str(path)],
                None,
                reason=f"has no language tag for extension '{path.suffix}'",
            )
        return language

    # ------------------------------------------------------------------
    # Single file
    # ------------------------------------------------------------------

    def validate_file(self, path: str | Path) -> ValidationResult:
        """
        Transform and validate one fixture file.

        Per-file failures never raise: they are returned as a failed
        ValidationResult. Interruptions (KeyboardInterrupt, RunCancelled)
        propagate after the temporary file has been removed.
        """
        with timed_check():
            result = self._check(Path(path))
        record_result(result)
        return result

    def _check(self, path: Path) -> ValidationResult:
        progress_logger.info("Checking %s", path)
        start = time.monotonic()
        try:
            input_bytes = path.stat().st_size
        except OSError:
            input_bytes = 0

        # --- Step 1: transform ---
        try:
            language = self.language_for(path)
            transformed = invoke_external_tool(
                self.transform_command,
                [language, str(path)],
                error_cls=TransformError,
                timeout=self.timeout,
                registry=self._registry,
            )
        except ExternalToolError as exc:
            return self._failed(path, exc, "transform", start, input_bytes)

        logger.debug("%s: transform took %d ms", path, transformed.duration_ms)
        output_bytes = len(transformed.stdout)

        # --- Step 2: validate ---
        try:
            with transformed_output_file(
                transformed.stdout, path.suffix, self.scratch_dir
            ) as output_path:
                checked = invoke_external_tool(
                    self.validator_command,
                    [str(output_path)],
                    error_cls=ValidationError,
                    timeout=self.timeout,
                    registry=self._registry,
                )
        except ExternalToolError as exc:
            return self._failed(path, exc, "validator", start, input_bytes, output_bytes)

        logger.debug("%s: validated by '%s' in %d ms", path, checked.command_line, checked.duration_ms)

        return ValidationResult(
            file_path=str(path),
            transform_succeeded=True,
            validation_succeeded=True,
            input_bytes=input_bytes,
            output_bytes=output_bytes,
            duration_ms=_elapsed_ms(start),
        )

    def _failed(
        self,
        path: Path,
        exc: ExternalToolError,
        tool: str,
        start: float,
        input_bytes: int,
        output_bytes: Optional[int] = None,
    ) -> ValidationResult:
        logger.warning("%s failed (%s): %s", path, exc.kind, exc)
        record_tool_failure(tool, exc.kind)
        return ValidationResult(
            file_path=str(path),
            transform_succeeded=tool != "transform",
            validation_succeeded=False,
            error_output=exc.error_output,
            error_kind=exc.kind,
            input_bytes=input_bytes,
            output_bytes=output_bytes,
            duration_ms=_elapsed_ms(start),
        )

    # ------------------------------------------------------------------
    # Whole run
    # ------------------------------------------------------------------

    def run(self, fixture_dir: str | Path) -> Iterator[ValidationResult]:
        """
        Check every fixture in *fixture_dir*.

        Setup (tool lookup, fixture discovery) happens eagerly so SetupError
        is raised by this call; results are then produced lazily, in path
        order, by the returned iterator.

        Raises:
            SetupError: Missing fixture directory or external tool.
        """
        self.check_tools()
        files = self.discover(fixture_dir)
        logger.info("Found %d fixture file(s) in %s", len(files), fixture_dir)
        self._registry = ProcessRegistry()
        if self.max_workers == 1:
            return self._iter_sequential(files)
        return self._iter_parallel(files)

    def _iter_sequential(self, files: List[Path]) -> Iterator[ValidationResult]:
        for path in files:
            result = self.validate_file(path)
            if self._registry.closed:
                return
            yield result

    def _iter_parallel(self, files: List[Path]) -> Iterator[ValidationResult]:
        executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="fixture-check",
        )
        futures = [executor.submit(self.validate_file, path) for path in files]
        completed = False
        try:
            for future in futures:
                result = future.result()
                if self._registry.closed:
                    # Cancelled: the remaining results come from killed tools.
                    return
                yield result
            completed = True
        finally:
            if not completed:
                self.cancel()
            executor.shutdown(wait=True, cancel_futures=True)

    def cancel(self) -> None:
        """Terminate in-flight tool processes; no further process may start."""
        self._registry.terminate_all()


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
