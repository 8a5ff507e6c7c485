"""
Shared test fixtures for the fixture validation harness test suite.

The real tools (build/native/minify, node -c) are replaced by two small
Python scripts run with the current interpreter:

- fake minifier: ``<script> <language> <file>`` collapses whitespace and
  prints the result; fails on the TRANSFORM_FAIL marker, hangs on the
  SLEEP marker (after recording its pid under <tools_dir>/pids/), rejects
  unknown language tags.
- fake syntax checker: ``<script> <file>`` exits 1 with a SyntaxError on
  stderr when braces/brackets/parens are unbalanced.
"""
import sys
import textwrap

import pytest

from src.harness.fixture_validator import FixtureValidator

TRANSFORM_FAIL_MARKER = "@@TRANSFORM_FAIL@@"
SLEEP_MARKER = "@@SLEEP@@"


FAKE_MINIFY = textwrap.dedent(
    f"""
    import os
    import sys
    import time

    if len(sys.argv) != 3:
        sys.stderr.write("Usage: minify <css|js|xml|html|json> <input file|->\\n")
        sys.exit(1)
    language, path = sys.argv[1], sys.argv[2]
    if language not in ("css", "js", "xml", "html", "json"):
        sys.stderr.write("Unsupported input format: %s\\n" % language)
        sys.exit(1)
    with open(path, encoding="utf-8") as f:
        source = f.read()
    if "{TRANSFORM_FAIL_MARKER}" in source:
        sys.stderr.write("Unterminated string literal at line 1, column 7\\n")
        sys.exit(1)
    if "{SLEEP_MARKER}" in source:
        pid_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "pids")
        os.makedirs(pid_dir, exist_ok=True)
        open(os.path.join(pid_dir, str(os.getpid())), "w").close()
        time.sleep(30)
    sys.stdout.write(" ".join(source.split()))
    """
)

FAKE_SYNTAX_CHECK = textwrap.dedent(
    """
    import sys

    PAIRS = {")": "(", "]": "[", "}": "{"}

    with open(sys.argv[1], encoding="utf-8") as f:
        source = f.read()
    stack = []
    for ch in source:
        if ch in "([{":
            stack.append(ch)
        elif ch in PAIRS:
            if not stack or stack.pop() != PAIRS[ch]:
                sys.stderr.write("SyntaxError: Unexpected token '%s'\\n" % ch)
                sys.exit(1)
    if stack:
        sys.stderr.write("SyntaxError: Unexpected end of input\\n")
        sys.exit(1)
    """
)


# ==========================================================================
# Stand-in tools
# ==========================================================================

@pytest.fixture
def tools_dir(tmp_path):
    path = tmp_path / "tools"
    path.mkdir()
    return path


@pytest.fixture
def transform_command(tools_dir):
    script = tools_dir / "fake_minify.py"
    script.write_text(FAKE_MINIFY, encoding="utf-8")
    return [sys.executable, str(script)]


@pytest.fixture
def validator_command(tools_dir):
    script = tools_dir / "fake_syntax_check.py"
    script.write_text(FAKE_SYNTAX_CHECK, encoding="utf-8")
    return [sys.executable, str(script)]


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


# ==========================================================================
# Fixture directories
# ==========================================================================

VALID_JS = "function add(a, b) {\n    return [a, b].reduce((x, y) => x + y, 0);\n}\n"
UNMATCHED_BRACE_JS = "function broken(a) {\n    if (a) {\n        return a;\n}\n"
TRUNCATED_JS = "var config = { name: 'react', deps: ['scheduler'"


@pytest.fixture
def fixture_dir(tmp_path):
    path = tmp_path / "test-js-libs"
    path.mkdir()
    return path


@pytest.fixture
def mixed_fixture_dir(fixture_dir):
    """a.js is valid, b.js has an unmatched brace."""
    (fixture_dir / "a.js").write_text(VALID_JS, encoding="utf-8")
    (fixture_dir / "b.js").write_text(UNMATCHED_BRACE_JS, encoding="utf-8")
    return fixture_dir


@pytest.fixture
def make_validator(transform_command, validator_command, scratch_dir):
    """Factory for a FixtureValidator wired to the stand-in tools."""

    def _make(**kwargs):
        kwargs.setdefault("scratch_dir", scratch_dir)
        return FixtureValidator(transform_command, validator_command, **kwargs)

    return _make
