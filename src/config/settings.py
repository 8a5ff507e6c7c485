"""
Environment settings loaded from .env file.
"""
import os
import shlex
from dotenv import load_dotenv

load_dotenv()


# --- Fixtures ---
FIXTURE_DIR: str = os.getenv("FIXTURE_DIR", "test-js-libs")
FIXTURE_GLOB: str = os.getenv("FIXTURE_GLOB", "*.js")

# --- External tools ---
TRANSFORM_COMMAND: list = shlex.split(os.getenv("TRANSFORM_COMMAND", "build/native/minify"))
TRANSFORM_LANGUAGE: str = os.getenv("TRANSFORM_LANGUAGE", "")     # empty = infer from extension
VALIDATOR_COMMAND: list = shlex.split(os.getenv("VALIDATOR_COMMAND", "node -c"))

# --- Execution ---
MAX_WORKERS: int = int(os.getenv("MAX_WORKERS", "1"))
FILE_TIMEOUT_SECONDS: float = float(os.getenv("FILE_TIMEOUT_SECONDS", "0"))  # 0 = no timeout
SCRATCH_DIR: str = os.getenv("SCRATCH_DIR", "")                   # empty = system temp

# --- Output ---
REPORT_PATH: str = os.getenv("REPORT_PATH", "")
METRICS_TEXTFILE: str = os.getenv("METRICS_TEXTFILE", "")
MAX_ERROR_OUTPUT_CHARS: int = int(os.getenv("MAX_ERROR_OUTPUT_CHARS", "2000"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
