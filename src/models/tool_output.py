"""
ToolOutput: captured result of one finished external process.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ToolOutput:
    """What an external tool left behind after exiting."""

    argv: Tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: str
    duration_ms: int = 0

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)
