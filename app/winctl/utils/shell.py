"""Subprocess helpers for the winget wrapper."""

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Keep winget from flashing a console window when run from a GUI host
_CREATION_FLAGS = subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one process run.

    Attributes:
        stdout: Standard output, decoded.
        stderr: Standard error, decoded.
        returncode: Exit code as reported by the OS.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, stripped."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def run_command(args: list[str], *, timeout: float | None = 120.0) -> CommandResult:
    """Run a command to completion and capture its output.

    Output is decoded as UTF-8 with replacement, since winget mixes
    console code page output with progress glyphs.

    Raises:
        subprocess.TimeoutExpired: If the command exceeds ``timeout``.
        FileNotFoundError: If the executable is not found.
    """
    logger.debug("Running: %s", " ".join(args))
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        creationflags=_CREATION_FLAGS,
    )
    logger.debug("Exit code %d from %s", completed.returncode, args[0])
    return CommandResult(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    """Return True if ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None
