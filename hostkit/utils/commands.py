"""
Subprocess execution helpers.

All external tools (git, arp, lsof, netstat, ss, host, nslookup) are run
through ``run_command`` so output capture and failure reporting look the same
everywhere.
"""

import os
import subprocess
from typing import List, Optional, Union

from .logging import get_logger

logger = get_logger("commands")

PathLike = Union[str, os.PathLike]


class CommandError(Exception):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(
        self,
        command: List[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        stdout: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout

        detail = stderr.strip() or stdout.strip()
        message = f"Command failed: {' '.join(command)}"
        if returncode is not None:
            message += f" (exit {returncode})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


def run_command(
    command: List[str],
    cwd: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """
    Run a command and capture its text output.

    The returned CompletedProcess is handed back regardless of the exit code;
    callers decide what a non-zero exit means. A missing executable or a
    timeout is raised as CommandError.

    Args:
        command: Command and arguments
        cwd: Working directory
        timeout: Seconds before the command is killed; None waits forever

    Returns:
        CompletedProcess with text stdout/stderr
    """
    logger.debug(f"Running command: {' '.join(command)}", extra={"cwd": str(cwd)})

    try:
        return subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandError(command, stderr=str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(command, stderr=f"timed out after {timeout}s") from e


def check_output(
    command: List[str],
    cwd: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> str:
    """Run a command and return stdout, raising CommandError on non-zero exit."""
    result = run_command(command, cwd=cwd, timeout=timeout)
    if result.returncode != 0:
        raise CommandError(command, result.returncode, result.stderr, result.stdout)
    return result.stdout
