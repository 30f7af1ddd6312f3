"""Invocation helpers for the external LaTeX tools."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import IO, Optional, Sequence, Union

from .exceptions import ToolNotFoundError

LOGGER = logging.getLogger("texdiff.runner")

Stream = Union[int, IO[str], None]


def which(executable: str) -> Optional[str]:
    """Return the full path of *executable* if it is on ``PATH``."""

    found = shutil.which(executable)
    if found:
        LOGGER.debug("Detected external tool: %s -> %s", executable, found)
    return found


class ToolRunner:
    """Run external commands synchronously inside a working directory.

    Output destinations are passed through to :func:`subprocess.run`: an open
    file, ``subprocess.DEVNULL`` or ``subprocess.PIPE``. Non-zero exit codes are
    returned, never raised; callers decide what a failure means.
    """

    def __init__(self, cwd: Path) -> None:
        self.cwd = Path(cwd)

    def run(
        self,
        command: Sequence[str],
        *,
        stdout: Stream = subprocess.DEVNULL,
        stderr: Stream = subprocess.STDOUT,
    ) -> subprocess.CompletedProcess:
        LOGGER.debug("Executing command in %s: %s", self.cwd, " ".join(command))
        try:
            completed = subprocess.run(
                list(command),
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=stderr,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            LOGGER.error("Executable not found: %s", command[0])
            raise ToolNotFoundError(f"{command[0]} not found on PATH") from exc
        except OSError as exc:
            LOGGER.error("Failed to execute %s: %s", command[0], exc)
            raise ToolNotFoundError(f"Failed to execute {command[0]}: {exc}") from exc

        LOGGER.debug("%s finished with exit code %s", command[0], completed.returncode)
        return completed

    def run_to_file(self, command: Sequence[str], log_path: Path) -> int:
        """Run *command* with stdout and stderr written to *log_path*."""

        with log_path.open("w", encoding="utf-8") as handle:
            return self.run(command, stdout=handle).returncode

    def run_quietly(self, command: Sequence[str]) -> int:
        """Run *command* discarding all output."""

        return self.run(command).returncode


__all__ = ["ToolRunner", "which"]
