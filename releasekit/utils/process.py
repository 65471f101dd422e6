# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
External command execution.

Every stage that shells out (git, cargo, lipo, hdiutil) takes a
`CommandRunner` so tests can substitute a fake toolchain. The real runner is
a thin wrapper around `subprocess.run` that never raises on a non-zero exit;
callers inspect `returncode` and raise their own stage error. A missing
executable surfaces as FileNotFoundError, one that cannot be
started (no exec bit, a directory, a bad binary format) as another OSError.

There is no timeout: external tools are trusted to terminate.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from releasekit.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)


class CommandRunner(Protocol):
    def __call__(
        self,
        args: Sequence[str],
        cwd: Path,
        capture: bool = False,
    ) -> "subprocess.CompletedProcess[str]": ...


def run_command(
    args: Sequence[str],
    cwd: Path,
    capture: bool = False,
) -> "subprocess.CompletedProcess[str]":
    """
    Run an external command to completion.

    Args:
        args: Program and arguments. Never passed through a shell.
        cwd: Working directory for the child process.
        capture: Capture stdout/stderr as text instead of inheriting the
                 terminal. Build output is left streaming so long compiles
                 show progress.

    Raises:
        FileNotFoundError: If the program is not installed.
        OSError: If the program exists but cannot be executed.
    """
    cmd = [str(a) for a in args]
    _logger.debug("Running command", extra={"cmd": " ".join(cmd), "cwd": str(cwd)})

    proc = subprocess.run(
        cmd,
        cwd=str(cwd),
        capture_output=capture,
        text=True,
        check=False,
    )

    _logger.debug(
        "Command exited",
        extra={"cmd": cmd[0], "returncode": proc.returncode},
    )
    return proc
