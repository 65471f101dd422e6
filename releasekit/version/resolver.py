# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build identifier resolution.

Artifacts are named after the short hash of the checked-out revision. There
is deliberately no fallback: an artifact named "unknown" cannot be traced
back to source, so failing to read the revision fails the whole run.
"""

import logging
import re
from pathlib import Path

from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import VersionUnavailable
from releasekit.utils.process import CommandRunner, run_command

_logger: logging.Logger = get_logger(__name__)

# Short hashes are hex; refnames and error text are not.
_SHORT_REV_RE = re.compile(r"^[0-9a-f]{4,40}$")


def resolve_version(
    project_root: Path,
    runner: CommandRunner = run_command,
    vcs_tool: str = "git",
) -> str:
    """
    Return the short identifier of the current source revision.

    Runs `git rev-parse --short HEAD` in the project root.

    Args:
        project_root: Checkout whose HEAD names the build.
        runner: Command runner (injected by tests).
        vcs_tool: Name or path of the git executable.

    Returns:
        The short revision hash, e.g. "abc1234".

    Raises:
        VersionUnavailable: git is missing, the directory is not a checkout,
            or the output is not a single short hash.
    """
    try:
        proc = runner([vcs_tool, "rev-parse", "--short", "HEAD"], project_root, capture=True)
    except FileNotFoundError as err:
        raise VersionUnavailable(f"Version control tool not found: {vcs_tool}") from err
    except OSError as err:
        raise VersionUnavailable(f"Could not run {vcs_tool}: {err}") from err

    if proc.returncode != 0:
        detail = (proc.stderr or "").strip()
        raise VersionUnavailable(
            f"Could not read current revision in {project_root} "
            f"({vcs_tool} exited {proc.returncode}): {detail}"
        )

    lines = (proc.stdout or "").strip().splitlines()
    if len(lines) != 1:
        raise VersionUnavailable(
            f"Expected a single-line revision identifier, got {len(lines)} lines"
        )

    version_id = lines[0].strip()
    if not _SHORT_REV_RE.match(version_id):
        raise VersionUnavailable(f"Unrecognised revision identifier: {version_id!r}")

    _logger.info("Resolved build version", extra={"version_id": version_id})
    return version_id
