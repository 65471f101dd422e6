# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Universal binary creation.

Two single-architecture Mach-O binaries go into `lipo -create` and one fat
binary comes out, runnable natively on both Apple Silicon and Intel.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from releasekit.build.invoker import BuildArtifact
from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import MergeFailed
from releasekit.utils.filesystem import make_executable, safe_delete
from releasekit.utils.process import CommandRunner, run_command

_logger: logging.Logger = get_logger(__name__)

UNIVERSAL_DIR_NAME = "universal-apple-darwin"


def merge_binaries(
    artifacts: Sequence[BuildArtifact],
    output_path: Path,
    runner: CommandRunner = run_command,
    merge_tool: str = "lipo",
) -> Path:
    """
    Merge two per-architecture binaries into one universal binary.

    The executable bits are set explicitly on the result; lipo does not
    promise to carry them over.

    Args:
        artifacts: Exactly two build artifacts.
        output_path: Where the universal binary is written. Its parent is created.
        runner: Command runner (injected by tests).
        merge_tool: Name or path of lipo.

    Returns:
        The output path.

    Raises:
        MergeFailed: Wrong input count, a missing input, lipo missing or
            failing, or no output produced.
    """
    if len(artifacts) != 2:
        raise MergeFailed(f"Universal merge needs exactly two binaries, got {len(artifacts)}")

    for artifact in artifacts:
        if not artifact.path.is_file():
            raise MergeFailed(f"Input binary for {artifact.triple} is missing: {artifact.path}")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        safe_delete(output_path)
    except OSError as err:
        raise MergeFailed(f"Cannot prepare merge output {output_path}: {err}") from err

    cmd = [merge_tool, "-create", *(str(a.path) for a in artifacts), "-output", str(output_path)]
    _logger.info(
        "Creating universal binary",
        extra={"triples": [a.triple for a in artifacts], "output": str(output_path)},
    )

    try:
        proc = runner(cmd, output_path.parent, capture=True)
    except FileNotFoundError as err:
        raise MergeFailed(f"Merge tool not found: {merge_tool}") from err
    except OSError as err:
        raise MergeFailed(f"{merge_tool} could not be started: {err}") from err

    if proc.returncode != 0:
        detail = (proc.stderr or "").strip()
        raise MergeFailed(f"{merge_tool} exited {proc.returncode}: {detail}")

    if not output_path.is_file():
        raise MergeFailed(f"{merge_tool} reported success but wrote nothing at {output_path}")

    try:
        make_executable(output_path)
    except OSError as err:
        raise MergeFailed(f"Cannot mark {output_path} executable: {err}") from err
    return output_path
