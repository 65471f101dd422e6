# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release build invocation.

Runs the external toolchain once per compiler triple in the descriptor, in
order, in release mode. The first failure aborts: a half-built release must
never reach staging. A zero exit is not taken on trust either; the binary has
to exist at the path the toolchain convention promises.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import BinaryNotFound, BuildFailed
from releasekit.targets.descriptor import TargetDescriptor
from releasekit.utils.process import CommandRunner, run_command

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildArtifact:
    """A freshly built binary for one triple. Only lives for the current run."""

    triple: str
    path: Path


def build_command_for(triple: str, config: ReleaseConfig) -> list[str]:
    return [*config.toolchain.build_command, "--target", triple]


def _build_one(
    triple: str,
    descriptor: TargetDescriptor,
    config: ReleaseConfig,
    project_root: Path,
    runner: CommandRunner,
) -> BuildArtifact:
    cmd = build_command_for(triple, config)
    _logger.info(
        "Building release binary",
        extra={"platform": descriptor.platform_name, "triple": triple},
    )

    try:
        proc = runner(cmd, project_root)
    except FileNotFoundError as err:
        raise BuildFailed(f"Build tool not found: {cmd[0]}") from err
    except OSError as err:
        raise BuildFailed(f"Build tool {cmd[0]} could not be started: {err}") from err

    if proc.returncode != 0:
        raise BuildFailed(
            f"Build for {triple} failed with exit code {proc.returncode}: {' '.join(cmd)}"
        )

    binary_path = (project_root / descriptor.binary_relpath(triple, config)).resolve()
    if not binary_path.is_file():
        raise BinaryNotFound(
            f"Build for {triple} reported success but no binary exists at {binary_path}"
        )

    _logger.info(
        "Build finished",
        extra={"triple": triple, "binary": str(binary_path)},
    )
    return BuildArtifact(triple=triple, path=binary_path)


def invoke_build(
    descriptor: TargetDescriptor,
    config: ReleaseConfig,
    project_root: Path,
    runner: CommandRunner = run_command,
) -> tuple[BuildArtifact, ...]:
    """
    Build every triple the descriptor needs.

    Returns:
        One BuildArtifact per triple, in descriptor order.

    Raises:
        BuildFailed: The toolchain is missing, cannot be started, or exited
            non-zero.
        BinaryNotFound: The toolchain succeeded but the binary is absent.
    """
    return tuple(
        _build_one(triple, descriptor, config, project_root, runner)
        for triple in descriptor.compiler_triples
    )
