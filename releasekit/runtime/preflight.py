# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pre-flight validation for a platform release.

Answers "would this run get anywhere?" before spending ten minutes in a
release compile: are the external tools on PATH, are the documents present,
is there room in the target directory. Each check reports a result instead
of raising, so one call shows every problem at once.
"""

import logging
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.targets.descriptor import ArchiveKind, TargetDescriptor

_logger: logging.Logger = get_logger(__name__)

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 11
MIN_DISK_SPACE_BYTES: int = 1_073_741_824  # 1 GB


@dataclass(frozen=True)
class EnvironmentCheck:
    """Result of a single environment check."""

    name: str
    passed: bool
    message: str
    value: str


def check_python_version() -> EnvironmentCheck:
    """Verify Python >= 3.11."""
    major, minor, micro = sys.version_info[:3]
    version_str = f"{major}.{minor}.{micro}"
    passed = major > MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor >= MINIMUM_PYTHON_MINOR
    )
    if passed:
        msg = f"Python {version_str} meets minimum {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}"
    else:
        msg = (
            f"Python {version_str} does NOT meet minimum "
            f"{MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}"
        )
    return EnvironmentCheck(name="python_version", passed=passed, message=msg, value=version_str)


def check_tool(tool: str) -> EnvironmentCheck:
    """Check that an external program can be found on PATH."""
    location = shutil.which(tool)
    if location is None:
        return EnvironmentCheck(
            name=f"tool:{tool}",
            passed=False,
            message=f"{tool} not found on PATH",
            value="missing",
        )
    return EnvironmentCheck(
        name=f"tool:{tool}",
        passed=True,
        message=f"{tool} found at {location}",
        value=location,
    )


def check_document(project_root: Path, relpath: str) -> EnvironmentCheck:
    path = project_root / relpath
    passed = path.is_file()
    return EnvironmentCheck(
        name=f"document:{relpath}",
        passed=passed,
        message=f"{relpath} present" if passed else f"{relpath} missing from {project_root}",
        value=str(path) if passed else "missing",
    )


def check_disk_space(path: Path) -> EnvironmentCheck:
    """Check available disk space at the given path (or its nearest existing parent)."""
    check_path = path
    while not check_path.exists() and check_path != check_path.parent:
        check_path = check_path.parent
    try:
        usage = shutil.disk_usage(str(check_path))
    except OSError as err:
        return EnvironmentCheck(
            name="disk_space",
            passed=False,
            message=f"Cannot check disk space: {err}",
            value="error",
        )

    free_gb = usage.free / (1024**3)
    passed = usage.free >= MIN_DISK_SPACE_BYTES
    if passed:
        msg = f"{free_gb:.1f} GB free (minimum {MIN_DISK_SPACE_BYTES / (1024**3):.0f} GB)"
    else:
        msg = (
            f"Only {free_gb:.1f} GB free, need at least "
            f"{MIN_DISK_SPACE_BYTES / (1024**3):.0f} GB"
        )
    return EnvironmentCheck(name="disk_space", passed=passed, message=msg, value=f"{free_gb:.1f}GB")


def required_tools(descriptor: TargetDescriptor, config: ReleaseConfig) -> list[str]:
    """External programs a run for this descriptor will invoke, in stage order."""
    tools = [config.toolchain.vcs_tool, config.toolchain.build_command[0]]
    if descriptor.requires_merge:
        tools.append(config.toolchain.merge_tool)
    if descriptor.archive_kind is ArchiveKind.DMG:
        tools.append(config.toolchain.disk_image_tool)
    return tools


def validate_environment(
    descriptor: TargetDescriptor,
    config: ReleaseConfig,
    project_root: Path,
) -> list[EnvironmentCheck]:
    """
    Run every pre-flight check for one platform.

    Returns:
        One EnvironmentCheck per check. Callers inspect `passed`.
    """
    checks = [check_python_version()]
    checks.extend(check_tool(tool) for tool in required_tools(descriptor, config))
    checks.extend(
        check_document(project_root, getattr(config.paths, rule.source.value))
        for rule in descriptor.documents
    )
    checks.append(check_disk_space(project_root / config.paths.target_dir))

    for check in checks:
        log_fn = _logger.info if check.passed else _logger.error
        log_fn(
            "Environment check",
            extra={
                "platform": descriptor.platform_name,
                "check": check.name,
                "passed": check.passed,
                "check_message": check.message,
            },
        )

    passed_count = sum(1 for c in checks if c.passed)
    _logger.info(
        "Environment validation complete",
        extra={"passed": passed_count, "failed": len(checks) - passed_count},
    )
    return checks
