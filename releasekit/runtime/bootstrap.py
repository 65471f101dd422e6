# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for releasekit.

One-time setup before any stage runs:
  1. Validate the interpreter
  2. Apply the log level and optional log file to every releasekit logger
  3. Log where we are running
  4. Ensure the target directory exists
"""

import platform
from pathlib import Path
from typing import Optional

from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger, set_log_level
from releasekit.runtime.preflight import check_python_version
from releasekit.utils.paths import ensure_directory, resolve_target_dir


def host_details() -> dict[str, str]:
    """Interpreter and machine details for the startup and info log lines."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.system(),
        "architecture": platform.machine(),
    }


def bootstrap(
    config: ReleaseConfig,
    project_root: Path,
    log_level: Optional[str] = None,
) -> None:
    """
    Put the process into a known state for a release run.

    Args:
        config: The validated configuration.
        project_root: Explicit project root; the log file and target
                      directory are resolved against it.
        log_level: CLI override for `global.log_level`.

    Raises:
        RuntimeError: If the interpreter is older than releasekit supports.
    """
    python_check = check_python_version()
    if not python_check.passed:
        raise RuntimeError(python_check.message)

    global_config = config.global_config
    level = log_level or global_config.log_level

    log_file = None
    if global_config.log_file is not None:
        log_file = project_root / global_config.log_file

    logger = get_logger("releasekit.runtime", log_level=level, log_file=log_file)
    set_log_level(level, log_file)

    logger.info(
        "releasekit bootstrap complete",
        extra={
            "project": global_config.project_name,
            "project_root": str(project_root),
            **host_details(),
        },
    )

    ensure_directory(resolve_target_dir(project_root, config.paths.target_dir))
