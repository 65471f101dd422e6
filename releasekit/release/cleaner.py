# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Target directory cleanup.

Failed runs deliberately leave their staging directories (and, for disk
images, the writable intermediate image) behind for diagnosis. This module
removes that leftover state on request.

It is conservative. It only deletes names the pipeline itself produces:

  <stem>-<platform>-<rev>/          staging directories
  <stem>-<platform>-<rev>_tmp.dmg   intermediate disk images
  .releasekit_tmp_*                 interrupted atomic writes

Final artifacts, the .app bundle and the toolchain's own output are never
touched.
"""

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.targets.descriptor import TARGETS
from releasekit.utils.filesystem import TEMP_PREFIX
from releasekit.utils.paths import resolve_target_dir

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class CleanResult:
    """Outcome of a cleanup operation."""

    removed_dirs: int
    removed_files: int
    freed_bytes: int
    errors: list[str] = field(default_factory=list)


def _staging_name_pattern(config: ReleaseConfig) -> re.Pattern[str]:
    stems = {config.app.package_name, config.app.app_name}
    alternatives = sorted(
        f"{re.escape(stem)}-{re.escape(platform)}"
        for stem in stems
        for platform in TARGETS
    )
    return re.compile(rf"^(?:{'|'.join(alternatives)})-(?P<rev>[0-9a-f]{{4,40}})$")


def _size_of(path: Path) -> int:
    if path.is_file():
        return path.stat().st_size
    total = 0
    for f in path.rglob("*"):
        if f.is_file() and not f.is_symlink():
            total += f.stat().st_size
    return total


def clean_target(
    project_root: Path,
    config: ReleaseConfig,
    keep_version: Optional[str] = None,
) -> CleanResult:
    """
    Remove leftover staging state from the target directory.

    Args:
        project_root: Project whose target directory is cleaned.
        config: Supplies the target directory and artifact name stems.
        keep_version: Leave state for this revision alone.

    Returns:
        CleanResult with counts of removed items.
    """
    target_dir = resolve_target_dir(project_root, config.paths.target_dir)
    if not target_dir.is_dir():
        _logger.info("Nothing to clean", extra={"target_dir": str(target_dir)})
        return CleanResult(removed_dirs=0, removed_files=0, freed_bytes=0)

    pattern = _staging_name_pattern(config)
    removed_dirs = 0
    removed_files = 0
    freed_bytes = 0
    errors: list[str] = []

    for entry in sorted(target_dir.iterdir()):
        name = entry.name
        if entry.is_dir() and not entry.is_symlink():
            match = pattern.match(name)
            if match is None or match.group("rev") == keep_version:
                continue
            try:
                size = _size_of(entry)
                shutil.rmtree(entry)
                removed_dirs += 1
                freed_bytes += size
                _logger.debug("Removed staging directory", extra={"path": str(entry)})
            except OSError as err:
                errors.append(f"Failed to remove {entry}: {err}")
            continue

        if name.startswith(TEMP_PREFIX):
            stale = True
        elif name.endswith("_tmp.dmg"):
            match = pattern.match(name[: -len("_tmp.dmg")])
            stale = match is not None and match.group("rev") != keep_version
        else:
            stale = False

        if not stale:
            continue
        try:
            size = entry.stat().st_size
            entry.unlink()
            removed_files += 1
            freed_bytes += size
            _logger.debug("Removed intermediate file", extra={"path": str(entry)})
        except OSError as err:
            errors.append(f"Failed to remove {entry}: {err}")

    _logger.info(
        "Cleanup complete",
        extra={
            "target_dir": str(target_dir),
            "removed_dirs": removed_dirs,
            "removed_files": removed_files,
            "freed_mb": f"{freed_bytes / (1024 * 1024):.1f}",
            "errors": len(errors),
        },
    )

    return CleanResult(
        removed_dirs=removed_dirs,
        removed_files=removed_files,
        freed_bytes=freed_bytes,
        errors=errors,
    )
