# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Final artifact writers.

Three formats, picked by the descriptor's archive kind:

  tar.gz : gzip tarball, single top-level directory named after the package
  zip    : deflated zip with the same layout; Unix mode bits are kept in the
           entries' external attributes so the executable bit survives
  dmg    : via hdiutil, a writable UDRW image is created from the staging
           directory, converted to a compressed read-only UDZO image, and
           the intermediate is deleted. UDZO can't be written in one pass.

Any stale file at the destination is removed before writing. New archives
are produced under a temporary name and renamed into place, so the final
path only ever holds a complete artifact. On failure the staging directory
(and for dmg, the intermediate image) stays behind for inspection.
"""

import logging
import os
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import ArchiveFailed
from releasekit.targets.descriptor import ArchiveKind
from releasekit.utils.filesystem import atomic_output, safe_delete
from releasekit.utils.process import CommandRunner, run_command

_logger: logging.Logger = get_logger(__name__)


def _write_tarball(staging: Path, artifact_path: Path) -> None:
    with atomic_output(artifact_path, suffix=".tar.gz") as temp_path:
        with tarfile.open(temp_path, "w:gz") as tar:
            tar.add(str(staging), arcname=staging.name)


def _write_zip(staging: Path, artifact_path: Path) -> None:
    with atomic_output(artifact_path, suffix=".zip") as temp_path:
        with zipfile.ZipFile(temp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.write(staging, arcname=staging.name)
            for path in sorted(staging.rglob("*")):
                arcname = (Path(staging.name) / path.relative_to(staging)).as_posix()
                zf.write(path, arcname=arcname)


def intermediate_image_path(artifact_path: Path) -> Path:
    """Writable scratch image used on the way to the compressed dmg."""
    return artifact_path.with_name(f"{artifact_path.stem}_tmp.dmg")


def _run_image_tool(runner: CommandRunner, cmd: list[str], cwd: Path) -> None:
    try:
        proc = runner(cmd, cwd, capture=True)
    except FileNotFoundError as err:
        raise ArchiveFailed(f"Disk image tool not found: {cmd[0]}") from err
    except OSError as err:
        raise ArchiveFailed(f"{cmd[0]} could not be started: {err}") from err
    if proc.returncode != 0:
        detail = (proc.stderr or "").strip()
        raise ArchiveFailed(f"{cmd[0]} {cmd[1]} exited {proc.returncode}: {detail}")


def _write_disk_image(
    staging: Path,
    artifact_path: Path,
    runner: CommandRunner,
    volume_name: str,
    disk_image_tool: str,
) -> None:
    cwd = artifact_path.parent
    scratch = intermediate_image_path(artifact_path)
    safe_delete(scratch)

    _run_image_tool(
        runner,
        [
            disk_image_tool, "create",
            "-volname", volume_name,
            "-srcfolder", str(staging),
            "-ov",
            "-format", "UDRW",
            str(scratch),
        ],
        cwd,
    )
    if not scratch.is_file():
        raise ArchiveFailed(f"{disk_image_tool} create produced no image at {scratch}")

    with atomic_output(artifact_path, suffix=".dmg") as temp_path:
        _run_image_tool(
            runner,
            [disk_image_tool, "convert", str(scratch), "-format", "UDZO", "-o", str(temp_path)],
            cwd,
        )

    safe_delete(scratch)


def write_archive(
    kind: ArchiveKind,
    staging: Path,
    artifact_path: Path,
    runner: CommandRunner = run_command,
    volume_name: Optional[str] = None,
    disk_image_tool: str = "hdiutil",
) -> Path:
    """
    Compress a staging directory into the final artifact.

    Args:
        kind: Archive format.
        staging: Populated staging directory.
        artifact_path: Final destination; any existing file there is removed.
        runner: Command runner, only used for disk images.
        volume_name: Disk image volume label (defaults to the staging name).
        disk_image_tool: Name or path of hdiutil.

    Returns:
        The artifact path.

    Raises:
        ArchiveFailed: The staging directory is missing or writing failed.
    """
    if not staging.is_dir():
        raise ArchiveFailed(f"Staging directory not found: {staging}")

    try:
        if safe_delete(artifact_path):
            _logger.info("Removed stale artifact", extra={"path": str(artifact_path)})
    except OSError as err:
        raise ArchiveFailed(f"Cannot remove stale artifact {artifact_path}: {err}") from err

    writers: dict[ArchiveKind, Callable[[], None]] = {
        ArchiveKind.TAR_GZ: lambda: _write_tarball(staging, artifact_path),
        ArchiveKind.ZIP: lambda: _write_zip(staging, artifact_path),
        ArchiveKind.DMG: lambda: _write_disk_image(
            staging, artifact_path, runner, volume_name or staging.name, disk_image_tool
        ),
    }

    _logger.info(
        "Writing archive",
        extra={"kind": kind.value, "staging": str(staging), "artifact": str(artifact_path)},
    )
    try:
        writers[kind]()
    except ArchiveFailed:
        raise
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as err:
        raise ArchiveFailed(f"Could not write {kind.value} archive {artifact_path}: {err}") from err

    if not artifact_path.is_file():
        raise ArchiveFailed(f"Archive was not produced at {artifact_path}")

    _logger.info(
        "Archive written",
        extra={"artifact": str(artifact_path), "size_bytes": os.path.getsize(artifact_path)},
    )
    return artifact_path
