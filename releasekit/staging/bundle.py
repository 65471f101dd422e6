# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
macOS application bundle construction.

Layout produced:

    <AppName>.app/
    └─ Contents/
       ├─ Info.plist
       └─ MacOS/
          └─ <AppName>

The manifest is built from configuration only; nothing is read back out of
the binary. Any existing bundle at the destination is deleted first, so the
result never carries files from an earlier build.
"""

import logging
import plistlib
import shutil
from dataclasses import dataclass
from pathlib import Path

from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import BundleFailed
from releasekit.utils.filesystem import atomic_write, make_executable, remove_tree

_logger: logging.Logger = get_logger(__name__)

INFO_DICTIONARY_VERSION = "6.0"
PACKAGE_TYPE = "APPL"


@dataclass(frozen=True)
class BundleManifest:
    """The fields written to Contents/Info.plist."""

    executable: str
    identifier: str
    name: str
    display_name: str
    version: str
    short_version: str
    minimum_system_version: str
    high_resolution_capable: bool = True

    @classmethod
    def from_config(cls, config: ReleaseConfig) -> "BundleManifest":
        app = config.app
        return cls(
            executable=app.app_name,
            identifier=app.bundle_id,
            name=app.app_name,
            display_name=app.app_name,
            version=app.bundle_version,
            short_version=app.short_version,
            minimum_system_version=app.minimum_system_version,
        )

    def to_plist(self) -> dict[str, object]:
        return {
            "CFBundleExecutable": self.executable,
            "CFBundleIdentifier": self.identifier,
            "CFBundleName": self.name,
            "CFBundleDisplayName": self.display_name,
            "CFBundlePackageType": PACKAGE_TYPE,
            "CFBundleInfoDictionaryVersion": INFO_DICTIONARY_VERSION,
            "CFBundleVersion": self.version,
            "CFBundleShortVersionString": self.short_version,
            "NSHighResolutionCapable": self.high_resolution_capable,
            "LSMinimumSystemVersion": self.minimum_system_version,
        }


def render_info_plist(manifest: BundleManifest) -> str:
    return plistlib.dumps(manifest.to_plist(), fmt=plistlib.FMT_XML, sort_keys=False).decode(
        "utf-8"
    )


def build_bundle(bundle_path: Path, executable: Path, manifest: BundleManifest) -> Path:
    """
    (Re)build an application bundle around a universal binary.

    Args:
        bundle_path: Destination, e.g. target/LibreCard.app.
        executable: The merged binary.
        manifest: Values for Info.plist.

    Returns:
        The bundle path.

    Raises:
        BundleFailed: The executable is missing or the bundle can't be written.
    """
    if not executable.is_file():
        raise BundleFailed(f"Bundle executable not found: {executable}")

    contents = bundle_path / "Contents"
    macos_dir = contents / "MacOS"

    try:
        if remove_tree(bundle_path):
            _logger.info("Removed previous bundle", extra={"path": str(bundle_path)})
        macos_dir.mkdir(parents=True)

        bundled_exe = macos_dir / manifest.executable
        shutil.copy2(executable, bundled_exe)
        make_executable(bundled_exe)

        atomic_write(contents / "Info.plist", render_info_plist(manifest))
    except OSError as err:
        raise BundleFailed(f"Could not build bundle at {bundle_path}: {err}") from err

    _logger.info(
        "App bundle created",
        extra={"path": str(bundle_path), "bundle_id": manifest.identifier},
    )
    return bundle_path
