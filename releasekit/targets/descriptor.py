# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Supported release targets.

One immutable descriptor per platform. Everything that differs between
platforms (how many triples get built, whether they are merged, whether the
result is wrapped in an application bundle, the archive format, what the
documentation files are called) is data in this table. The pipeline body has
no per-platform branches, so supporting a new platform means adding an entry
to TARGETS.
"""

import enum
from dataclasses import dataclass

from releasekit.config.schema import ReleaseConfig
from releasekit.pipeline.exceptions import UnknownPlatform


class ArchiveKind(str, enum.Enum):
    """Final artifact formats. The value doubles as the file extension."""

    ZIP = "zip"
    TAR_GZ = "tar.gz"
    DMG = "dmg"

    @property
    def extension(self) -> str:
        return self.value


class DocumentSource(str, enum.Enum):
    """Which configured input file a document is copied from."""

    LICENSE = "license_file"
    README = "readme_file"
    MACOS_README = "macos_readme_file"


@dataclass(frozen=True)
class DocumentRule:
    """Copy the configured `source` file into the package as `staged_name`."""

    source: DocumentSource
    staged_name: str


@dataclass(frozen=True)
class TargetDescriptor:
    """
    Static description of one release platform.

    `binary_relpath_template` is relative to the project root and may use
    `{target_dir}`, `{triple}` and `{binary}`. `binary_name_template` may use
    `{package}`.
    """

    platform_name: str
    os_label: str
    arch_label: str
    compiler_triples: tuple[str, ...]
    archive_kind: ArchiveKind
    documents: tuple[DocumentRule, ...]
    binary_relpath_template: str = "{target_dir}/{triple}/release/{binary}"
    binary_name_template: str = "{package}"
    requires_merge: bool = False
    requires_bundle: bool = False
    uses_app_name: bool = False

    def __post_init__(self) -> None:
        if not 1 <= len(self.compiler_triples) <= 2:
            raise ValueError(
                f"{self.platform_name}: expected 1 or 2 compiler triples, "
                f"got {len(self.compiler_triples)}"
            )
        if self.requires_merge and len(self.compiler_triples) != 2:
            raise ValueError(f"{self.platform_name}: merging needs exactly two triples")
        if not self.requires_merge and len(self.compiler_triples) != 1:
            raise ValueError(f"{self.platform_name}: several triples require a merge step")

    def binary_name(self, config: ReleaseConfig) -> str:
        return self.binary_name_template.format(package=config.app.package_name)

    def binary_relpath(self, triple: str, config: ReleaseConfig) -> str:
        return self.binary_relpath_template.format(
            target_dir=config.paths.target_dir,
            triple=triple,
            binary=self.binary_name(config),
        )

    def package_name(self, config: ReleaseConfig, version_id: str) -> str:
        """`<app>-<os>_<arch>-<version>`, the stem shared by staging dir and artifact."""
        stem = config.app.app_name if self.uses_app_name else config.app.package_name
        return f"{stem}-{self.platform_name}-{version_id}"

    def artifact_filename(self, config: ReleaseConfig, version_id: str) -> str:
        return f"{self.package_name(config, version_id)}.{self.archive_kind.extension}"


_UNIX_DOCS = (
    DocumentRule(DocumentSource.LICENSE, "LICENSE"),
    DocumentRule(DocumentSource.README, "README.md"),
)

# Windows users get .txt so the files open in Notepad on double-click.
_WINDOWS_DOCS = (
    DocumentRule(DocumentSource.LICENSE, "LICENSE.txt"),
    DocumentRule(DocumentSource.README, "README.txt"),
)

# Finder has no markdown viewer either.
_MACOS_DOCS = (
    DocumentRule(DocumentSource.LICENSE, "LICENSE.txt"),
    DocumentRule(DocumentSource.README, "README.txt"),
    DocumentRule(DocumentSource.MACOS_README, "README_MACOS.txt"),
)


def _descriptors() -> dict[str, TargetDescriptor]:
    entries = [
        TargetDescriptor(
            platform_name="linux_amd64",
            os_label="linux",
            arch_label="amd64",
            compiler_triples=("x86_64-unknown-linux-gnu",),
            archive_kind=ArchiveKind.TAR_GZ,
            documents=_UNIX_DOCS,
        ),
        TargetDescriptor(
            platform_name="linux_arm64",
            os_label="linux",
            arch_label="arm64",
            compiler_triples=("aarch64-unknown-linux-gnu",),
            archive_kind=ArchiveKind.TAR_GZ,
            documents=_UNIX_DOCS,
        ),
        TargetDescriptor(
            platform_name="windows_amd64",
            os_label="windows",
            arch_label="amd64",
            compiler_triples=("x86_64-pc-windows-msvc",),
            archive_kind=ArchiveKind.ZIP,
            documents=_WINDOWS_DOCS,
            binary_name_template="{package}.exe",
        ),
        TargetDescriptor(
            platform_name="windows_arm64",
            os_label="windows",
            arch_label="arm64",
            compiler_triples=("aarch64-pc-windows-msvc",),
            archive_kind=ArchiveKind.ZIP,
            documents=_WINDOWS_DOCS,
            binary_name_template="{package}.exe",
        ),
        TargetDescriptor(
            platform_name="macos_universal",
            os_label="macos",
            arch_label="universal",
            compiler_triples=("aarch64-apple-darwin", "x86_64-apple-darwin"),
            archive_kind=ArchiveKind.DMG,
            documents=_MACOS_DOCS,
            requires_merge=True,
            requires_bundle=True,
            uses_app_name=True,
        ),
    ]
    for entry in entries:
        if entry.platform_name != f"{entry.os_label}_{entry.arch_label}":
            raise ValueError(f"Inconsistent platform name: {entry.platform_name}")
    return {entry.platform_name: entry for entry in entries}


TARGETS: dict[str, TargetDescriptor] = _descriptors()


def supported_platforms() -> list[str]:
    return sorted(TARGETS)


def resolve_target(platform_name: str) -> TargetDescriptor:
    """
    Look up the descriptor for a platform.

    Raises:
        UnknownPlatform: If the name is not in the table.
    """
    descriptor = TARGETS.get(platform_name)
    if descriptor is None:
        raise UnknownPlatform(
            f"Unknown platform '{platform_name}'. "
            f"Supported: {', '.join(supported_platforms())}"
        )
    return descriptor
