# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release pipeline driver.

One call packages one platform:

    version -> build -> (merge) -> (bundle) -> staging -> archive

The optional steps are switched by the descriptor's capability flags, never
by the platform name. Each stage starts only after the previous one has
succeeded, and any PackagingError propagates straight out; nothing is
retried, nothing is degraded. Output from an earlier run at the same revision
is removed before building, and the final artifact path is written last and
atomically, so a failed run never leaves a file there.

The project root is an explicit argument. All inputs (documents) and outputs
(target directory) are resolved against it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from releasekit.archive.archiver import write_archive
from releasekit.build.invoker import invoke_build
from releasekit.build.merger import UNIVERSAL_DIR_NAME, merge_binaries
from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import ArchiveFailed, StagingFailed
from releasekit.staging.assembler import assemble_staging, resolve_documents
from releasekit.staging.bundle import BundleManifest, build_bundle
from releasekit.targets.descriptor import TargetDescriptor, resolve_target
from releasekit.utils.filesystem import remove_tree, safe_delete
from releasekit.utils.hashing import compute_sha256
from releasekit.utils.paths import ensure_directory, resolve_target_dir
from releasekit.utils.process import CommandRunner, run_command
from releasekit.version.resolver import resolve_version

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class PackageArtifact:
    """The finished, immutable output of one pipeline run."""

    path: Path
    platform: str
    architecture_label: str
    version_id: str
    sha256: str


@dataclass(frozen=True)
class ReleasePlan:
    """Every path a run will touch, computed up front from the version."""

    descriptor: TargetDescriptor
    version_id: str
    package_name: str
    target_dir: Path
    staging_path: Path
    artifact_path: Path
    universal_binary_path: Optional[Path]
    bundle_path: Optional[Path]


def plan_release(
    descriptor: TargetDescriptor,
    config: ReleaseConfig,
    project_root: Path,
    version_id: str,
) -> ReleasePlan:
    """Compute staging, artifact and intermediate paths. Touches nothing on disk."""
    target_dir = resolve_target_dir(project_root, config.paths.target_dir)
    package_name = descriptor.package_name(config, version_id)

    universal_binary_path = None
    if descriptor.requires_merge:
        universal_binary_path = target_dir / UNIVERSAL_DIR_NAME / config.app.app_name

    bundle_path = None
    if descriptor.requires_bundle:
        bundle_path = target_dir / f"{config.app.app_name}.app"

    return ReleasePlan(
        descriptor=descriptor,
        version_id=version_id,
        package_name=package_name,
        target_dir=target_dir,
        staging_path=target_dir / package_name,
        artifact_path=target_dir / descriptor.artifact_filename(config, version_id),
        universal_binary_path=universal_binary_path,
        bundle_path=bundle_path,
    )


def _clear_previous_output(plan: ReleasePlan) -> None:
    """Remove the artifact and staging directory of an earlier run at this revision."""
    try:
        ensure_directory(plan.target_dir)
        if safe_delete(plan.artifact_path):
            _logger.info("Removed previous artifact", extra={"path": str(plan.artifact_path)})
        if remove_tree(plan.staging_path):
            _logger.info("Removed previous staging directory", extra={"path": str(plan.staging_path)})
    except OSError as err:
        raise StagingFailed(f"Cannot prepare target directory {plan.target_dir}: {err}") from err


def run_pipeline(
    platform_name: str,
    config: ReleaseConfig,
    project_root: Path,
    runner: CommandRunner = run_command,
) -> PackageArtifact:
    """
    Build and package one platform.

    Args:
        platform_name: Key into the target table, e.g. "linux_amd64".
        config: Validated release configuration.
        project_root: Checkout to build; documents are read from here.
        runner: Command runner for git, the toolchain, lipo and hdiutil.

    Returns:
        The written PackageArtifact.

    Raises:
        UnknownPlatform, VersionUnavailable, BuildFailed, BinaryNotFound,
        MergeFailed, BundleFailed, DocumentMissing, StagingFailed,
        ArchiveFailed.
    """
    project_root = project_root.resolve()
    descriptor = resolve_target(platform_name)
    version_id = resolve_version(project_root, runner, config.toolchain.vcs_tool)
    plan = plan_release(descriptor, config, project_root, version_id)

    _logger.info(
        "Starting release pipeline",
        extra={
            "platform": descriptor.platform_name,
            "version_id": version_id,
            "artifact": str(plan.artifact_path),
        },
    )
    _clear_previous_output(plan)

    builds = invoke_build(descriptor, config, project_root, runner)

    payload = builds[0].path
    payload_name = descriptor.binary_name(config)

    if descriptor.requires_merge and plan.universal_binary_path is not None:
        payload = merge_binaries(
            builds, plan.universal_binary_path, runner, config.toolchain.merge_tool
        )
        payload_name = config.app.app_name

    if descriptor.requires_bundle and plan.bundle_path is not None:
        payload = build_bundle(plan.bundle_path, payload, BundleManifest.from_config(config))
        payload_name = plan.bundle_path.name

    documents = resolve_documents(descriptor, config, project_root)
    staging = assemble_staging(plan.staging_path, payload, payload_name, documents)

    write_archive(
        descriptor.archive_kind,
        staging.path,
        plan.artifact_path,
        runner=runner,
        volume_name=config.app.app_name,
        disk_image_tool=config.toolchain.disk_image_tool,
    )

    try:
        sha256 = compute_sha256(plan.artifact_path)
    except OSError as err:
        raise ArchiveFailed(f"Cannot read back {plan.artifact_path}: {err}") from err

    artifact = PackageArtifact(
        path=plan.artifact_path,
        platform=descriptor.platform_name,
        architecture_label=descriptor.arch_label,
        version_id=version_id,
        sha256=sha256,
    )

    if config.staging.prune_on_success:
        try:
            remove_tree(staging.path)
        except OSError as err:
            raise StagingFailed(f"Cannot prune staging directory {staging.path}: {err}") from err
        _logger.debug("Pruned staging directory", extra={"path": str(staging.path)})

    _logger.info(
        "Packed successfully",
        extra={
            "platform": artifact.platform,
            "version_id": artifact.version_id,
            "artifact": str(artifact.path),
            "sha256": artifact.sha256,
        },
    )
    return artifact
