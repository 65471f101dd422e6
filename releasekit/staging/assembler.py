# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Staging directory assembly.

A staging directory holds exactly the files destined for one artifact: the
payload (a binary, or a finished .app bundle) plus the documentation under
its platform-specific names. It is named after the package, and the package
name embeds the revision, so runs for different revisions can never share
one. A same-named leftover from an earlier run at the same revision is
destroyed and rebuilt, never topped up.

Documentation sources are checked before anything is created on disk.
"""

import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import DocumentMissing, StagingFailed
from releasekit.targets.descriptor import TargetDescriptor
from releasekit.utils.filesystem import remove_tree

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class StagedDocument:
    source: Path
    staged_name: str


@dataclass(frozen=True)
class StagingDirectory:
    """A populated staging directory and the (name, source) pairs it holds."""

    path: Path
    contained_files: frozenset[tuple[str, str]]

    @property
    def names(self) -> set[str]:
        return {name for name, _ in self.contained_files}


def resolve_documents(
    descriptor: TargetDescriptor,
    config: ReleaseConfig,
    project_root: Path,
) -> list[StagedDocument]:
    """
    Map the descriptor's document rules onto files in the project root.

    Raises:
        DocumentMissing: If any source file is absent. No placeholder is made up.
    """
    documents: list[StagedDocument] = []
    for rule in descriptor.documents:
        relpath = getattr(config.paths, rule.source.value)
        source = project_root / relpath
        if not source.is_file():
            raise DocumentMissing(
                f"Required document '{relpath}' not found in {project_root} "
                f"(needed as {rule.staged_name} for {descriptor.platform_name})"
            )
        documents.append(StagedDocument(source=source, staged_name=rule.staged_name))
    return documents


def assemble_staging(
    staging_path: Path,
    payload: Path,
    payload_name: str,
    documents: Sequence[StagedDocument],
) -> StagingDirectory:
    """
    Create a fresh staging directory and fill it.

    Args:
        staging_path: Directory to create. Any existing one is removed first.
        payload: Binary file or bundle directory to include.
        payload_name: Name of the payload inside the staging directory.
        documents: Documentation files and their staged names.

    Raises:
        DocumentMissing: A document vanished between resolution and copying.
        StagingFailed: The payload does not exist, or the directory could not
            be created or filled.
    """
    if not payload.exists():
        raise StagingFailed(f"Staging payload not found: {payload}")

    contained: set[tuple[str, str]] = set()
    try:
        if remove_tree(staging_path):
            _logger.info("Removed previous staging directory", extra={"path": str(staging_path)})
        staging_path.mkdir(parents=True)

        if payload.is_dir():
            shutil.copytree(payload, staging_path / payload_name, symlinks=True)
        else:
            shutil.copy2(payload, staging_path / payload_name)
        contained.add((payload_name, str(payload)))

        for doc in documents:
            if not doc.source.is_file():
                raise DocumentMissing(f"Required document disappeared: {doc.source}")
            shutil.copyfile(doc.source, staging_path / doc.staged_name)
            contained.add((doc.staged_name, str(doc.source)))
    except OSError as err:
        raise StagingFailed(f"Could not populate staging directory {staging_path}: {err}") from err

    _logger.info(
        "Staging directory assembled",
        extra={"path": str(staging_path), "files": sorted(name for name, _ in contained)},
    )
    return StagingDirectory(path=staging_path, contained_files=frozenset(contained))
