# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Failure taxonomy for the release pipeline.

Every stage raises exactly one of these. None of them are recovered locally:
the pipeline aborts the platform run at the first one and the CLI turns it
into a message naming the stage plus a non-zero exit.
"""


class PackagingError(Exception):
    """Base for all pipeline failures. `stage` names the step that failed."""

    stage: str = "pipeline"


class VersionUnavailable(PackagingError):
    """The source revision could not be determined."""

    stage = "version"


class UnknownPlatform(PackagingError):
    """No target descriptor exists for the requested platform name."""

    stage = "target"


class BuildFailed(PackagingError):
    """The external toolchain exited non-zero or could not be started."""

    stage = "build"


class BinaryNotFound(PackagingError):
    """The toolchain reported success but the expected binary is absent."""

    stage = "build"


class MergeFailed(PackagingError):
    """The per-architecture binaries could not be merged into one."""

    stage = "merge"


class DocumentMissing(PackagingError):
    """A documentation file required in every package is absent."""

    stage = "staging"


class StagingFailed(PackagingError):
    """The staging directory could not be created or filled."""

    stage = "staging"


class BundleFailed(PackagingError):
    """The application bundle could not be assembled."""

    stage = "bundle"


class ArchiveFailed(PackagingError):
    """The final artifact could not be written."""

    stage = "archive"
