# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for releasekit.

Each config section gets its own frozen pydantic model:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Every field has a default, so `ReleaseConfig()` is a complete configuration
for the stock LibreCard release. A YAML file only needs to list what differs.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version, project identity, logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking, e.g. '1.0.0'",
    )
    project_name: str = Field(
        default="librecard", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to project root",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_VALID_LOG_LEVELS)}, got {value!r}")
        return upper


class AppConfig(BaseModel):
    """
    Application identity. These values name the artifacts and fill the
    macOS bundle manifest; nothing here is read back from build output.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    package_name: str = Field(
        default="librecard",
        min_length=1,
        description="Toolchain package name; also the binary name and archive prefix",
    )
    app_name: str = Field(
        default="LibreCard",
        min_length=1,
        description="Display name; used for the .app bundle and the disk image",
    )
    bundle_id: str = Field(default="net.ycao.librecard", min_length=1)
    bundle_version: str = Field(default="0.1", min_length=1)
    short_version: str = Field(default="0.1", min_length=1)
    minimum_system_version: str = Field(default="10.13", min_length=1)


class PathsConfig(BaseModel):
    """Project-relative locations of build output and documentation inputs."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    target_dir: str = Field(
        default="target",
        description="Toolchain output directory; staging and artifacts land here too",
    )
    license_file: str = Field(default="LICENSE")
    readme_file: str = Field(default="README.md")
    macos_readme_file: str = Field(
        default="README_MACOS.txt",
        description="Extra first-run notes shipped inside the disk image",
    )


class ToolchainConfig(BaseModel):
    """External programs the pipeline shells out to."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    build_command: list[str] = Field(
        default_factory=lambda: ["cargo", "build", "--release"],
        min_length=1,
        description="Release build command; '--target <triple>' is appended per triple",
    )
    vcs_tool: str = Field(default="git")
    merge_tool: str = Field(default="lipo")
    disk_image_tool: str = Field(default="hdiutil")


class StagingConfig(BaseModel):
    """What happens to scratch state after a successful run."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    prune_on_success: bool = Field(
        default=False,
        description="Remove the run's staging directory once the artifact is written",
    )


class ReleaseConfig(BaseModel):
    """Top-level config container."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, populate_by_name=True
    )

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    app: AppConfig = Field(default_factory=AppConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    staging: StagingConfig = Field(default_factory=StagingConfig)
