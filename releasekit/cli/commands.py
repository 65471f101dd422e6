# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the releasekit CLI.

Each function here corresponds to one subcommand and returns an exit code.
No print() calls; everything goes through the structured logger. This is
the only layer that looks at the working directory, and only as the default
for --project-root.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from releasekit.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from releasekit.config.exceptions import ConfigError
from releasekit.config.loader import load_project_config
from releasekit.config.schema import ReleaseConfig
from releasekit.logging.logger import get_logger
from releasekit.pipeline.exceptions import PackagingError, UnknownPlatform
from releasekit.pipeline.runner import plan_release, run_pipeline
from releasekit.runtime.bootstrap import bootstrap
from releasekit.targets.descriptor import TARGETS, resolve_target, supported_platforms
from releasekit.utils.process import run_command
from releasekit.version.resolver import resolve_version


def _project_root(args: argparse.Namespace) -> Path:
    if args.project_root is not None:
        return Path(args.project_root).resolve()
    return Path.cwd().resolve()


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[ReleaseConfig], Path, logging.Logger]:
    """
    Shared setup: resolve the project root, load config, run bootstrap.

    Returns (exit_code, config, project_root, logger). If exit_code is not
    SUCCESS the caller returns it immediately.
    """
    logger = get_logger(f"releasekit.cli.{command_name}", log_level=args.log_level or "INFO")
    project_root = _project_root(args)

    if not project_root.is_dir():
        logger.error("Project root not found", extra={"project_root": str(project_root)})
        return USER_ERROR, None, project_root, logger

    config_path = Path(args.config) if args.config is not None else None
    try:
        config = load_project_config(project_root, config_path)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, project_root, logger

    try:
        bootstrap(config, project_root, log_level=args.log_level)
    except (RuntimeError, ValueError, OSError) as err:
        logger.error("Bootstrap failed", extra={"command": command_name, "error": str(err)})
        return RUNTIME_ERROR, None, project_root, logger

    return SUCCESS, config, project_root, logger


def handle_package(args: argparse.Namespace) -> int:
    """Run the full release pipeline for one platform."""
    exit_code, config, project_root, logger = _load_and_bootstrap(args, "package")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        descriptor = resolve_target(args.platform)
    except UnknownPlatform as err:
        logger.error(str(err), extra={"stage": err.stage})
        return USER_ERROR

    try:
        if args.dry_run:
            version_id = resolve_version(project_root, run_command, config.toolchain.vcs_tool)
            plan = plan_release(descriptor, config, project_root, version_id)
            logger.info(
                "Dry run, would package",
                extra={
                    "platform": descriptor.platform_name,
                    "triples": list(descriptor.compiler_triples),
                    "staging": str(plan.staging_path),
                    "artifact": str(plan.artifact_path),
                },
            )
            return SUCCESS

        artifact = run_pipeline(descriptor.platform_name, config, project_root, runner=run_command)
        logger.info(
            "Release artifact ready",
            extra={"artifact": str(artifact.path), "sha256": artifact.sha256},
        )
        return SUCCESS

    except PackagingError as err:
        logger.error(
            "Packaging failed",
            extra={
                "platform": args.platform,
                "stage": err.stage,
                "error_type": type(err).__name__,
                "error": str(err),
            },
        )
        return RUNTIME_ERROR
    except Exception as err:
        logger.error(
            "Packaging failed",
            extra={"platform": args.platform, "error_type": type(err).__name__, "error": str(err)},
            exc_info=True,
        )
        return RUNTIME_ERROR


def handle_list(args: argparse.Namespace) -> int:
    """Log every supported platform and how it is packaged."""
    logger = get_logger("releasekit.cli.list", log_level=args.log_level or "INFO")
    for name in supported_platforms():
        descriptor = TARGETS[name]
        logger.info(
            "Supported platform",
            extra={
                "platform": name,
                "triples": list(descriptor.compiler_triples),
                "archive": descriptor.archive_kind.value,
                "merge": descriptor.requires_merge,
                "bundle": descriptor.requires_bundle,
            },
        )
    return SUCCESS


def handle_check(args: argparse.Namespace) -> int:
    """Run pre-flight checks for one platform without building anything."""
    exit_code, config, project_root, logger = _load_and_bootstrap(args, "check")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        descriptor = resolve_target(args.platform)
    except UnknownPlatform as err:
        logger.error(str(err), extra={"stage": err.stage})
        return USER_ERROR

    from releasekit.runtime.preflight import validate_environment

    checks = validate_environment(descriptor, config, project_root)
    failed = [c.name for c in checks if not c.passed]
    if failed:
        logger.error("Pre-flight checks failed", extra={"failed": failed})
        return VALIDATION_ERROR

    logger.info("Pre-flight checks passed", extra={"platform": descriptor.platform_name})
    return SUCCESS


def handle_clean(args: argparse.Namespace) -> int:
    """Remove staging leftovers from earlier runs."""
    exit_code, config, project_root, logger = _load_and_bootstrap(args, "clean")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from releasekit.release.cleaner import clean_target

    if args.dry_run:
        logger.info("Dry run, would clean target directory")
        return SUCCESS

    try:
        result = clean_target(project_root, config, keep_version=args.keep)
    except (OSError, ValueError) as err:
        logger.error("Clean failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    if result.errors:
        logger.error("Some items could not be removed", extra={"errors": result.errors})
        return RUNTIME_ERROR
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Display version and host information."""
    logger = get_logger("releasekit.cli.info", log_level=args.log_level or "INFO")

    from releasekit import __version__
    from releasekit.runtime.bootstrap import host_details

    logger.info(
        "System information",
        extra={
            "releasekit_version": __version__,
            **host_details(),
            "config": args.config,
        },
    )
    return SUCCESS
