# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for releasekit.

All stage inputs and outputs are resolved against an explicit project root
that the caller passes in. Nothing below reads the working directory.
"""

from pathlib import Path


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_path_within_project(target: Path, project_root: Path) -> Path:
    """
    Make sure a path doesn't escape the project directory.

    Configured paths like `target_dir: ../../somewhere` would otherwise let
    the staging step delete directories outside the checkout. Both paths are
    resolved before comparing, so `..` tricks get caught.

    Returns:
        The resolved absolute path if it's safe.

    Raises:
        ValueError: If the path escapes the project root.
    """
    resolved_target = target.resolve()
    resolved_root = project_root.resolve()

    if not resolved_target.is_relative_to(resolved_root):
        raise ValueError(
            f"Path '{target}' resolves to '{resolved_target}' which is outside "
            f"the project root '{resolved_root}'. This is not allowed."
        )

    return resolved_target


def resolve_target_dir(project_root: Path, target_dir: str) -> Path:
    """Absolute, validated location of the toolchain output directory."""
    return validate_path_within_project(project_root / target_dir, project_root)
