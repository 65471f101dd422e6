# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for releasekit.

Every operation is a subcommand of `releasekit`. The global options
(--config, --log-level, --dry-run, --project-root) are inherited by every
subcommand through argparse's parent parser mechanism.

Usage:
    releasekit package linux_amd64
    releasekit package macos_universal --dry-run
    releasekit check windows_amd64
    releasekit list

The per-platform release scripts are parameterless wrappers around
`releasekit package <platform>`:
    release-linux
    release-windows
    release-macos
"""

import argparse
import sys
from collections.abc import Sequence
from typing import Optional

from releasekit.cli.commands import (
    handle_check,
    handle_clean,
    handle_info,
    handle_list,
    handle_package,
)
from releasekit.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False so its help text doesn't collide with the subcommand
    parsers that inherit from it.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: <project-root>/release.yaml if present).",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (default: global.log_level from config).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Resolve and log what would happen without building or writing artifacts.",
    )
    parent.add_argument(
        "--project-root",
        type=str,
        default=None,
        dest="project_root",
        help="Project checkout to package (default: current directory).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register all subcommands with their handler functions."""
    commands = [
        ("package", "Build and package one platform.", handle_package),
        ("check", "Run pre-flight checks for one platform.", handle_check),
        ("list", "List supported platforms.", handle_list),
        ("clean", "Remove staging leftovers from earlier runs.", handle_clean),
        ("info", "Display version and environment info.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    for name in ("package", "check"):
        subparsers.choices[name].add_argument(
            "platform",
            type=str,
            help="Platform name, e.g. linux_amd64 (see `releasekit list`).",
        )

    subparsers.choices["clean"].add_argument(
        "--keep",
        type=str,
        default=None,
        help="Revision whose staging state should be kept.",
    )


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="releasekit",
        description="releasekit: versioned release artifacts for every platform.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    Parses the command line, calls the chosen handler and exits with its
    return code. With no subcommand, shows help and exits with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if getattr(args, "func", None) is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


def _release(platform: str) -> None:
    main(["package", platform, *sys.argv[1:]])


def release_linux() -> None:
    _release("linux_amd64")


def release_windows() -> None:
    _release("windows_amd64")


def release_macos() -> None:
    _release("macos_universal")


if __name__ == "__main__":
    main()
