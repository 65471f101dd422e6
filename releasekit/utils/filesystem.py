# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations for releasekit.

The rule for anything at a final artifact path: it is either complete or
absent. Writers produce a temporary sibling in the same directory and rename
it into place; rename on one filesystem is atomic on POSIX. If the process
dies mid-write you get a leftover `.releasekit_tmp_*` file (which `clean`
removes), never a truncated artifact.
"""

import contextlib
import os
import shutil
import stat
import tempfile
from collections.abc import Iterator
from pathlib import Path

TEMP_PREFIX = ".releasekit_tmp_"

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


@contextlib.contextmanager
def atomic_output(target_path: Path, suffix: str = ".tmp") -> Iterator[Path]:
    """
    Yield a temporary path that replaces `target_path` when the block exits cleanly.

    The temporary file lives next to the target so the final rename never
    crosses a filesystem. On any exception the temporary file is removed and
    the target is left untouched.

    Args:
        target_path: Where the finished file should end up.
        suffix: Suffix for the temporary name. Some tools insist on a specific
                extension (hdiutil wants `.dmg`).
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        dir=str(target_path.parent),
        prefix=TEMP_PREFIX,
        suffix=suffix,
    )
    os.close(fd)
    temp_path = Path(temp_name)
    # Tools like hdiutil refuse to overwrite without -ov; hand them a free name.
    temp_path.unlink()

    try:
        yield temp_path
        if not temp_path.exists():
            raise FileNotFoundError(f"Expected output was not produced: {temp_path}")
        os.replace(temp_path, target_path)
    except BaseException:
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text to a file atomically."""
    with atomic_output(target_path) as temp_path:
        temp_path.write_text(content, encoding=encoding)


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    Never throws on a missing file.

    Raises:
        OSError: If the file exists but can't be deleted (permissions, etc).
    """
    if file_path.exists() or file_path.is_symlink():
        file_path.unlink()
        return True
    return False


def remove_tree(path: Path) -> bool:
    """Remove a directory tree (or a stray file in its place) if present."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    return safe_delete(path)


def make_executable(path: Path) -> None:
    """Add the user/group/other execute bits to a file."""
    mode = path.stat().st_mode
    path.chmod(mode | EXECUTABLE_BITS)


def is_executable(path: Path) -> bool:
    return bool(path.stat().st_mode & stat.S_IXUSR)
