"""
File system utilities for ArtifactKit.

Small, platform-aware helpers used by the acquisition pipeline:
- Unique working area allocation inside the cache root
- Safe recursive deletion restricted to a prefix
- Executable permission fix-ups for extracted binaries
"""

import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from artifactkit.core.exceptions import CacheDirectoryError

IS_WINDOWS = os.name == "nt"


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def make_temp_dir(parent: Path, prefix: str = "") -> Path:
    """
    Create a uniquely named directory inside parent.

    Naming is delegated to tempfile.mkdtemp, which is collision-free across
    processes sharing the same parent.

    Raises:
        CacheDirectoryError: If the directory cannot be created
    """
    try:
        return Path(tempfile.mkdtemp(prefix=prefix, dir=parent))
    except OSError as e:
        raise CacheDirectoryError(
            f"Failed to create temporary directory in {parent}: {e}"
        ) from e


def make_temp_file(parent: Path, suffix: str = "") -> Path:
    """
    Create a uniquely named empty file inside parent and return its path.

    Raises:
        CacheDirectoryError: If the file cannot be created
    """
    try:
        fd, name = tempfile.mkstemp(suffix=suffix, dir=parent)
    except OSError as e:
        raise CacheDirectoryError(
            f"Failed to create temporary file in {parent}: {e}"
        ) from e
    os.close(fd)
    return Path(name)


def remove_file(path: Union[str, Path]) -> None:
    """Remove a file; a file that is already gone is not an error."""
    Path(path).unlink(missing_ok=True)


def make_executable(path: Union[str, Path]) -> None:
    """Set rwxr-xr-x on path."""
    os.chmod(
        path,
        stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH,
    )


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/build', require_prefix='/tmp')
        >>> safe_rmtree('/usr/bin', require_prefix='/home')  # ValueError
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


__all__ = [
    "FilesystemError",
    "is_relative_to",
    "make_temp_dir",
    "make_temp_file",
    "remove_file",
    "make_executable",
    "safe_rmtree",
]
