"""
Cache lookup.

Entries are trusted once present: checksums are verified when an entry is
written, never when it is read back.
"""

import logging
import stat
from pathlib import Path
from typing import Tuple

from artifactkit.core.exceptions import CacheLookupError

logger = logging.getLogger(__name__)

# Single-file entries cached without unpacking
FILE_ENTRY_SUFFIXES: Tuple[str, ...] = (".tar", ".snap")


def _stat(path: Path):
    """Stat path, returning None when it does not exist."""
    try:
        return path.stat()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise CacheLookupError(path, e) from e


def lookup(final_path: Path) -> bool:
    """
    Check whether a completed cache entry exists at final_path.

    A hit is a directory, or a file whose name ends in one of
    FILE_ENTRY_SUFFIXES.

    Raises:
        CacheLookupError: If the path state cannot be determined
    """
    final_path = Path(final_path)
    st = _stat(final_path)
    if st is None:
        return False

    if stat.S_ISDIR(st.st_mode) or final_path.name.endswith(FILE_ENTRY_SUFFIXES):
        logger.debug(f"Found existing {final_path}")
        return True

    logger.debug(f"Ignoring incomplete entry {final_path}")
    return False


def lookup_file(file_path: Path) -> bool:
    """
    Check whether a single-file cache entry exists.

    Raises:
        CacheLookupError: If the path state cannot be determined
    """
    file_path = Path(file_path)
    if _stat(file_path) is None:
        return False

    logger.debug(f"Found existing {file_path}")
    return True
