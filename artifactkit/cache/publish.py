"""
Atomic publication of staged cache entries.

A final cache path is only ever created by renaming a fully populated staging
directory (or file) onto it. When two agents race for the same entry the
loser's rename fails; that is reported as ALREADY_PRESENT, not as an error,
because the winner published equivalent, independently verified content.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from artifactkit.cache.models import PublishOutcome
from artifactkit.core.filesystem import FilesystemError, remove_file, safe_rmtree

logger = logging.getLogger(__name__)


def publish(temp_path: Path, final_path: Path, nested_root: bool = False) -> PublishOutcome:
    """
    Rename a staged entry into its final location.

    Args:
        temp_path: Staged directory or file
        final_path: Final cache path
        nested_root: The archive wrapped its content in a directory named like
            temp_path; that inner directory is published and temp_path removed

    Returns:
        PublishOutcome.PUBLISHED, or ALREADY_PRESENT if the rename failed
    """
    temp_path = Path(temp_path)
    final_path = Path(final_path)
    source = temp_path / temp_path.name if nested_root else temp_path

    try:
        os.rename(source, final_path)
    except OSError as e:
        logger.warning(
            f"Cannot move downloaded {source} into final location {final_path} "
            f"(another process downloaded faster?): {e}"
        )
        return PublishOutcome.ALREADY_PRESENT
    finally:
        if nested_root:
            discard(temp_path, require_prefix=final_path.parent)

    logger.debug(f"Published {final_path}")
    return PublishOutcome.PUBLISHED


def discard(path: Path, require_prefix: Optional[Path] = None) -> None:
    """
    Best-effort removal of an abandoned staging directory or file.

    Raises:
        ValueError: If a directory outside require_prefix is given
    """
    path = Path(path)
    try:
        if path.is_dir():
            safe_rmtree(path, require_prefix=require_prefix)
        else:
            remove_file(path)
    except (OSError, FilesystemError) as e:
        logger.warning(f"Failed to remove temporary {path}: {e}")
