"""
Cache root resolution for ArtifactKit.

All artifacts live under one cache root whose location depends on the OS and
the environment:

    Override (ARTIFACTKIT_CACHE)   : used verbatim
    macOS                          : ~/Library/Caches/<namespace>
    Windows with LOCALAPPDATA      : %LOCALAPPDATA%\\<namespace>\\cache
    Windows service account        : %TEMP%\\<namespace>-cache
    Linux / other                  : ~/.cache/<namespace>

The cache lives in the user's home rather than in a project directory so that
every project (and every test run) shares one copy of each large tool.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

from artifactkit.core.config import Settings
from artifactkit.core.exceptions import CacheDirectoryError
from artifactkit.core.platform import host_platform

logger = logging.getLogger(__name__)


def get_home_dir(settings: Settings) -> Path:
    """
    Get the user's home directory.

    Raises:
        CacheDirectoryError: If the home directory cannot be determined
    """
    if settings.home_dir is not None:
        return Path(settings.home_dir)

    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise CacheDirectoryError(f"Cannot determine user home directory: {e}") from e


def is_system_profile(settings: Settings) -> bool:
    """
    Check whether LOCALAPPDATA points into a system service profile.

    Services running as SYSTEM get a profile under the Windows system directory,
    which is either access-denied or must not be polluted with caches.
    """
    local_app_data = (settings.local_app_data or "").lower()
    if (settings.username or "").lower() == "system":
        return True
    if "\\windows\\system32\\" in local_app_data:
        return True

    system_root = (settings.system_root or "").lower().rstrip("\\/")
    return bool(system_root) and local_app_data.startswith(system_root + "\\")


def resolve_cache_root(
    settings: Settings, namespace: Optional[str] = None
) -> Path:
    """
    Compute the root directory under which all artifacts are cached.

    The directory is not created here.

    Args:
        settings: Process settings
        namespace: Product directory name (defaults to settings.namespace)

    Returns:
        Absolute cache root path

    Raises:
        CacheDirectoryError: If the home directory lookup fails

    Example:
        >>> resolve_cache_root(Settings(cache_override="/build/cache"))
        PosixPath('/build/cache')
    """
    if settings.cache_override:
        return Path(settings.cache_override)

    namespace = namespace or settings.namespace
    os_name = host_platform(settings.os_name, settings.arch).os

    if os_name == "macos":
        return get_home_dir(settings) / "Library" / "Caches" / namespace

    if os_name == "windows" and settings.local_app_data:
        if is_system_profile(settings):
            cache_root = Path(tempfile.gettempdir()) / f"{namespace}-cache"
            logger.debug(f"System profile detected, using {cache_root}")
            return cache_root
        return Path(settings.local_app_data) / namespace / "cache"

    return get_home_dir(settings) / ".cache" / namespace


def ensure_cache_dir(path: Path) -> Path:
    """
    Create a cache directory (and parents) if it doesn't exist.

    Raises:
        CacheDirectoryError: If directory creation fails
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CacheDirectoryError(
            f"Failed to create cache directory at {path}: {e}"
        ) from e
    return path
