"""
Core functionality for ArtifactKit.

This package contains the foundational modules that the cache pipeline depends on.
"""

from .config import Settings

from .directory import (
    resolve_cache_root,
    ensure_cache_dir,
    get_home_dir,
)

from .download import (
    Downloader,
    HttpDownloader,
    StreamingHasher,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    normalize_arch,
    catalog_arch,
    host_platform,
)

from .exceptions import (
    ArtifactKitError,
    ConfigurationError,
    UnsupportedPlatformError,
    CacheEnvironmentError,
    CacheDirectoryError,
    CacheLookupError,
    TransferError,
    DownloadError,
    ChecksumError,
    ExtractionError,
    PublishError,
)

__all__ = [
    "Settings",
    "resolve_cache_root",
    "ensure_cache_dir",
    "get_home_dir",
    "Downloader",
    "HttpDownloader",
    "StreamingHasher",
    "PlatformInfo",
    "detect_platform",
    "normalize_arch",
    "catalog_arch",
    "host_platform",
    "ArtifactKitError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "CacheEnvironmentError",
    "CacheDirectoryError",
    "CacheLookupError",
    "TransferError",
    "DownloadError",
    "ChecksumError",
    "ExtractionError",
    "PublishError",
]
