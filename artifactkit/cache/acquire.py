"""
Staged artifact acquisition.

This module orchestrates the complete cache workflow:
1. Normalize the request (catalog tools, streaming artifacts, URL-derived names)
2. Check if already cached
3. Allocate a private staging directory inside the cache
4. Download the archive next to it and verify its checksum
5. Unpack into the staging directory
6. Atomically rename the staging directory into place

No locks are taken. Concurrent processes may duplicate work, but a final
path is only ever created by a rename of a complete staging directory, so no
reader can observe a partially unpacked entry.
"""

import logging
from pathlib import Path
from typing import Optional

from artifactkit.cache.identity import cache_entry, normalize, url_basename
from artifactkit.cache.lookup import lookup, lookup_file
from artifactkit.cache.models import (
    AcquireResult,
    ArtifactRequest,
    NormalizedArtifact,
    PublishOutcome,
)
from artifactkit.cache.publish import discard, publish
from artifactkit.cache.unpack import ArchiveTool
from artifactkit.core.config import Settings
from artifactkit.core.directory import ensure_cache_dir, resolve_cache_root
from artifactkit.core.download import Downloader, HttpDownloader
from artifactkit.core.exceptions import ConfigurationError, PublishError
from artifactkit.core.filesystem import make_temp_dir, make_temp_file, remove_file
from artifactkit.core.platform import PlatformInfo, host_platform

logger = logging.getLogger(__name__)


class ArtifactCache:
    """
    Downloads, unpacks and caches artifacts under a shared cache root.

    Example:
        >>> cache = ArtifactCache(Settings.from_env())
        >>> result = cache.acquire(ArtifactRequest("", "https://host/wine-2.0.3-mac.7z", "..."))
        >>> print(f"Installed at: {result.path}")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        downloader: Optional[Downloader] = None,
        archive_tool: Optional[ArchiveTool] = None,
    ):
        """
        Initialize the cache.

        Args:
            settings: Process settings (defaults to Settings.from_env())
            downloader: Download collaborator (defaults to HttpDownloader)
            archive_tool: Archive tool wrapper (defaults to settings.archive_tool)
        """
        self.settings = settings or Settings.from_env()
        self.downloader = downloader or HttpDownloader()
        self.archive_tool = archive_tool or ArchiveTool(self.settings.archive_tool)

    @property
    def platform(self) -> PlatformInfo:
        return host_platform(self.settings.os_name, self.settings.arch)

    @property
    def cache_root(self) -> Path:
        return resolve_cache_root(self.settings)

    def final_path(self, request: ArtifactRequest) -> Path:
        """Get the final cache path of a request without touching the filesystem."""
        artifact = normalize(request, self.platform)
        return cache_entry(self.cache_root, artifact.dir_name).final_path

    def acquire(self, request: ArtifactRequest) -> AcquireResult:
        """
        Ensure a verified, unpacked copy of the artifact exists and return its path.

        Args:
            request: Artifact identity

        Returns:
            AcquireResult with the final path and how it came to exist

        Raises:
            ConfigurationError: If the artifact is not available for this platform
            CacheEnvironmentError: If the cache cannot be resolved, inspected or created
            TransferError: If download or checksum verification fails
            ExtractionError: If unpacking fails
            PublishError: If the consumed archive cannot be removed
        """
        artifact = normalize(request, self.platform)
        entry = cache_entry(self.cache_root, artifact.dir_name)
        final_path = entry.final_path

        if lookup(final_path):
            return AcquireResult(path=final_path, was_cached=True)

        ensure_cache_dir(entry.family_dir)

        logger.info(f"Downloading {artifact.url} to {final_path}")
        temp_dir = make_temp_dir(entry.family_dir)
        archive_path = temp_dir.with_name(temp_dir.name + artifact.archive_suffix)

        try:
            self.downloader.download(artifact.url, archive_path, artifact.checksum)
            self._unpack(artifact, archive_path, temp_dir, entry.family_dir)
            self._remove_archive(archive_path)
        except Exception:
            discard(archive_path)
            discard(temp_dir, require_prefix=entry.family_dir)
            raise

        outcome = publish(temp_dir, final_path, nested_root=artifact.has_nested_root)
        if outcome is PublishOutcome.ALREADY_PRESENT:
            discard(temp_dir, require_prefix=entry.family_dir)

        logger.debug(f"Downloaded {final_path}")
        return AcquireResult(path=final_path, was_cached=False, outcome=outcome)

    def _unpack(
        self,
        artifact: NormalizedArtifact,
        archive_path: Path,
        temp_dir: Path,
        work_dir: Path,
    ) -> None:
        if artifact.is_streaming:
            self.archive_tool.stream_extract(
                archive_path, temp_dir, artifact.binary_entry, artifact.binary_name
            )
        else:
            self.archive_tool.extract(archive_path, temp_dir, cwd=work_dir)

    def _remove_archive(self, archive_path: Path) -> None:
        try:
            remove_file(archive_path)
        except OSError as e:
            raise PublishError(f"Cannot remove archive {archive_path}: {e}") from e

    def download_compressed_artifact(
        self, url: str, checksum: Optional[str] = None, sub_dir: str = ""
    ) -> Path:
        """
        Download and cache a single file without unpacking it.

        The cache key is the URL's basename, stored under the cache root or
        sub_dir inside it.

        Args:
            url: File URL
            checksum: Expected SHA-512 (None skips verification)
            sub_dir: Optional subdirectory of the cache root

        Returns:
            Path to the cached file

        Raises:
            ConfigurationError: If the URL has no file name
            CacheEnvironmentError: If the cache cannot be inspected or created
            TransferError: If download or checksum verification fails
        """
        file_name = url_basename(url)
        if not file_name:
            raise ConfigurationError(f"Cannot derive file name from URL '{url}'")

        cache_dir = self.cache_root
        if sub_dir:
            cache_dir = cache_dir / sub_dir

        file_path = cache_dir / file_name
        if lookup_file(file_path):
            return file_path

        ensure_cache_dir(cache_dir)
        temp_file = make_temp_file(cache_dir, suffix=".snap")

        logger.info(f"Downloading {url} to {file_path}")
        try:
            self.downloader.download(url, temp_file, checksum or None)
        except Exception:
            discard(temp_file)
            raise
        logger.debug(f"Downloaded {file_path}")

        if publish(temp_file, file_path) is PublishOutcome.ALREADY_PRESENT:
            discard(temp_file)
        return file_path


def download_artifact(
    name: str,
    url: str,
    checksum: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Path:
    """
    Convenience function to acquire an artifact and return its path.

    For multiple downloads, create an ArtifactCache instance and reuse it.

    Example:
        >>> from artifactkit.cache.acquire import download_artifact
        >>> path = download_artifact("zstd", "")
    """
    cache = ArtifactCache(settings)
    return cache.acquire(ArtifactRequest(name=name, url=url, checksum=checksum)).path
