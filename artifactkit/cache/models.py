"""
Data types shared by the cache pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class UnpackStrategy(Enum):
    """How a downloaded archive becomes a cache entry."""

    ARCHIVE = "archive"
    """Extract the whole archive with a single archive tool invocation"""

    STREAMING = "streaming"
    """Decompress and extract one binary through a two-process pipeline"""


class PublishOutcome(Enum):
    """Result of moving a staged entry into its final location."""

    PUBLISHED = "published"
    """This call renamed its staged copy into place"""

    ALREADY_PRESENT = "already_present"
    """The rename failed, typically because a concurrent agent published first"""


@dataclass(frozen=True)
class ArtifactRequest:
    """Logical artifact identity supplied by the caller."""

    name: str
    """Logical artifact key (may be empty)"""

    url: str
    """Source location (a version token for streaming artifacts)"""

    checksum: Optional[str] = None
    """Expected SHA-512; None or empty means unverified"""


@dataclass(frozen=True)
class NormalizedArtifact:
    """Canonical description of what to fetch and how to unpack it."""

    dir_name: str
    url: str
    checksum: Optional[str] = None
    strategy: UnpackStrategy = UnpackStrategy.ARCHIVE
    binary_entry: Optional[str] = None
    """Archive entry pattern extracted by the streaming strategy"""

    binary_name: Optional[str] = None
    """File name of the extracted binary inside the unpack directory"""

    @property
    def is_streaming(self) -> bool:
        return self.strategy is UnpackStrategy.STREAMING

    @property
    def archive_suffix(self) -> str:
        # 7z cannot be extracted from a stream, so archives always land on disk first
        return ".tar.xz" if self.is_streaming else ".7z"

    @property
    def has_nested_root(self) -> bool:
        """Whether the archive wraps its content in a directory named like the archive."""
        return self.url.endswith(".tar.7z")


@dataclass(frozen=True)
class CacheEntry:
    """Derived cache location of one artifact identity."""

    cache_root: Path
    family: str
    dir_name: str

    @property
    def family_dir(self) -> Path:
        return self.cache_root / self.family

    @property
    def final_path(self) -> Path:
        return self.family_dir / self.dir_name


@dataclass
class AcquireResult:
    """Result of an acquisition."""

    path: Path
    """Final cache path of the artifact"""

    was_cached: bool
    """Whether the entry already existed (no download performed)"""

    outcome: Optional[PublishOutcome] = None
    """How the entry was published; None for cache hits"""
