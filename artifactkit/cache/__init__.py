"""
Artifact cache pipeline: identity, lookup, unpack, publish and acquisition.
"""

from .models import (
    ArtifactRequest,
    NormalizedArtifact,
    CacheEntry,
    UnpackStrategy,
    PublishOutcome,
    AcquireResult,
)

from .catalog import (
    ToolDescriptor,
    ZSTD,
    download_tool_request,
    fpm_request,
)

from .identity import normalize, cache_entry, family_of
from .lookup import lookup, lookup_file
from .unpack import ArchiveTool, StreamCoupling
from .publish import publish
from .acquire import ArtifactCache, download_artifact

__all__ = [
    "ArtifactRequest",
    "NormalizedArtifact",
    "CacheEntry",
    "UnpackStrategy",
    "PublishOutcome",
    "AcquireResult",
    "ToolDescriptor",
    "ZSTD",
    "download_tool_request",
    "fpm_request",
    "normalize",
    "cache_entry",
    "family_of",
    "lookup",
    "lookup_file",
    "ArchiveTool",
    "StreamCoupling",
    "publish",
    "ArtifactCache",
    "download_artifact",
]
