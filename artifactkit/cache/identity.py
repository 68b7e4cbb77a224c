"""
Artifact identity normalization.

Turns a raw (name, url, checksum) request into the canonical cache directory
name, the real download URL and the unpack strategy, and derives the cache
location from it.

Layout:
    <cache_root>/<family>/<dir_name>

where family is everything before the first hyphen of dir_name (or dir_name
itself), so variants such as fpm-1.9.3-2.3.1-linux-x86_64 and
fpm-1.9.3-20150715-2.2.2-mac share the fpm/ parent.
"""

import posixpath
from pathlib import Path
from urllib.parse import urlparse

from artifactkit.cache.catalog import resolve_catalog_request
from artifactkit.cache.models import (
    ArtifactRequest,
    CacheEntry,
    NormalizedArtifact,
    UnpackStrategy,
)
from artifactkit.core.exceptions import ConfigurationError
from artifactkit.core.platform import PlatformInfo

NODE_KIND = "node"
NODE_DIST_URL = "https://nodejs.org/dist/v{version}/node-v{version_and_arch}.tar.xz"
NODE_BINARY_ENTRY = "*/bin/node"
NODE_BINARY_NAME = "node"


def url_basename(url: str) -> str:
    """
    Get the final path segment of a URL.

    Example:
        >>> url_basename("https://example.com/dl/tool-1.0.7z?x=1")
        'tool-1.0.7z'
    """
    path = urlparse(url).path or url
    return posixpath.basename(path.rstrip("/"))


def strip_extension(file_name: str) -> str:
    """Remove the last extension ('a.tar.7z' -> 'a.tar')."""
    return posixpath.splitext(file_name)[0]


def family_of(dir_name: str) -> str:
    """
    Get the grouping directory of a cache entry.

    Example:
        >>> family_of("fpm-1.9.3-2.3.1-linux-x86_64")
        'fpm'
        >>> family_of("zstd")
        'zstd'
    """
    hyphen = dir_name.find("-")
    if hyphen > 0:
        return dir_name[:hyphen]
    return dir_name


def node_artifact(version_and_arch: str, checksum=None) -> NormalizedArtifact:
    """
    Describe a Node.js runtime binary ('<version>-<arch>', e.g. '18.19.0-linux-x64').

    Raises:
        ConfigurationError: If the token has no '<version>-' prefix
    """
    hyphen = version_and_arch.find("-")
    if hyphen <= 0:
        raise ConfigurationError(
            f"Invalid {NODE_KIND} artifact token '{version_and_arch}': "
            f"expected <version>-<arch>"
        )

    return NormalizedArtifact(
        dir_name=f"{NODE_KIND}-{version_and_arch}",
        url=NODE_DIST_URL.format(
            version=version_and_arch[:hyphen], version_and_arch=version_and_arch
        ),
        checksum=checksum,
        strategy=UnpackStrategy.STREAMING,
        binary_entry=NODE_BINARY_ENTRY,
        binary_name=NODE_BINARY_NAME,
    )


def normalize(request: ArtifactRequest, platform: PlatformInfo) -> NormalizedArtifact:
    """
    Normalize a request into its canonical cache identity.

    Args:
        request: Caller-supplied artifact request
        platform: Host platform, used for catalog tools

    Returns:
        NormalizedArtifact describing what to fetch and how to unpack it

    Raises:
        UnsupportedPlatformError: If a catalog tool has no build for the platform
        ConfigurationError: If no usable URL is given

    Example:
        >>> normalize(ArtifactRequest("", "https://x/y/wine-2.0.3-mac.7z"), host)
        NormalizedArtifact(dir_name='wine-2.0.3-mac', ...)
    """
    catalog_request = resolve_catalog_request(request.name, platform)
    if catalog_request is not None:
        request = catalog_request

    if request.name == NODE_KIND:
        return node_artifact(request.url, request.checksum)

    dir_name = request.name
    if not dir_name:
        dir_name = strip_extension(url_basename(request.url))
    if not dir_name:
        raise ConfigurationError(
            f"Cannot derive artifact name from URL '{request.url}'"
        )
    if not request.url:
        raise ConfigurationError(f"No download URL given for artifact '{dir_name}'")

    return NormalizedArtifact(
        dir_name=dir_name, url=request.url, checksum=request.checksum or None
    )


def cache_entry(cache_root: Path, dir_name: str) -> CacheEntry:
    """
    Derive the cache location of an artifact.

    Example:
        >>> cache_entry(Path("/c"), "zstd").final_path
        PosixPath('/c/zstd/zstd')
    """
    return CacheEntry(
        cache_root=Path(cache_root), family=family_of(dir_name), dir_name=dir_name
    )
