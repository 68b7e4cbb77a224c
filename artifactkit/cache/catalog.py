"""
Catalog of well-known tools with per-platform checksums.

Requests for these tools never use a caller-supplied URL: the download URL and
checksum are synthesized from the catalog for the host OS and architecture.
A platform without a registered checksum is refused instead of downloading
unverified bytes.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

from artifactkit.cache.models import ArtifactRequest
from artifactkit.core.exceptions import UnsupportedPlatformError
from artifactkit.core.platform import PlatformInfo, catalog_arch

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY = "electron-userland/electron-builder-binaries"
RELEASES_URL = "https://github.com/{repository}/releases/download/{tag}/{file}"


@dataclass(frozen=True)
class ToolDescriptor:
    """Static catalog entry for a tool published as per-platform .7z archives."""

    name: str
    version: str
    mac: Optional[str] = None
    """Checksum of the macOS build (architecture independent)"""

    linux: Mapping[str, str] = field(default_factory=dict)
    """Checksums keyed by catalog architecture ('x64', 'ia32', 'armv7', 'armv8')"""

    win: Mapping[str, str] = field(default_factory=dict)
    """Checksums keyed by catalog architecture"""

    repository: Optional[str] = None
    """GitHub repository; releases are tagged 'v<version>' when set"""


def download_tool_request(
    descriptor: ToolDescriptor, platform: PlatformInfo
) -> ArtifactRequest:
    """
    Build the request for a catalog tool on the given platform.

    Args:
        descriptor: Catalog entry
        platform: Target platform

    Returns:
        ArtifactRequest named '<name>-<version>-<os>[-<arch>]'

    Raises:
        UnsupportedPlatformError: If no checksum is registered for the platform

    Example:
        >>> request = download_tool_request(ZSTD, PlatformInfo("linux", "x64"))
        >>> request.name
        'zstd-1.3.4-linux-x64'
    """
    arch = catalog_arch(platform.arch)

    if platform.os == "macos":
        checksum = descriptor.mac
        os_and_arch = "mac"
    elif platform.os == "windows":
        checksum = descriptor.win.get(arch)
        os_and_arch = f"win-{arch}"
    else:
        checksum = descriptor.linux.get(arch)
        os_and_arch = f"linux-{arch}"

    if not checksum:
        raise UnsupportedPlatformError(descriptor.name, platform.os, arch)

    if descriptor.repository:
        repository = descriptor.repository
        tag = f"v{descriptor.version}"
    else:
        repository = DEFAULT_REPOSITORY
        tag = f"{descriptor.name}-{descriptor.version}"

    # The cache name keeps the platform so one cache dir can serve several hosts
    name = f"{descriptor.name}-{descriptor.version}-{os_and_arch}"
    url = RELEASES_URL.format(
        repository=repository,
        tag=tag,
        file=f"{descriptor.name}-v{descriptor.version}-{os_and_arch}.7z",
    )
    return ArtifactRequest(name=name, url=url, checksum=checksum)


def fpm_request(platform: PlatformInfo) -> ArtifactRequest:
    """
    Build the request for the bundled fpm packaging tool.

    Linux builds exist for x86_64 and x86; every other OS gets the macOS build.
    """
    if platform.os == "linux":
        if platform.arch == "x64":
            checksum = "fcKdXPJSso3xFs5JyIJHG1TfHIRTGDP0xhSBGZl7pPZlz4/TJ4rD/q3wtO/uaBBYeX0qFFQAFjgu1uJ6HLHghA=="
            arch_suffix = "-x86_64"
        else:
            checksum = "OnzvBdsHE5djcXcAT87rwbnZwS789ZAd2ehuIO42JWtBAHNzXKxV4o/24XFX5No4DJWGO2YSGQttW+zn7d/4rQ=="
            arch_suffix = "-x86"
        name = f"fpm-1.9.3-2.3.1-linux{arch_suffix}"
    else:
        checksum = "oXfq+0H2SbdrbMik07mYloAZ8uHrmf6IJk+Q3P1kwywuZnKTXSaaeZUJNlWoVpRDWNu537YxxpBQWuTcF+6xfw=="
        name = "fpm-1.9.3-20150715-2.2.2-mac"

    url = RELEASES_URL.format(repository=DEFAULT_REPOSITORY, tag=name, file=f"{name}.7z")
    return ArtifactRequest(name=name, url=url, checksum=checksum)


ZSTD = ToolDescriptor(
    name="zstd",
    version="1.3.4",
    mac="pLrLk2FAkop3C2drZ7+oxyGPQJjNMzUmVf0m3ZCc1a3WIEjYJNpq9UYvfBU/dl2CsRAchlKvoIOWRxRIdX0ugA==",
    linux={
        "x64": "C1TcuuN/0nNvHMwfkKmE8rgsDxkeSbGoV4DMSf4kIJIO4mNp+PUayYeBf4h3usScsWfvX70Jvg5v3yt1FySTDg==",
    },
    win={
        "ia32": "URJhIibWZUEy9USYlHBjc6bgEp7KP+hMJl/YWsssMTt6umxgk+niyc5meKs2XwOwBsvK6KsP+Qr/BawK7CdWVQ==",
        "x64": "S4RtWJwccUQfr/UQeZuWTJyJvU5uaYaP3rGT6e55epuAJx+fuljbJTBw+n8da0oRLIw0essEjGHkNafWgmKt1w==",
    },
)

# Logical names that are resolved from the catalog instead of the caller's URL
SPECIAL_TOOLS: Dict[str, Callable[[PlatformInfo], ArtifactRequest]] = {
    "fpm": fpm_request,
    "zstd": lambda platform: download_tool_request(ZSTD, platform),
}


def resolve_catalog_request(
    name: str, platform: PlatformInfo
) -> Optional[ArtifactRequest]:
    """
    Resolve a special-cased tool name to a concrete request.

    Returns:
        ArtifactRequest for catalog tools, None for any other name

    Raises:
        UnsupportedPlatformError: If the tool has no build for the platform
    """
    factory = SPECIAL_TOOLS.get(name)
    if factory is None:
        return None

    request = factory(platform)
    logger.debug(f"Resolved {name} for {platform} to {request.name}")
    return request
