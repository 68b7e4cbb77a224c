"""
Platform detection for ArtifactKit.

Detects the host OS family and CPU architecture used to pick platform-specific
tool downloads and to place the cache root.

Usage:
    from artifactkit.core.platform import detect_platform

    info = detect_platform()
    print(f"Running on {info.platform_string()}")
"""

import functools
import platform
from dataclasses import dataclass
from typing import Optional

# Architecture qualifiers used by the binaries release catalog
_CATALOG_ARCH = {
    "x64": "x64",
    "x86": "ia32",
    "arm": "armv7",
    "arm64": "armv8",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system family ('macos', 'linux', 'windows')
        arch: CPU architecture ('x64', 'x86', 'arm64', 'arm', or the raw machine name)
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=normalize_arch(platform.machine()))


def _detect_os() -> str:
    """
    Detect operating system family.

    Returns:
        'windows', 'macos' or 'linux' (any other Unix is treated as linux)
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "macos"
    return "linux"


def normalize_arch(machine: str) -> str:
    """
    Normalize a raw CPU identifier to its canonical short form.

    Args:
        machine: Raw identifier (e.g. 'x86_64', 'AMD64', 'aarch64', 'armv7l')

    Returns:
        'x64', 'arm64', 'x86', 'arm', or the lowercased input when unknown

    Example:
        >>> normalize_arch("AMD64")
        'x64'
    """
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64", "armv8", "armv8l"):
        return "arm64"
    elif machine in ("i386", "i686", "x86", "ia32"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    return machine


def catalog_arch(arch: str) -> str:
    """
    Map a canonical architecture to the qualifier used in tool release names.

    Example:
        >>> catalog_arch("arm64")
        'armv8'
    """
    return _CATALOG_ARCH.get(arch, arch)


def host_platform(os_name: Optional[str] = None, arch: Optional[str] = None) -> PlatformInfo:
    """
    Get host platform information with optional injected overrides.

    Example:
        >>> host_platform(os_name="windows", arch="AMD64")
        PlatformInfo(os='windows', arch='x64')
    """
    if os_name and arch:
        return PlatformInfo(os=os_name, arch=normalize_arch(arch))

    detected = detect_platform()
    return PlatformInfo(
        os=os_name or detected.os,
        arch=normalize_arch(arch) if arch else detected.arch,
    )
