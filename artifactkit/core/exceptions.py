"""
Centralized exception hierarchy for ArtifactKit.

Every fatal condition raised by the cache pipeline derives from
ArtifactKitError so the CLI can present it uniformly.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ArtifactKitError(Exception):
    """Base exception for all ArtifactKit errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(ArtifactKitError):
    """Invalid settings or an artifact that cannot be described for this host."""

    pass


class UnsupportedPlatformError(ConfigurationError):
    """Raised when no checksum is registered for the current OS/architecture."""

    def __init__(self, tool_name: str, os_name: str, arch: str):
        self.tool_name = tool_name
        self.os_name = os_name
        self.arch = arch
        super().__init__(f"Checksum not specified for {tool_name} on {os_name}:{arch}")


# ============================================================================
# Environment Exceptions
# ============================================================================


class CacheEnvironmentError(ArtifactKitError):
    """Base exception for local environment defects."""

    pass


class CacheDirectoryError(CacheEnvironmentError):
    """Raised when the cache root or a working area cannot be resolved or created."""

    pass


class CacheLookupError(CacheEnvironmentError):
    """Raised when the state of a cache entry cannot be determined."""

    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Error during cache check for path {path}: {cause}")


# ============================================================================
# Transfer Exceptions
# ============================================================================


class TransferError(ArtifactKitError):
    """Base exception for download and verification failures."""

    pass


class DownloadError(TransferError):
    """Exception raised when download fails."""

    pass


class ChecksumError(TransferError):
    """Exception raised when checksum verification fails."""

    pass


# ============================================================================
# Unpack / Publish Exceptions
# ============================================================================


class ExtractionError(ArtifactKitError):
    """Raised when the archive tool cannot be started or exits with an error."""

    def __init__(self, message: str, returncode: int = -1, output: str = ""):
        self.returncode = returncode
        self.output = output
        super().__init__(message)


class PublishError(ArtifactKitError):
    """Raised for publish-stage failures that are not benign races."""

    pass
