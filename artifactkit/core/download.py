"""
Network download with retry logic and checksum verification.

This module is the download collaborator of the acquisition pipeline:
- HTTP/HTTPS downloads with TLS verification
- Retry logic with exponential backoff for transport failures
- SHA-512 verification computed while streaming
- Timeout handling

Checksum mismatches are never retried: they raise ChecksumError, while
transport failures raise DownloadError, so callers can tell them apart.
"""

import base64
import binascii
import hashlib
import logging
import time
from pathlib import Path
from typing import Optional, Protocol

import requests
from requests.exceptions import RequestException

from artifactkit.core.exceptions import ChecksumError, DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class Downloader(Protocol):
    """Fetches url into destination and verifies it against checksum."""

    def download(self, url: str, destination: Path, checksum: Optional[str]) -> Path:
        ...


class StreamingHasher:
    """Compute hash incrementally for streaming downloads."""

    def __init__(self, algorithm: str = "sha512"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm ('sha512', 'sha256')

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm == "sha512":
            self.hasher = hashlib.sha512()
        elif self.algorithm == "sha256":
            self.hasher = hashlib.sha256()
        else:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def hexdigest(self) -> str:
        return self.hasher.hexdigest()

    def b64digest(self) -> str:
        return base64.b64encode(self.hasher.digest()).decode("ascii")

    def verify(self, expected: str) -> bool:
        """
        Check if computed hash matches expected value.

        Args:
            expected: Expected digest, base64 or hex encoded

        Returns:
            True if hashes match, False otherwise
        """
        expected = expected.strip()
        if expected.lower() == self.hexdigest():
            return True
        try:
            return base64.b64decode(expected, validate=True) == self.hasher.digest()
        except (binascii.Error, ValueError):
            return False


class HttpDownloader:
    """
    Downloader backed by requests.

    Example:
        >>> downloader = HttpDownloader(timeout=60)
        >>> downloader.download(url, Path("cache/tool.7z"), "fcKdXPJSso3x...==")
    """

    def __init__(
        self,
        timeout: int = 60,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session or requests.Session()

    def download(self, url: str, destination: Path, checksum: Optional[str]) -> Path:
        """
        Download url to destination, verifying the SHA-512 checksum.

        Args:
            url: URL to download from
            destination: Local path to write (overwritten)
            checksum: Expected SHA-512 (base64 or hex); empty or None skips verification

        Returns:
            Path to downloaded file

        Raises:
            DownloadError: If the URL is empty or the transfer fails after retries
            ChecksumError: If checksum doesn't match expected value
        """
        if not url:
            raise DownloadError(f"Cannot download to {destination}: URL is empty")

        destination = Path(destination)

        for attempt in range(self.max_retries):
            try:
                return self._download_once(url, destination, checksum)
            except RequestException as e:
                if attempt == self.max_retries - 1:
                    destination.unlink(missing_ok=True)
                    raise DownloadError(
                        f"Download of {url} failed after {self.max_retries} attempts: {e}"
                    ) from e

                backoff_seconds = 2**attempt
                logger.warning(
                    f"Download attempt {attempt + 1} failed: {e}. "
                    f"Retrying in {backoff_seconds}s..."
                )
                time.sleep(backoff_seconds)

        raise DownloadError(f"Download of {url} failed: no attempts made")

    def _download_once(
        self, url: str, destination: Path, checksum: Optional[str]
    ) -> Path:
        logger.debug(f"GET {url}")

        hasher = StreamingHasher("sha512") if checksum else None
        downloaded = 0

        with self.session.get(
            url, stream=True, timeout=self.timeout, allow_redirects=True
        ) as response:
            response.raise_for_status()
            try:
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if not chunk:
                            continue
                        f.write(chunk)
                        downloaded += len(chunk)
                        if hasher:
                            hasher.update(chunk)
            except RequestException:
                raise
            except OSError as e:
                destination.unlink(missing_ok=True)
                raise DownloadError(f"Cannot write {destination}: {e}") from e

        if hasher and not hasher.verify(checksum):
            destination.unlink(missing_ok=True)
            raise ChecksumError(
                f"Checksum mismatch for {url}: "
                f"expected {checksum}, got {hasher.b64digest()}"
            )

        logger.debug(f"Downloaded {downloaded} bytes to {destination}")
        return destination

