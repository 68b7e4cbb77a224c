"""
Download-artifact command implementation.

Downloads, unpacks and caches an artifact, then writes its path to stdout.
"""

import logging
import sys

from artifactkit.cache.acquire import ArtifactCache
from artifactkit.cache.models import ArtifactRequest

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the download-artifact command.

    Args:
        args: Parsed command-line arguments with:
            - name: Artifact name ('fpm', 'zstd', 'node' or any cache name)
            - url: Artifact URL (version token for 'node')
            - sha512: Expected checksum (optional)
            - settings: Settings built by the CLI

    Returns:
        Exit code (0 for success)
    """
    cache = ArtifactCache(args.settings)
    request = ArtifactRequest(name=args.name, url=args.url, checksum=args.sha512)

    result = cache.acquire(request)
    logger.debug(f"Resolved {args.name or args.url} to {result.path}")

    # Callers read the path verbatim, no trailing newline
    sys.stdout.write(str(result.path))
    sys.stdout.flush()
    return 0
