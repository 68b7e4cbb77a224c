"""
Cache-dir command implementation.

Prints the cache root directory.
"""

from artifactkit.core.directory import resolve_cache_root


def run(args) -> int:
    """
    Run the cache-dir command.

    Args:
        args: Parsed command-line arguments with settings

    Returns:
        Exit code (0 for success)
    """
    print(resolve_cache_root(args.settings))
    return 0
