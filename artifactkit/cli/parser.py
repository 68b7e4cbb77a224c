"""
ArtifactKit CLI argument parser.

This module implements the command-line interface for ArtifactKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from artifactkit import __version__
from artifactkit.core.config import Settings

logger = logging.getLogger(__name__)


class CLI:
    """ArtifactKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="artifactkit",
            description="ArtifactKit - download, unpack and cache build tool artifacts",
            epilog='Use "artifactkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ArtifactKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to YAML configuration file",
        )
        parser.add_argument(
            "--cache-dir",
            metavar="DIR",
            help="Cache root directory (overrides ARTIFACTKIT_CACHE)",
        )
        parser.add_argument(
            "--archive-tool",
            metavar="PATH",
            help="7-Zip compatible archive tool (overrides ARTIFACTKIT_ARCHIVE_TOOL)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_download_artifact_command(subparsers)
        self._add_cache_dir_command(subparsers)

        return parser

    def _add_download_artifact_command(self, subparsers):
        """Add 'download-artifact' subcommand."""
        parser = subparsers.add_parser(
            "download-artifact",
            help="Download, unpack and cache artifact",
            description="Download, unpack and cache an artifact, printing its path",
        )
        parser.add_argument(
            "--name", "-n", required=True, help="The artifact name"
        )
        parser.add_argument("--url", "-u", required=True, help="The artifact URL")
        parser.add_argument(
            "--sha512", metavar="CHECKSUM", help="The expected sha512 of file"
        )

    def _add_cache_dir_command(self, subparsers):
        """Add 'cache-dir' subcommand."""
        subparsers.add_parser(
            "cache-dir",
            help="Print the cache root directory",
            description="Print the directory under which artifacts are cached",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            parsed_args.settings = self._build_settings(parsed_args)
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _build_settings(self, args) -> Settings:
        """
        Build settings from environment, optional config file and flags.

        Args:
            args: Parsed arguments
        """
        settings = Settings.from_env()
        if args.config:
            settings = Settings.from_yaml(args.config, base=settings)
        return settings.with_overrides(
            cache_override=args.cache_dir, archive_tool=args.archive_tool
        )

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Log records go to stderr; stdout carries only command results.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "download-artifact": "artifactkit.cli.commands.download_artifact",
            "cache-dir": "artifactkit.cli.commands.cache_dir",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
