"""
Entry point for running ArtifactKit CLI as a module.

Usage: python -m artifactkit [command] [options]
"""

from artifactkit.cli.parser import main

if __name__ == "__main__":
    main()
