"""
Entry point for running ArtifactKit CLI as a module.

Usage: python -m artifactkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
