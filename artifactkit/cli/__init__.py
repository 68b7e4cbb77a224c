"""
ArtifactKit CLI module.

This module provides the command-line interface for ArtifactKit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
