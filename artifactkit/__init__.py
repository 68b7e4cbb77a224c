"""
ArtifactKit - download, verify, unpack and cache third-party build tools.

Given an artifact identity (name, URL, checksum), ArtifactKit guarantees that a
verified, unpacked copy exists at a deterministic path in a shared cache,
downloading it at most once.
"""

__version__ = "0.1.0"
