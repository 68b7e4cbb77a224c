"""Test fixtures for ArtifactKit tests.

- archives: fake 7za script, tar/xz builders and a local FakeDownloader

Import fixtures in your tests using:
    from tests.fixtures.archives import make_tar, FakeDownloader
"""

__all__ = [
    "archives",
]
