"""
Pytest configuration and shared fixtures for ArtifactKit tests.
"""

import pytest
from pathlib import Path

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.archives import fake_archive_tool, fake_downloader

from artifactkit.core.config import Settings


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "platform_unix: marks tests that only run on Unix-like systems"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def cache_root(tmp_path) -> Path:
    """Cache root directory used through the ARTIFACTKIT_CACHE override."""
    root = tmp_path / "cache"
    return root


@pytest.fixture
def settings(cache_root) -> Settings:
    """Settings with an isolated cache root on a linux x64 host."""
    return Settings(cache_override=str(cache_root), os_name="linux", arch="x64")


@pytest.fixture
def isolated_home(tmp_path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def no_network(monkeypatch):
    """Disable network access for tests."""
    import socket

    def guard(*args, **kwargs):
        raise RuntimeError("Network access not allowed in this test")

    monkeypatch.setattr(socket, "socket", guard)


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset module-level caches between tests."""
    from artifactkit.core import platform

    platform.detect_platform.cache_clear()
    yield
