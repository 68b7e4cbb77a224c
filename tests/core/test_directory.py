"""
Tests for cache root resolution.
"""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from artifactkit.core.config import Settings
from artifactkit.core.directory import (
    ensure_cache_dir,
    get_home_dir,
    is_system_profile,
    resolve_cache_root,
)
from artifactkit.core.exceptions import CacheDirectoryError


@pytest.mark.unit
class TestResolveCacheRoot:
    """Test resolve_cache_root()."""

    def test_override_is_used_verbatim(self, tmp_path):
        """Test the override wins on every OS."""
        for os_name in ("linux", "macos", "windows"):
            settings = Settings(
                cache_override=str(tmp_path / "c"),
                os_name=os_name,
                local_app_data="C:\\Users\\dev\\AppData\\Local",
            )
            assert resolve_cache_root(settings) == tmp_path / "c"

    def test_macos(self, tmp_path):
        """Test macOS uses ~/Library/Caches/<namespace>."""
        settings = Settings(os_name="macos", home_dir=tmp_path)
        assert resolve_cache_root(settings, "electron-builder") == (
            tmp_path / "Library" / "Caches" / "electron-builder"
        )

    def test_linux(self, tmp_path):
        """Test Linux uses ~/.cache/<namespace>."""
        settings = Settings(os_name="linux", home_dir=tmp_path)
        assert resolve_cache_root(settings) == tmp_path / ".cache" / "artifactkit"

    def test_linux_uses_namespace_parameter(self, tmp_path):
        """Test the namespace argument is honored on Linux too."""
        settings = Settings(os_name="linux", home_dir=tmp_path)
        assert resolve_cache_root(settings, "other") == tmp_path / ".cache" / "other"

    def test_linux_uses_real_home(self, isolated_home):
        """Test the home directory comes from the environment when not injected."""
        settings = Settings(os_name="linux")
        assert resolve_cache_root(settings) == isolated_home / ".cache" / "artifactkit"

    def test_windows_local_app_data(self):
        """Test Windows uses %LOCALAPPDATA%/<namespace>/cache."""
        local = "C:\\Users\\dev\\AppData\\Local"
        settings = Settings(os_name="windows", local_app_data=local, username="dev")

        assert resolve_cache_root(settings) == Path(local) / "artifactkit" / "cache"

    def test_windows_system_account(self):
        """Test the SYSTEM account falls back to the temp directory."""
        settings = Settings(
            os_name="windows",
            local_app_data="C:\\Users\\dev\\AppData\\Local",
            username="SYSTEM",
        )
        assert resolve_cache_root(settings) == (
            Path(tempfile.gettempdir()) / "artifactkit-cache"
        )

    def test_windows_system32_profile(self):
        """Test a profile under system32 falls back to the temp directory."""
        settings = Settings(
            os_name="windows",
            local_app_data="C:\\Windows\\System32\\config\\systemprofile\\AppData\\Local",
            username="svc",
        )
        assert resolve_cache_root(settings) == (
            Path(tempfile.gettempdir()) / "artifactkit-cache"
        )

    def test_windows_without_local_app_data(self, tmp_path):
        """Test Windows without LOCALAPPDATA uses ~/.cache/<namespace>."""
        settings = Settings(os_name="windows", home_dir=tmp_path)
        assert resolve_cache_root(settings) == tmp_path / ".cache" / "artifactkit"

    def test_home_lookup_failure(self):
        """Test home directory failure is a CacheDirectoryError."""
        settings = Settings(os_name="linux")
        with patch(
            "artifactkit.core.directory.Path.home",
            side_effect=RuntimeError("Could not determine home directory."),
        ):
            with pytest.raises(CacheDirectoryError, match="home directory"):
                resolve_cache_root(settings)


class TestIsSystemProfile:
    """Test is_system_profile()."""

    def test_regular_user(self):
        settings = Settings(
            local_app_data="C:\\Users\\dev\\AppData\\Local", username="dev"
        )
        assert is_system_profile(settings) is False

    def test_under_system_root(self):
        settings = Settings(
            local_app_data="D:\\WinNT\\ServiceProfiles\\LocalService\\AppData\\Local",
            system_root="D:\\WinNT",
        )
        assert is_system_profile(settings) is True

    def test_system_root_prefix_only(self):
        """Test a sibling directory sharing the prefix is not a system profile."""
        settings = Settings(
            local_app_data="C:\\WindowsApps\\dev\\Local", system_root="C:\\Windows"
        )
        assert is_system_profile(settings) is False


class TestHelpers:
    """Test home and directory helpers."""

    def test_injected_home(self, tmp_path):
        assert get_home_dir(Settings(home_dir=tmp_path)) == tmp_path

    def test_ensure_cache_dir_creates_parents(self, tmp_path):
        target = tmp_path / "a" / "b" / "c"
        assert ensure_cache_dir(target) == target
        assert target.is_dir()

    def test_ensure_cache_dir_existing(self, tmp_path):
        """Test an existing directory is tolerated."""
        ensure_cache_dir(tmp_path)
        assert tmp_path.is_dir()

    def test_ensure_cache_dir_failure(self, tmp_path):
        """Test creation failure raises CacheDirectoryError."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(CacheDirectoryError, match="Failed to create"):
            ensure_cache_dir(blocker / "sub")
