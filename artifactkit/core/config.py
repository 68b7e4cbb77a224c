"""
Process-wide settings for ArtifactKit.

Environment lookups happen exactly once, in Settings.from_env(); everything
downstream receives a Settings instance. This keeps the cache root resolver
and the unpack strategies testable with injected overrides.

Layering (lowest to highest priority):
    1. Built-in defaults
    2. Environment variables (ARTIFACTKIT_CACHE, ARTIFACTKIT_ARCHIVE_TOOL,
       SZA_PATH, LOCALAPPDATA, USERNAME, SYSTEMROOT)
    3. YAML configuration file (optional)
    4. Command-line flags
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from artifactkit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CACHE_ENV_VAR = "ARTIFACTKIT_CACHE"
ARCHIVE_TOOL_ENV_VAR = "ARTIFACTKIT_ARCHIVE_TOOL"
LEGACY_ARCHIVE_TOOL_ENV_VAR = "SZA_PATH"

DEFAULT_NAMESPACE = "artifactkit"
DEFAULT_ARCHIVE_TOOL = "7za"

# Keys accepted in the YAML configuration file
_YAML_KEYS = {
    "cache_dir": "cache_override",
    "archive_tool": "archive_tool",
    "namespace": "namespace",
}


@dataclass(frozen=True)
class Settings:
    """
    Immutable configuration consumed by the resolver and the acquisition pipeline.

    Attributes:
        cache_override: Absolute cache root; when set, no other placement logic runs
        local_app_data: Windows local application data directory
        username: Current account name (used to detect the SYSTEM account)
        system_root: Windows system directory (e.g. C:\\Windows)
        archive_tool: Path or name of the 7-Zip compatible archive tool
        namespace: Directory name of this product inside the OS cache location
        home_dir: Injected home directory; detected when None
        os_name: Injected OS ('macos', 'linux', 'windows'); detected when None
        arch: Injected architecture ('x64', 'x86', 'arm64', 'arm'); detected when None
    """

    cache_override: Optional[str] = None
    local_app_data: Optional[str] = None
    username: Optional[str] = None
    system_root: Optional[str] = None
    archive_tool: str = DEFAULT_ARCHIVE_TOOL
    namespace: str = DEFAULT_NAMESPACE
    home_dir: Optional[Path] = None
    os_name: Optional[str] = None
    arch: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings populated from the environment

        Example:
            >>> settings = Settings.from_env({"ARTIFACTKIT_CACHE": "/tmp/cache"})
            >>> settings.cache_override
            '/tmp/cache'
        """
        if environ is None:
            environ = os.environ

        archive_tool = (
            environ.get(ARCHIVE_TOOL_ENV_VAR)
            or environ.get(LEGACY_ARCHIVE_TOOL_ENV_VAR)
            or DEFAULT_ARCHIVE_TOOL
        )

        return cls(
            cache_override=environ.get(CACHE_ENV_VAR) or None,
            local_app_data=environ.get("LOCALAPPDATA") or None,
            username=environ.get("USERNAME") or None,
            system_root=environ.get("SYSTEMROOT") or None,
            archive_tool=archive_tool,
        )

    @classmethod
    def from_yaml(cls, config_file: Path, base: Optional["Settings"] = None) -> "Settings":
        """
        Layer a YAML configuration file on top of existing settings.

        Recognized keys: cache_dir, archive_tool, namespace.

        Args:
            config_file: Path to YAML file
            base: Settings to layer onto (defaults to Settings.from_env())

        Returns:
            New Settings instance

        Raises:
            ConfigurationError: If the file is missing, unparsable or has unknown keys
        """
        base = base if base is not None else cls.from_env()
        config_file = Path(config_file)

        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        logger.debug(f"Loading configuration from {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid configuration in {config_file}: expected a mapping"
            )

        unknown = sorted(set(data) - set(_YAML_KEYS))
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys in {config_file}: {', '.join(unknown)}"
            )

        overrides = {_YAML_KEYS[key]: value for key, value in data.items()}
        return base.with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """
        Return a copy with the given non-None fields replaced.

        Example:
            >>> Settings().with_overrides(archive_tool="/opt/7za").archive_tool
            '/opt/7za'
        """
        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigurationError(f"Unknown setting: {key}")
            if value is None:
                continue
            if key == "home_dir":
                value = Path(value)
            elif not isinstance(value, str):
                value = str(value)
            changes[key] = value
        return replace(self, **changes)
