"""
packsync configuration management.

Handles loading configuration from various sources:
- Default values
- Configuration file (TOML)
- Environment variables
- Command-line arguments

This is the tool's own configuration. The plugin manifest itself is a
separate YAML file, usually kept next to the Neovim configuration.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

import yaml

logger = logging.getLogger(__name__)

# Configuration directory and file constants
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "packsync"
DEFAULT_CONFIG_FILE = "config.toml"

MANIFEST_FILE = "packsync_plugins.yml"
DEFAULT_PACK_NAME = "packsync"

ENV_PREFIX = "PACKSYNC_"


@dataclass
class EditorConfig:
    """How to find the editor's package directory."""

    command: str = "nvim"
    timeout: float = 30.0

    # Explicit pack/<name> directory; skips querying the editor
    pack_root: Optional[Path] = None


@dataclass
class DownloadConfig:
    """Settings for archive downloads."""

    timeout: Optional[float] = None  # None waits forever
    user_agent: Optional[str] = None


@dataclass
class SyncConfig:
    """Settings for the sync command."""

    retry_partial: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[Path] = None


@dataclass
class PacksyncConfig:
    """Main configuration container for packsync."""

    config_dir: Path = DEFAULT_CONFIG_DIR
    manifest_path: Optional[Path] = None
    pack_name: str = DEFAULT_PACK_NAME

    editor: EditorConfig = field(default_factory=EditorConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_manifest_path(self) -> Path:
        """Manifest location: explicit setting first, then the editor config dir."""
        if self.manifest_path is not None:
            return Path(self.manifest_path).expanduser()
        return default_manifest_path()


def default_manifest_path(
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> Path:
    """Resolve the manifest location next to the Neovim configuration.

    Order: ``$XDG_CONFIG_HOME/nvim``, then ``%LOCALAPPDATA%\\nvim`` on
    Windows (bare file name if unset), then ``~/.config/nvim``.

    Args:
        environ: Environment to read (default: os.environ)
        platform: Platform name (default: sys.platform)
    """
    environ = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform

    if xdg_config_home := environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config_home) / "nvim" / MANIFEST_FILE

    if platform.startswith("win"):
        if local_app_data := environ.get("LOCALAPPDATA"):
            return Path(local_app_data) / "nvim" / MANIFEST_FILE
        return Path(MANIFEST_FILE)

    return Path.home() / ".config" / "nvim" / MANIFEST_FILE


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def load_config(
    config_path: Optional[Path] = None,
    env_prefix: str = ENV_PREFIX,
) -> PacksyncConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file
    3. Default values

    Args:
        config_path: Path to config file (default: ~/.config/packsync/config.toml)
        env_prefix: Prefix for environment variables

    Returns:
        Loaded configuration
    """
    config = PacksyncConfig()

    if config_path is None:
        env_config_dir = os.environ.get(f"{env_prefix}CONFIG_DIR")
        if env_config_dir:
            config.config_dir = Path(env_config_dir)
        config_path = config.config_dir / DEFAULT_CONFIG_FILE

    if config_path.exists():
        config = _load_from_file(config_path, config)

    config = _load_from_env(config, env_prefix)

    return config


def _load_from_file(path: Path, config: PacksyncConfig) -> PacksyncConfig:
    """Load configuration from a TOML file."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return config

    for section_name in ("editor", "download", "sync", "logging"):
        section = getattr(config, section_name)
        for key, value in data.get(section_name, {}).items():
            if hasattr(section, key):
                setattr(section, key, value)
            else:
                logger.warning(f"Unknown config key {section_name}.{key} in {path}")

    if config.editor.pack_root is not None:
        config.editor.pack_root = Path(config.editor.pack_root)
    if config.logging.file is not None:
        config.logging.file = Path(config.logging.file)

    # Top-level settings
    if "manifest_path" in data:
        config.manifest_path = Path(data["manifest_path"])
    if "pack_name" in data:
        config.pack_name = str(data["pack_name"])

    return config


def _load_from_env(config: PacksyncConfig, prefix: str) -> PacksyncConfig:
    """Load configuration from environment variables."""

    if env_val := os.environ.get(f"{prefix}MANIFEST"):
        config.manifest_path = Path(env_val)
    if env_val := os.environ.get(f"{prefix}PACK_NAME"):
        config.pack_name = env_val

    # Editor
    if env_val := os.environ.get(f"{prefix}EDITOR"):
        config.editor.command = env_val
    if env_val := os.environ.get(f"{prefix}EDITOR_TIMEOUT"):
        config.editor.timeout = float(env_val)
    if env_val := os.environ.get(f"{prefix}PACK_ROOT"):
        config.editor.pack_root = Path(env_val)

    # Downloads
    if env_val := os.environ.get(f"{prefix}DOWNLOAD_TIMEOUT"):
        config.download.timeout = float(env_val)

    # Sync
    if env_val := os.environ.get(f"{prefix}RETRY_PARTIAL"):
        config.sync.retry_partial = _parse_bool(env_val)

    # Logging
    if env_val := os.environ.get(f"{prefix}LOG_LEVEL"):
        config.logging.level = env_val.upper()

    return config


def _config_to_dict(config: PacksyncConfig) -> dict[str, Any]:
    """Convert configuration to a plain dictionary."""
    def path_or_none(value: Optional[Path]) -> Optional[str]:
        return str(value) if value is not None else None

    return {
        "config_dir": str(config.config_dir),
        "manifest_path": str(config.get_manifest_path()),
        "pack_name": config.pack_name,
        "editor": {
            "command": config.editor.command,
            "timeout": config.editor.timeout,
            "pack_root": path_or_none(config.editor.pack_root),
        },
        "download": {
            "timeout": config.download.timeout,
            "user_agent": config.download.user_agent,
        },
        "sync": {
            "retry_partial": config.sync.retry_partial,
        },
        "logging": {
            "level": config.logging.level,
            "format": config.logging.format,
            "file": path_or_none(config.logging.file),
        },
    }


def export_config_yaml(config: PacksyncConfig) -> str:
    """Export configuration as YAML string."""
    return yaml.safe_dump(_config_to_dict(config), default_flow_style=False, sort_keys=False)


def export_config_json(config: PacksyncConfig) -> str:
    """Export configuration as JSON string."""
    return json.dumps(_config_to_dict(config), indent=2)
