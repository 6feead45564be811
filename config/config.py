"""Settings of the configuration service itself.

Implements a hierarchical settings loader with the following precedence:
1. Default values (lowest priority)
2. JSON settings file (``config/service.json``)
3. Environment variables
4. Command-line arguments (highest priority)

Settings are deep-merged across all sources, allowing partial overrides at
any level. These settings say *where* the site properties live; the site
properties themselves are loaded by ``siteconfig``.
"""
from __future__ import annotations

import argparse
import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import ConfigurationError
from siteconfig.scanner import DEFAULT_CUSTOM_PROPERTIES_PATTERN

USER_STORE_BACKENDS = ("memory", "json")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SiteSourcesConfig:
    """Where site properties files are found.

    Attributes:
        root: Absolute path prepended to relative locations
        locations: Ordered locations; later entries override earlier ones
        custom_pattern: Regular expression for custom override file names
    """
    root: Optional[str] = None
    locations: Tuple[str, ...] = ()
    custom_pattern: str = DEFAULT_CUSTOM_PROPERTIES_PATTERN

    def __post_init__(self):
        try:
            re.compile(self.custom_pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid custom_pattern {self.custom_pattern!r}: {e}") from e
        if self.root is not None and not os.path.isabs(os.path.expanduser(self.root)):
            raise ConfigurationError(f"Configuration root must be absolute: {self.root}")
        # Lists coming from JSON are normalised to tuples to keep the dataclass hashable
        object.__setattr__(self, "locations", tuple(self.locations))


@dataclass(frozen=True)
class UserStoreConfig:
    """User configuration storage settings.

    Attributes:
        backend: Storage backend name (memory | json)
        path: Directory used by the json backend
    """
    backend: str = "memory"
    path: str = "data/user_config"

    def __post_init__(self):
        if self.backend not in USER_STORE_BACKENDS:
            raise ConfigurationError(f"Invalid user store backend: {self.backend}")


@dataclass(frozen=True)
class AuditConfig:
    """Audit trail settings.

    Attributes:
        log_dir: Directory for audit files
        enabled: Record property writes to an audit file
    """
    log_dir: str = "logs/audit"
    enabled: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Complete service settings.

    Attributes:
        site: Site properties sources
        user_store: User configuration storage
        audit: Audit trail
        debug: Debug mode flag
        log_level: Logging verbosity level
    """
    site: SiteSourcesConfig = field(default_factory=SiteSourcesConfig)
    user_store: UserStoreConfig = field(default_factory=UserStoreConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    debug: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")


class ConfigLoader:
    """Centralized settings loader with validation and hierarchy."""

    SETTINGS_FILE = "service.json"

    def __init__(self, config_dir: Path = Path("config")):
        self.config_dir = Path(config_dir)

    def load(self, argv: List[str]) -> Tuple[AppConfig, List[str]]:
        """Load settings with proper hierarchy: defaults → file → env → CLI.

        Args:
            argv: Command-line arguments to parse

        Returns:
            Tuple of (AppConfig instance, remaining CLI arguments)
        """
        config_dict = self._get_defaults()
        self._deep_update(config_dict, self._load_json_settings())
        self._deep_update(config_dict, self._load_env_overrides())
        cli_overrides, unknown_args = self._parse_cli_args(argv)
        self._deep_update(config_dict, cli_overrides)
        return self._build_config(config_dict), unknown_args

    def _get_defaults(self) -> Dict[str, Any]:
        return {
            "site": {
                "root": None,
                "locations": [],
                "custom_pattern": DEFAULT_CUSTOM_PROPERTIES_PATTERN,
            },
            "user_store": {
                "backend": "memory",
                "path": "data/user_config",
            },
            "audit": {
                "log_dir": "logs/audit",
                "enabled": True,
            },
            "debug": False,
            "log_level": "INFO",
        }

    def _load_json_settings(self) -> Dict[str, Any]:
        """Load the JSON settings file; a missing file yields no overrides.

        Raises:
            ConfigurationError: If the file exists but is not a JSON object
        """
        file_path = self.config_dir / self.SETTINGS_FILE
        if not file_path.exists():
            return {}
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(f"Failed to load {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{file_path} must contain a JSON object")
        return data

    def _load_env_overrides(self) -> Dict[str, Any]:
        """Load overrides from environment variables.

        Supported environment variables:
        - SITECONFIG_ROOT: Configuration root
        - SITECONFIG_LOCATIONS: Comma separated locations
        - SITECONFIG_CUSTOM_PATTERN: Custom override filename pattern
        - USER_CONFIG_BACKEND / USER_CONFIG_PATH: User store backend and directory
        - AUDIT_LOG_DIR: Audit directory
        - AUDIT_ENABLED: Enable or disable the audit trail
        - DEBUG: Enable debug mode
        - LOG_LEVEL: Set logging level
        """
        overrides: Dict[str, Any] = {}

        root = os.getenv("SITECONFIG_ROOT")
        if root:
            overrides.setdefault("site", {})["root"] = root

        locations = os.getenv("SITECONFIG_LOCATIONS")
        if locations:
            overrides.setdefault("site", {})["locations"] = [
                item.strip() for item in locations.split(",") if item.strip()
            ]

        pattern = os.getenv("SITECONFIG_CUSTOM_PATTERN")
        if pattern:
            overrides.setdefault("site", {})["custom_pattern"] = pattern

        backend = os.getenv("USER_CONFIG_BACKEND")
        if backend:
            overrides.setdefault("user_store", {})["backend"] = backend.lower()

        store_path = os.getenv("USER_CONFIG_PATH")
        if store_path:
            overrides.setdefault("user_store", {})["path"] = store_path

        audit_dir = os.getenv("AUDIT_LOG_DIR")
        if audit_dir:
            overrides.setdefault("audit", {})["log_dir"] = audit_dir

        if os.getenv("AUDIT_ENABLED") is not None:
            overrides.setdefault("audit", {})["enabled"] = self._env_bool("AUDIT_ENABLED", True)

        if self._env_bool("DEBUG"):
            overrides["debug"] = True

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            overrides["log_level"] = log_level.upper()

        return overrides

    def _parse_cli_args(self, argv: List[str]) -> Tuple[Dict[str, Any], List[str]]:
        """Parse CLI arguments.

        Returns:
            Tuple of (overrides dictionary, remaining arguments)
        """
        parser = argparse.ArgumentParser(description="Site configuration service", add_help=False)
        parser.add_argument("--root", help="Configuration root for relative locations")
        parser.add_argument(
            "--location",
            action="append",
            dest="locations",
            help="Properties location (repeatable, later ones override earlier ones)",
        )
        parser.add_argument("--custom-pattern", help="Regular expression for custom override file names")
        parser.add_argument("--user-store", choices=list(USER_STORE_BACKENDS), help="User configuration backend")
        parser.add_argument("--user-store-path", help="Directory for the json user configuration backend")
        parser.add_argument("--no-audit", action="store_true", help="Disable the audit trail")
        parser.add_argument("--debug", action="store_true", help="Enable debug mode")
        parser.add_argument("--log-level", choices=list(LOG_LEVELS), help="Set logging level")

        known, unknown = parser.parse_known_args(argv)

        overrides: Dict[str, Any] = {}
        if known.root:
            overrides.setdefault("site", {})["root"] = known.root
        if known.locations:
            overrides.setdefault("site", {})["locations"] = known.locations
        if known.custom_pattern:
            overrides.setdefault("site", {})["custom_pattern"] = known.custom_pattern
        if known.user_store:
            overrides.setdefault("user_store", {})["backend"] = known.user_store
        if known.user_store_path:
            overrides.setdefault("user_store", {})["path"] = known.user_store_path
        if known.no_audit:
            overrides.setdefault("audit", {})["enabled"] = False
        if known.debug:
            overrides["debug"] = True
        if known.log_level:
            overrides["log_level"] = known.log_level

        return overrides, unknown

    def _build_config(self, config_dict: Dict[str, Any]) -> AppConfig:
        """Build and validate the final settings object.

        Raises:
            ConfigurationError: If the settings are invalid
        """
        try:
            site = SiteSourcesConfig(**config_dict.get("site", {}))
            user_store = UserStoreConfig(**config_dict.get("user_store", {}))
            audit = AuditConfig(**config_dict.get("audit", {}))
        except TypeError as e:
            raise ConfigurationError(f"Unknown setting: {e}") from e

        debug = bool(config_dict.get("debug", False))
        log_level = str(config_dict.get("log_level", "INFO")).upper()
        if debug and log_level == "INFO":
            log_level = "DEBUG"

        return AppConfig(site=site, user_store=user_store, audit=audit, debug=debug, log_level=log_level)

    @staticmethod
    def _env_bool(name: str, default: bool = False) -> bool:
        """Parse boolean from environment variable ("1", "true", "yes", "y", "on")."""
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "y", "on"}

    @staticmethod
    def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Recursively update 'target' with 'updates' without clobbering nested dicts."""
        for key, new_val in updates.items():
            if isinstance(new_val, dict) and isinstance(target.get(key), dict):
                ConfigLoader._deep_update(target[key], new_val)
            else:
                target[key] = new_val


__all__ = ["AppConfig", "SiteSourcesConfig", "UserStoreConfig", "AuditConfig", "ConfigLoader"]
