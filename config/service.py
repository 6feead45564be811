"""Configuration service facade for simplified settings access.

Gives client code flat properties instead of reaching through the nested
AppConfig sections.
"""
from __future__ import annotations

from typing import Any, List, Optional

from config.config import AppConfig, ConfigLoader


class ConfigurationService:
    """Facade over the service settings.

    Example:
        settings = ConfigurationService(config)
        root = settings.site_root  # Instead of config.site.root

    Attributes:
        _config: Underlying AppConfig instance
    """

    def __init__(self, config: AppConfig):
        self._config = config

    # Site sources
    @property
    def site_root(self) -> Optional[str]:
        """Get the configuration root."""
        return self._config.site.root

    @property
    def site_locations(self) -> List[str]:
        """Get the ordered properties locations."""
        return list(self._config.site.locations)

    @property
    def custom_pattern(self) -> str:
        """Get the custom override filename pattern."""
        return self._config.site.custom_pattern

    # User store
    @property
    def user_store_backend(self) -> str:
        return self._config.user_store.backend

    @property
    def user_store_path(self) -> str:
        return self._config.user_store.path

    # Audit
    @property
    def audit_enabled(self) -> bool:
        return self._config.audit.enabled

    @property
    def audit_log_dir(self) -> str:
        return self._config.audit.log_dir

    # General
    @property
    def debug(self) -> bool:
        return self._config.debug

    @property
    def log_level(self) -> str:
        return self._config.log_level

    @property
    def raw_config(self) -> AppConfig:
        """Get the underlying AppConfig for direct access."""
        return self._config

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary for logging."""
        return {
            "site": {
                "root": self.site_root,
                "locations": self.site_locations,
                "custom_pattern": self.custom_pattern,
            },
            "user_store": {
                "backend": self.user_store_backend,
                "path": self.user_store_path,
            },
            "audit": {
                "enabled": self.audit_enabled,
                "log_dir": self.audit_log_dir,
            },
            "debug": self.debug,
            "log_level": self.log_level,
        }


class ConfigurationServiceFactory:
    """Factory methods for common ConfigurationService creation patterns."""

    @staticmethod
    def create_from_args(args: list[str]) -> tuple[ConfigurationService, list[str]]:
        """Create the facade from command-line arguments.

        Returns:
            Tuple of (ConfigurationService, remaining arguments)
        """
        loader = ConfigLoader()
        config, unknown_args = loader.load(args)
        return ConfigurationService(config), unknown_args
