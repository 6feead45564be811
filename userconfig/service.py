"""Per-user configuration service.

A thin key/value facade over a storage backend. How ``keys`` address content
inside a configuration is entirely up to the backend.
"""
from __future__ import annotations

from typing import Optional

from loguru import logger

from core.exceptions import UserConfigurationError
from userconfig.storage import InMemoryUserConfigurationStorage, UserConfigurationStorage


class UserConfigurationService:
    """Get and set configuration content by (username, config id, keys)."""

    def __init__(self, storage: Optional[UserConfigurationStorage] = None):
        self.storage = storage or InMemoryUserConfigurationStorage()

    def get_user_configuration(self, username: str, config_id: str, *keys: str) -> Optional[str]:
        """Get the content stored for the user, or None if nothing is stored.

        Args:
            username: User owning the configuration
            config_id: Primary configuration identifier
            *keys: Zero to N keys addressing content inside the configuration
        """
        return self.storage.load(username, config_id, tuple(keys))

    def set_user_configuration(self, username: str, config_id: str, configuration: str, *keys: str) -> None:
        """Store content for the user.

        Raises:
            UserConfigurationError: If the backend fails to store the content
        """
        if not username or not config_id:
            raise UserConfigurationError("Both a username and a configuration id are required")
        try:
            self.storage.store(username, config_id, tuple(keys), configuration)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to store user configuration {} for {}: {}", config_id, username, e)
            raise UserConfigurationError(
                f"Could not store configuration '{config_id}' for user '{username}': {e}"
            ) from e
