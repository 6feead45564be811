"""Per-user configuration store."""
from __future__ import annotations

from .service import UserConfigurationService
from .storage import InMemoryUserConfigurationStorage, JsonFileUserConfigurationStorage, UserConfigurationStorage

__all__ = [
    "InMemoryUserConfigurationStorage",
    "JsonFileUserConfigurationStorage",
    "UserConfigurationService",
    "UserConfigurationStorage",
]
