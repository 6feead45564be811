"""Use cases exposed by the command line and hosting applications.

Each use case wraps one operation of the site or user configuration services
and reports its outcome as a Result, so callers branch on success instead of
catching service exceptions themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Sequence, Union

from loguru import logger

from core.exceptions import (
    ConfigServiceException,
    InitializationError,
    SiteConfigurationException,
    UserConfigurationError,
    WriteError,
)
from core.result import Failure, Result, Success
from siteconfig.service import SiteConfigurationService
from userconfig.service import UserConfigurationService

TypedValue = Union[str, bool, int, float, None]


@dataclass(frozen=True)
class PropertyValue:
    """A property read through one of the typed accessors.

    Attributes:
        name: Property name
        value: Typed value, or None when absent
        value_type: Accessor used (str, bool, int, long, float, double)
    """
    name: str
    value: TypedValue
    value_type: str = "str"

    @property
    def found(self) -> bool:
        return self.value is not None


class ReloadSiteConfigurationUseCase:
    """Re-reads all property files, optionally switching root and locations."""

    def __init__(self, site_configuration: SiteConfigurationService):
        self.site_configuration = site_configuration

    def execute(
        self,
        root: Optional[str] = None,
        locations: Optional[Sequence[str]] = None,
    ) -> Result[Mapping[str, str], InitializationError]:
        try:
            properties = self.site_configuration.update(root=root, locations=locations)
            return Success(properties)
        except InitializationError as e:
            logger.error("Reload failed: {}", e)
            return Failure(e)


class GetSitePropertyUseCase:
    """Reads a property through the accessor matching the requested type."""

    def __init__(self, site_configuration: SiteConfigurationService):
        self.site_configuration = site_configuration
        self._accessors: Dict[str, Callable[[str], TypedValue]] = {
            "str": site_configuration.get_property,
            "int": site_configuration.get_int,
            "long": site_configuration.get_long,
            "float": site_configuration.get_float,
            "double": site_configuration.get_double,
        }

    def execute(
        self,
        name: str,
        value_type: str = "str",
        default: bool = False,
    ) -> Result[PropertyValue, SiteConfigurationException]:
        """Read ``name``; ``default`` only applies to the boolean accessor."""
        try:
            if value_type == "bool":
                value = self.site_configuration.get_bool(name, default)
            else:
                accessor = self._accessors.get(value_type)
                if accessor is None:
                    return Failure(SiteConfigurationException(f"Unsupported property type: {value_type}"))
                value = accessor(name)
            return Success(PropertyValue(name, value, value_type))
        except SiteConfigurationException as e:
            logger.error("Failed to read property '{}': {}", name, e)
            return Failure(e)


class SetSitePropertyUseCase:
    """Writes a property on behalf of a user."""

    def __init__(self, site_configuration: SiteConfigurationService):
        self.site_configuration = site_configuration

    def execute(self, username: str, name: str, value: str) -> Result[PropertyValue, SiteConfigurationException]:
        try:
            self.site_configuration.set_property(username, name, value)
            return Success(PropertyValue(name, value))
        except WriteError as e:
            # Value is applied even though listeners failed
            logger.warning("Property '{}' set with listener failures: {}", name, e)
            return Failure(e)
        except SiteConfigurationException as e:
            logger.error("Failed to set property '{}': {}", name, e)
            return Failure(e)


class GetUserConfigurationUseCase:
    def __init__(self, user_configuration: UserConfigurationService):
        self.user_configuration = user_configuration

    def execute(self, username: str, config_id: str, *keys: str) -> Result[Optional[str], ConfigServiceException]:
        try:
            return Success(self.user_configuration.get_user_configuration(username, config_id, *keys))
        except (OSError, ValueError) as e:
            logger.error("Failed to read user configuration {} for {}: {}", config_id, username, e)
            return Failure(ConfigServiceException(str(e)))


class SetUserConfigurationUseCase:
    def __init__(self, user_configuration: UserConfigurationService):
        self.user_configuration = user_configuration

    def execute(
        self, username: str, config_id: str, configuration: str, *keys: str
    ) -> Result[str, UserConfigurationError]:
        try:
            self.user_configuration.set_user_configuration(username, config_id, configuration, *keys)
            return Success(configuration)
        except UserConfigurationError as e:
            return Failure(e)
