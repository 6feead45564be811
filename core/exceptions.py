"""Custom exception hierarchy for the configuration service."""
from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple


class ConfigServiceException(Exception):
    """Base exception for all configuration service errors."""
    pass


class ConfigurationError(ConfigServiceException):
    """Raised when the service's own settings are invalid or missing."""
    pass


class PropertiesParseError(ConfigServiceException):
    """Raised when a single properties file cannot be parsed."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        self.path = path
        self.line = line
        location = path or "<string>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")


class SiteConfigurationException(ConfigServiceException):
    """Base exception for site configuration errors."""
    pass


class InitializationError(SiteConfigurationException):
    """Raised when scanning or merging the property sources cannot complete.

    Attributes:
        failures: Every per-file failure collected during the merge
    """

    def __init__(self, message: str, failures: Sequence[Exception] = ()):
        self.failures: List[Exception] = list(failures)
        if self.failures:
            details = "; ".join(str(f) for f in self.failures)
            message = f"{message}: {details}"
        super().__init__(message)


class ResolutionError(SiteConfigurationException):
    """Raised by read accessors when the cache is not (and cannot be) initialized."""
    pass


class WriteError(SiteConfigurationException):
    """Raised when a property write fails or its listeners fail.

    The in-memory value may already have changed when this is raised for
    listener failures.

    Attributes:
        errors: (listener, exception) pairs for every failed listener
    """

    def __init__(self, message: str, errors: Sequence[Tuple[Any, Exception]] = ()):
        self.errors: List[Tuple[Any, Exception]] = list(errors)
        super().__init__(message)


class TypeCoercionError(SiteConfigurationException):
    """Raised by the exact-typed accessors when a value does not parse."""

    def __init__(self, property_name: str, value: str, target_type: str):
        self.property_name = property_name
        self.value = value
        self.target_type = target_type
        super().__init__(
            f"Property '{property_name}' value {value!r} is not a valid {target_type}"
        )


class UserConfigurationError(ConfigServiceException):
    """Raised when user configuration cannot be stored."""
    pass
