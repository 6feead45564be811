"""Core infrastructure: dependency injection, error types and results."""
from __future__ import annotations

from .container import Container
from .exceptions import (
    ConfigServiceException,
    ConfigurationError,
    InitializationError,
    PropertiesParseError,
    ResolutionError,
    SiteConfigurationException,
    TypeCoercionError,
    UserConfigurationError,
    WriteError,
)
from .result import Result, Success, Failure

__all__ = [
    "Container",
    "ConfigServiceException",
    "ConfigurationError",
    "InitializationError",
    "PropertiesParseError",
    "ResolutionError",
    "SiteConfigurationException",
    "TypeCoercionError",
    "UserConfigurationError",
    "WriteError",
    "Result",
    "Success",
    "Failure",
]
