"""Discovery of property files across the configured locations."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

from core.exceptions import ConfigurationError, InitializationError

STANDARD_SUFFIX = ".properties"
DEFAULT_CUSTOM_PROPERTIES_PATTERN = r"^.*-config\.properties"


class SourceKind(str, Enum):
    """How a discovered file takes part in the merge."""
    STANDARD = "standard"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PropertySource:
    """A candidate properties file found during a scan.

    Attributes:
        path: Absolute path to the file
        kind: Standard file or custom override
        location: The location entry (as configured) it was found under
    """
    path: Path
    kind: SourceKind
    location: str


def compile_custom_pattern(pattern: Union[str, "re.Pattern[str]"]) -> "re.Pattern[str]":
    """Compile an override filename pattern, raising ConfigurationError when invalid."""
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid custom properties name pattern {pattern!r}: {e}") from e


class PropertySourceScanner:
    """Enumerates standard and custom override properties files.

    Locations are scanned in order. Inside each directory, standard files come
    first and custom override files last, so an override always has the final
    say for its directory. Missing or unreadable locations are skipped.
    """

    def __init__(self, custom_pattern: Union[str, "re.Pattern[str]"] = DEFAULT_CUSTOM_PROPERTIES_PATTERN):
        self._custom_pattern = compile_custom_pattern(custom_pattern)

    @property
    def custom_pattern(self) -> "re.Pattern[str]":
        return self._custom_pattern

    @custom_pattern.setter
    def custom_pattern(self, pattern: Union[str, "re.Pattern[str]"]) -> None:
        self._custom_pattern = compile_custom_pattern(pattern)

    def is_custom(self, path: Path) -> bool:
        """True for an existing regular file whose name matches the override pattern."""
        return path.is_file() and self._custom_pattern.fullmatch(path.name) is not None

    def classify(self, path: Path) -> Optional[SourceKind]:
        if self.is_custom(path):
            return SourceKind.CUSTOM
        if path.name.endswith(STANDARD_SUFFIX) and path.is_file():
            return SourceKind.STANDARD
        return None

    def resolve(self, root: Optional[str], location: str) -> Path:
        """Resolve a location against the root.

        Raises:
            InitializationError: If the location is relative and no root is set
        """
        path = Path(os.path.expanduser(location))
        if path.is_absolute():
            return path
        if not root:
            raise InitializationError(
                f"Location '{location}' is relative but no configuration root is set"
            )
        return Path(os.path.expanduser(root)) / path

    def scan(self, root: Optional[str], locations: Sequence[str]) -> List[PropertySource]:
        """Scan every location and return the ordered candidate files."""
        sources: List[PropertySource] = []
        for location in locations:
            path = self.resolve(root, location)
            sources.extend(self._scan_location(path, location))
        logger.debug("Scanned {} location(s), found {} properties file(s)", len(locations), len(sources))
        return sources

    def _scan_location(self, path: Path, location: str) -> List[PropertySource]:
        if path.is_file():
            kind = self.classify(path)
            if kind is None:
                logger.debug("Ignoring location {}: not a properties file", path)
                return []
            return [PropertySource(path, kind, location)]

        if not path.is_dir():
            logger.debug("Skipping missing location {}", path)
            return []

        try:
            entries = sorted(path.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            logger.debug("Skipping unreadable location {}: {}", path, e)
            return []

        standard: List[PropertySource] = []
        custom: List[PropertySource] = []
        for entry in entries:
            kind = self.classify(entry)
            if kind is SourceKind.CUSTOM:
                custom.append(PropertySource(entry, kind, location))
            elif kind is SourceKind.STANDARD:
                standard.append(PropertySource(entry, kind, location))
        return standard + custom
