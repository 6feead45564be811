"""Folds scanned property files into a single merged map."""
from __future__ import annotations

from typing import Callable, Dict, Sequence

from loguru import logger

from core.error_handler import as_result
from core.exceptions import InitializationError, PropertiesParseError
from core.result import Result, partition
from siteconfig.properties import load_properties
from siteconfig.scanner import PropertySource


class PropertyMerger:
    """Loads property sources in precedence order and merges them.

    Every source is attempted even when an earlier one fails; the failures are
    then reported together as one InitializationError. Values stay as text.
    """

    def __init__(self, loader: Callable[..., Dict[str, str]] = load_properties, encoding: str = "utf-8"):
        self._loader = loader
        self._encoding = encoding

    def load(self, source: PropertySource) -> Result[Dict[str, str], Exception]:
        """Load a single source into a transient property set."""
        return self._load(source)

    @as_result(OSError, PropertiesParseError)
    def _load(self, source: PropertySource) -> Dict[str, str]:
        return self._loader(source.path, encoding=self._encoding)

    def merge(self, sources: Sequence[PropertySource]) -> Dict[str, str]:
        """Merge sources into a fresh dict; later sources override earlier ones.

        Raises:
            InitializationError: If any source could not be read or parsed
        """
        results = [self.load(source) for source in sources]
        for source, result in zip(sources, results):
            if result.is_failure():
                logger.error("Failed to load {} properties file {}: {}", source.kind.value, source.path, result.error)
            else:
                logger.debug("Loaded {} propert(ies) from {}", len(result.value), source.path)

        loaded, failures = partition(results)
        if failures:
            raise InitializationError(
                f"{len(failures)} of {len(sources)} properties file(s) could not be loaded",
                failures,
            )

        merged: Dict[str, str] = {}
        for properties in loaded:
            merged.update(properties)
        return merged
