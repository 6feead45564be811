"""Site configuration cache.

Holds the merged property map together with the root and location list it was
built from, as one immutable ``SiteState``. A new state is built off to the
side and published with one attribute assignment, so readers, which never take
the lock, always see a root, a location list and a map that belong together.
Initialize, update, reset and property writes are serialised by a single
re-entrant lock.
"""
from __future__ import annotations

import re
import threading
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
from loguru import logger

from core.error_handler import log_execution_time
from core.exceptions import InitializationError, ResolutionError, TypeCoercionError
from siteconfig.merger import PropertyMerger
from siteconfig.notifier import ANY_PROPERTY, ChangeNotifier, PropertyListener
from siteconfig.scanner import DEFAULT_CUSTOM_PROPERTIES_PATTERN, PropertySourceScanner, compile_custom_pattern

T = TypeVar('T')

_INTEGER = re.compile(r"[+-]?\d+")
_INT_RANGE = (-(2 ** 31), 2 ** 31 - 1)
_LONG_RANGE = (-(2 ** 63), 2 ** 63 - 1)

# Same literal forms as java.lang.Double.parseDouble
_DECIMAL_FLOAT = re.compile(r"[+-]?(?:NaN|Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[fFdD]?)")
_HEX_FLOAT = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?\d+[fFdD]?")


class SiteState(NamedTuple):
    """Root, locations and the merged map they produced (None when uninitialized)."""
    root: Optional[str]
    locations: Tuple[str, ...]
    properties: Optional[Dict[str, str]]


class SiteConfigurationService:
    """Layered site configuration with typed access and change notification.

    Example:
        service = SiteConfigurationService("/etc/app", ["base", "site"])
        service.initialize()
        timeout = service.get_int("timeout")

    Attributes:
        notifier: Change notifier used for property writes
    """

    def __init__(
        self,
        root: Optional[str] = None,
        locations: Optional[Sequence[str]] = None,
        custom_pattern: Union[str, "re.Pattern[str]"] = DEFAULT_CUSTOM_PROPERTIES_PATTERN,
        notifier: Optional[ChangeNotifier] = None,
        audit_logger=None,
        scanner: Optional[PropertySourceScanner] = None,
        merger: Optional[PropertyMerger] = None,
    ):
        self._scanner = scanner or PropertySourceScanner(custom_pattern)
        self._merger = merger or PropertyMerger()
        self.notifier = notifier or ChangeNotifier()
        self.audit_logger = audit_logger

        self._state = SiteState(root, tuple(locations or ()), None)
        self._lock = threading.RLock()

    @property
    def state(self) -> SiteState:
        """The currently published state; read it once to get a consistent view."""
        return self._state

    # ---------- Sources ----------
    @property
    def config_files_locations_root(self) -> Optional[str]:
        return self._state.root

    @config_files_locations_root.setter
    def config_files_locations_root(self, root: Optional[str]) -> None:
        """Set the root; the map is not reloaded until reset and initialize (or update)."""
        with self._lock:
            self._state = self._state._replace(root=root)

    @property
    def config_files_locations(self) -> List[str]:
        return list(self._state.locations)

    @config_files_locations.setter
    def config_files_locations(self, locations: Sequence[str]) -> None:
        """Set the locations; the map is not reloaded until reset and initialize (or update)."""
        with self._lock:
            self._state = self._state._replace(locations=tuple(locations))

    @property
    def custom_properties_name_pattern(self) -> str:
        return self._scanner.custom_pattern.pattern

    @custom_properties_name_pattern.setter
    def custom_properties_name_pattern(self, pattern: str) -> None:
        compiled = compile_custom_pattern(pattern)
        with self._lock:
            self._scanner.custom_pattern = compiled

    # ---------- Lifecycle ----------
    @property
    def initialized(self) -> bool:
        return self._state.properties is not None

    def initialize(self) -> None:
        """Scan and merge the property sources, unless already initialized.

        Raises:
            InitializationError: If a relative location has no root or any file fails to load
        """
        with self._lock:
            state = self._state
            if state.properties is not None:
                return
            self._state = state._replace(properties=self._build(state.root, state.locations))

    def update(self, root: Optional[str] = None, locations: Optional[Sequence[str]] = None) -> Mapping[str, str]:
        """Set root and/or locations, then rebuild the map from scratch.

        Readers keep seeing the previous root, locations and map until the new
        ones are published together. If the rebuild fails, root and locations
        keep their previous values, the previous map is discarded and the
        service is left uninitialized.

        Returns:
            Read-only view of the fresh merged properties
        """
        with self._lock:
            state = self._state
            new_root = root if root is not None else state.root
            new_locations = tuple(locations) if locations is not None else state.locations
            try:
                properties = self._build(new_root, new_locations)
            except InitializationError:
                self._state = state._replace(properties=None)
                raise
            self._state = SiteState(new_root, new_locations, properties)
            return MappingProxyType(properties)

    def reset(self) -> None:
        """Discard the merged map, returning to the uninitialized state."""
        with self._lock:
            self._state = self._state._replace(properties=None)
        logger.debug("Site configuration reset")

    @log_execution_time()
    def _build(self, root: Optional[str], locations: Sequence[str]) -> Dict[str, str]:
        try:
            sources = self._scanner.scan(root, locations)
            properties = self._merger.merge(sources)
        except InitializationError as e:
            logger.error("Site configuration initialization failed: {}", e)
            raise
        except OSError as e:
            logger.error("Site configuration initialization failed: {}", e)
            raise InitializationError(f"Could not scan configuration locations: {e}") from e
        logger.info(
            "Site configuration initialized with {} propert(ies) from {} file(s)",
            len(properties),
            len(sources),
        )
        return properties

    # ---------- Reads ----------
    def get(self) -> Mapping[str, str]:
        """Return a read-only view of the merged properties.

        Raises:
            ResolutionError: If the configuration is not initialized
        """
        properties = self._state.properties
        if properties is None:
            raise ResolutionError("Site configuration is not initialized")
        return MappingProxyType(properties)

    def _current(self) -> Dict[str, str]:
        properties = self._state.properties
        if properties is not None:
            return properties
        with self._lock:
            if self._state.properties is None:
                try:
                    self.initialize()
                except InitializationError as e:
                    raise ResolutionError(f"Site configuration could not be initialized: {e}") from e
            return self._state.properties

    def get_property(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a property as text, initializing on demand.

        Raises:
            ResolutionError: If the configuration cannot be initialized
        """
        return self._current().get(name, default)

    def get_bool(self, name: str, default: bool) -> bool:
        """Lenient boolean: true only for a value equal to "true" ignoring case.

        The value is compared as stored, so " true" is false.
        """
        value = self.get_property(name)
        if value is None:
            return default
        return value.lower() == "true"

    def get_int(self, name: str) -> Optional[int]:
        """Get a signed 32-bit integer, or None when the property is absent."""
        return self._typed(name, "integer", lambda v: _parse_integer(v, _INT_RANGE))

    def get_long(self, name: str) -> Optional[int]:
        """Get a signed 64-bit integer, or None when the property is absent."""
        return self._typed(name, "long", lambda v: _parse_integer(v, _LONG_RANGE))

    def get_float(self, name: str) -> Optional[float]:
        """Get a single-precision float, or None when the property is absent."""
        return self._typed(name, "float", lambda v: float(np.float32(_parse_float(v))))

    def get_double(self, name: str) -> Optional[float]:
        """Get a double-precision float, or None when the property is absent."""
        return self._typed(name, "double", _parse_float)

    def _typed(self, name: str, type_name: str, parse: Callable[[str], T]) -> Optional[T]:
        value = self.get_property(name)
        if value is None:
            return None
        try:
            return parse(value)
        except (ValueError, OverflowError) as e:
            raise TypeCoercionError(name, value, type_name) from e

    # ---------- Writes ----------
    def set_property(self, username: str, name: str, value: str) -> None:
        """Set a single property and notify its listeners.

        The new map is published before listeners run. A WriteError raised
        by the notifier therefore means the value *was* applied but one or
        more listeners failed.

        Raises:
            ResolutionError: If the configuration cannot be initialized
            WriteError: If listeners failed
        """
        with self._lock:
            current = self._current()
            old_value = current.get(name)
            updated = dict(current)
            updated[name] = value
            self._state = self._state._replace(properties=updated)
            logger.info("Property '{}' set by {}", name, username)
            if self.audit_logger is not None:
                self.audit_logger.record(username, name, old_value, value)
            self.notifier.notify(name, old_value, value)

    # ---------- Listeners ----------
    def add_listener(
        self,
        listener: PropertyListener,
        property_name: Optional[str] = ANY_PROPERTY,
        *,
        with_old_value: bool = False,
    ) -> None:
        self.notifier.register(listener, property_name, with_old_value=with_old_value)

    def remove_listener(self, listener: PropertyListener, property_name: Optional[str] = ANY_PROPERTY) -> bool:
        return self.notifier.unregister(listener, property_name)


def _parse_integer(value: str, bounds: tuple) -> int:
    text = value.strip()
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"not an integer: {value!r}")
    number = int(text)
    low, high = bounds
    if not low <= number <= high:
        raise OverflowError(f"{number} out of range [{low}, {high}]")
    return number


def _parse_float(value: str) -> float:
    text = value.strip()
    if _HEX_FLOAT.fullmatch(text):
        return float.fromhex(text.rstrip("fFdD"))
    if not _DECIMAL_FLOAT.fullmatch(text):
        raise ValueError(f"not a floating point number: {value!r}")
    if text[-1] in "fFdD":
        text = text[:-1]
    return float(text)
