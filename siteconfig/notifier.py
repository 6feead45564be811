"""Property change notification.

Listeners are plain callables kept in an ordered registry keyed by property
name. ``None`` is the wildcard key: listeners registered under it hear about
every property.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from core.exceptions import WriteError
from siteconfig.metrics import NotificationMetrics

PropertyListener = Callable[..., None]

ANY_PROPERTY: Optional[str] = None


@dataclass(frozen=True)
class _Registration:
    listener: PropertyListener
    with_old_value: bool

    def invoke(self, name: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        if self.with_old_value:
            self.listener(name, old_value, new_value)
        else:
            self.listener(name, new_value)


class ChangeNotifier:
    """Dispatches property changes to registered listeners.

    Dispatch is synchronous, on the caller's thread. Listeners for the exact
    property run first, then wildcard listeners, each group in registration
    order. A failing listener does not stop the others; all failures are
    raised together as a WriteError once every listener has been attempted.
    """

    def __init__(self, metrics: Optional[NotificationMetrics] = None):
        self._registry: Dict[Optional[str], List[_Registration]] = {}
        self._lock = threading.Lock()
        self.metrics = metrics or NotificationMetrics()

    def register(
        self,
        listener: PropertyListener,
        property_name: Optional[str] = ANY_PROPERTY,
        *,
        with_old_value: bool = False,
    ) -> None:
        """Register a listener for one property, or for any property.

        Args:
            listener: Called as ``listener(name, new_value)``, or
                ``listener(name, old_value, new_value)`` when ``with_old_value`` is set
            property_name: Property to watch; ``None`` watches all properties
            with_old_value: Also pass the previous value
        """
        with self._lock:
            self._registry.setdefault(property_name, []).append(_Registration(listener, with_old_value))

    def unregister(self, listener: PropertyListener, property_name: Optional[str] = ANY_PROPERTY) -> bool:
        """Remove the first registration of ``listener`` under ``property_name``.

        Returns:
            True if a registration was removed
        """
        with self._lock:
            registrations = self._registry.get(property_name, [])
            for index, registration in enumerate(registrations):
                if registration.listener == listener:
                    del registrations[index]
                    if not registrations:
                        del self._registry[property_name]
                    return True
        return False

    def listeners(self, property_name: Optional[str] = ANY_PROPERTY) -> List[PropertyListener]:
        with self._lock:
            return [r.listener for r in self._registry.get(property_name, [])]

    def clear(self) -> None:
        with self._lock:
            self._registry.clear()

    def notify(self, property_name: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        """Dispatch a change to the listeners of ``property_name`` and the wildcard listeners.

        Nothing is dispatched when the value did not change.

        Raises:
            WriteError: If one or more listeners raised
        """
        if old_value == new_value:
            return

        with self._lock:
            targets = list(self._registry.get(property_name, []))
            if property_name is not ANY_PROPERTY:
                targets += self._registry.get(ANY_PROPERTY, [])

        errors: List[Tuple[PropertyListener, Exception]] = []
        for registration in targets:
            self.metrics.record_invocation(property_name)
            try:
                registration.invoke(property_name, old_value, new_value)
            except Exception as e:
                self.metrics.record_failure(property_name)
                logger.warning("Listener {!r} failed for property '{}': {}", registration.listener, property_name, e)
                errors.append((registration.listener, e))

        if errors:
            raise WriteError(
                f"{len(errors)} listener(s) failed for property '{property_name}'; the new value was applied",
                errors,
            )
