"""Dependency Injection Container used to wire the configuration services."""
from __future__ import annotations

import threading
from typing import Any, Callable, Dict


class Container:
    """Thread-safe DI container for service wiring.

    Factories are invoked lazily, at most once, and their product is cached as
    a singleton. Request threads may resolve services concurrently.
    """

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[["Container"], Any]] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register a ready-made shared instance."""
        with self._lock:
            self._singletons[name] = instance

    def register_factory(self, name: str, factory: Callable[["Container"], Any]) -> None:
        """Register a factory receiving the container, so it can resolve its own dependencies."""
        with self._lock:
            self._factories[name] = factory
            self._singletons.pop(name, None)

    def register(self, name: str, service: Any) -> None:
        """Register a service instance."""
        with self._lock:
            self._services[name] = service

    def get(self, name: str) -> Any:
        """Resolve a service by name."""
        singleton = self._singletons.get(name)
        if singleton is not None:
            return singleton

        with self._lock:
            if name in self._singletons:
                return self._singletons[name]
            if name in self._services:
                return self._services[name]
            if name in self._factories:
                instance = self._factories[name](self)
                self._singletons[name] = instance
                return instance

        raise KeyError(f"Service '{name}' not found in container")

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._singletons or name in self._services or name in self._factories

    def instances(self) -> Dict[str, Any]:
        """Snapshot of everything already instantiated (singletons and services)."""
        with self._lock:
            return {**self._services, **self._singletons}

    def clear(self) -> None:
        """Clear all registrations (useful for testing)."""
        with self._lock:
            self._services.clear()
            self._factories.clear()
            self._singletons.clear()
