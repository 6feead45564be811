"""Counters for property change notifications."""
from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, Optional


class NotificationMetrics:
    """Thread-safe counters of listener invocations and failures.

    Counts are kept per property name; ``None`` is never used as a key.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._invocations: Counter = Counter()
        self._failures: Counter = Counter()

    def record_invocation(self, property_name: str) -> None:
        with self._lock:
            self._invocations[property_name] += 1

    def record_failure(self, property_name: str) -> None:
        with self._lock:
            self._failures[property_name] += 1

    def invocations(self, property_name: Optional[str] = None) -> int:
        """Listener invocations for one property, or in total when no name is given."""
        with self._lock:
            if property_name is None:
                return sum(self._invocations.values())
            return self._invocations[property_name]

    def failures(self, property_name: Optional[str] = None) -> int:
        with self._lock:
            if property_name is None:
                return sum(self._failures.values())
            return self._failures[property_name]

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        with self._lock:
            return {"invocations": dict(self._invocations), "failures": dict(self._failures)}

    def reset(self) -> None:
        with self._lock:
            self._invocations.clear()
            self._failures.clear()
