"""Site configuration resolution and caching.

Main components:
- scanner.py: discovery of standard and custom override properties files
- properties.py: the properties text format
- merger.py: precedence-ordered merge of the discovered files
- service.py: the cache with typed accessors and reload lifecycle
- notifier.py: property change listeners
"""
from __future__ import annotations

from .merger import PropertyMerger
from .metrics import NotificationMetrics
from .notifier import ANY_PROPERTY, ChangeNotifier
from .scanner import DEFAULT_CUSTOM_PROPERTIES_PATTERN, PropertySource, PropertySourceScanner, SourceKind
from .service import SiteConfigurationService, SiteState

__all__ = [
    "ANY_PROPERTY",
    "ChangeNotifier",
    "DEFAULT_CUSTOM_PROPERTIES_PATTERN",
    "NotificationMetrics",
    "PropertyMerger",
    "PropertySource",
    "PropertySourceScanner",
    "SiteConfigurationService",
    "SiteState",
    "SourceKind",
]
