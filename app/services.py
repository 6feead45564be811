"""Services for application infrastructure management.

Keeps infrastructure concerns (exception hooks, cleanup) apart from the
configuration logic.
"""
from __future__ import annotations

import atexit
import sys
import threading
import traceback
from typing import Callable, List, Optional, Tuple

from loguru import logger

from core.error_handler import handle_exceptions


class ExceptionHandlerService:
    """Logs uncaught exceptions from the main thread and worker threads.

    Request threads of a hosting server call into the configuration service;
    an uncaught error there should end up in the log (and the audit file)
    before the default handling runs.

    Attributes:
        audit_logger: Optional audit logger receiving the traceback
    """

    def __init__(self, audit_logger=None):
        self.audit_logger = audit_logger
        self._original_excepthook = sys.excepthook
        self._original_thread_excepthook = threading.excepthook

    def install(self) -> None:
        """Install global exception handlers for main and worker threads."""
        def excepthook(exc_type, exc_value, exc_traceback):
            try:
                tb = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
                logger.error("Uncaught exception:\n{}", tb)
                if self.audit_logger is not None:
                    self.audit_logger.log(f"UNCAUGHT {exc_type.__name__}: {exc_value}")
            finally:
                self._original_excepthook(exc_type, exc_value, exc_traceback)

        def thread_excepthook(args: threading.ExceptHookArgs) -> None:
            excepthook(args.exc_type, args.exc_value, args.exc_traceback)

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook

    def uninstall(self) -> None:
        """Restore original exception handlers."""
        sys.excepthook = self._original_excepthook
        threading.excepthook = self._original_thread_excepthook


class CleanupService:
    """Registry of shutdown handlers run exactly once, in registration order."""

    def __init__(self):
        self._cleanup_handlers: List[Tuple[Callable[[], None], str]] = []
        self._cleaned_up = False
        self._lock = threading.Lock()

    def register(self, handler: Callable[[], None], name: str = "") -> None:
        """Register a cleanup handler.

        Args:
            handler: Function to call during cleanup
            name: Optional name for the handler (for logging)
        """
        self._cleanup_handlers.append((handler, name))

    @handle_exceptions(message="Cleanup failed")
    def cleanup(self) -> None:
        """Execute all registered cleanup handlers.

        Failures in individual handlers are logged but don't prevent the
        remaining handlers from running. Calling it again has no effect.
        """
        with self._lock:
            if self._cleaned_up:
                return
            self._cleaned_up = True

        logger.debug("Starting cleanup...")
        for handler, name in self._cleanup_handlers:
            try:
                logger.debug("Cleaning up: {}", name or handler.__name__)
                handler()
            except Exception as e:
                logger.warning("Cleanup handler {} failed: {}", name, e)
        logger.debug("Cleanup completed")

    @property
    def cleaned_up(self) -> bool:
        return self._cleaned_up

    def install_atexit(self, registrar: Optional[Callable[[Callable], None]] = None) -> None:
        """Register cleanup to run at interpreter exit."""
        (registrar or atexit.register)(self.cleanup)
