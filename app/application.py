"""Application wiring: builds the service container from the settings."""
from __future__ import annotations

from typing import Optional

from loguru import logger

from app.services import CleanupService, ExceptionHandlerService
from app.use_cases import (
    GetSitePropertyUseCase,
    GetUserConfigurationUseCase,
    ReloadSiteConfigurationUseCase,
    SetSitePropertyUseCase,
    SetUserConfigurationUseCase,
)
from config.config import AppConfig
from core.container import Container
from logger.audit_logger import AuditLogger
from siteconfig.metrics import NotificationMetrics
from siteconfig.notifier import ChangeNotifier
from siteconfig.service import SiteConfigurationService
from userconfig.service import UserConfigurationService
from userconfig.storage import InMemoryUserConfigurationStorage, JsonFileUserConfigurationStorage


class Application:
    """Owns the configuration services and their lifecycle.

    Services are registered as lazily-built factories in a Container, so a
    hosting application can resolve only what it uses. Cleanup handlers
    close the audit file on shutdown.

    Attributes:
        config: Service settings
        container: DI container holding the wired services
        cleanup_service: Manages cleanup handlers
        exception_handler: Global exception logging
    """

    def __init__(self, config: AppConfig, container: Optional[Container] = None, install_hooks: bool = False):
        """Initialize application with its settings.

        Args:
            config: Service settings
            container: Container to populate (a new one if not provided)
            install_hooks: Install the process-wide exception hooks and atexit
                cleanup; only the command-line entry point should ask for this
        """
        self.config = config
        self.container = container or Container()
        self.cleanup_service = CleanupService()
        self._register_services()

        audit_logger = self.container.get("audit_logger") if self.container.has("audit_logger") else None
        self.exception_handler = ExceptionHandlerService(audit_logger)
        if install_hooks:
            self.exception_handler.install()
            self.cleanup_service.install_atexit()
        self.cleanup_service.register(self._close_audit_logger, "audit_logger")

    def _register_services(self) -> None:
        config = self.config
        c = self.container

        c.register_factory("metrics", lambda _: NotificationMetrics())
        c.register_factory("notifier", lambda c: ChangeNotifier(c.get("metrics")))
        if config.audit.enabled:
            c.register_factory("audit_logger", lambda _: AuditLogger(config.audit.log_dir))
        c.register_factory(
            "site_configuration",
            lambda c: SiteConfigurationService(
                root=config.site.root,
                locations=config.site.locations,
                custom_pattern=config.site.custom_pattern,
                notifier=c.get("notifier"),
                audit_logger=c.get("audit_logger") if c.has("audit_logger") else None,
            ),
        )
        if config.user_store.backend == "json":
            c.register_factory("user_storage", lambda _: JsonFileUserConfigurationStorage(config.user_store.path))
        else:
            c.register_factory("user_storage", lambda _: InMemoryUserConfigurationStorage())
        c.register_factory("user_configuration", lambda c: UserConfigurationService(c.get("user_storage")))

    # ---------- Service access ----------
    @property
    def site_configuration(self) -> SiteConfigurationService:
        return self.container.get("site_configuration")

    @property
    def user_configuration(self) -> UserConfigurationService:
        return self.container.get("user_configuration")

    # ---------- Use cases ----------
    def reload_use_case(self) -> ReloadSiteConfigurationUseCase:
        return ReloadSiteConfigurationUseCase(self.site_configuration)

    def get_property_use_case(self) -> GetSitePropertyUseCase:
        return GetSitePropertyUseCase(self.site_configuration)

    def set_property_use_case(self) -> SetSitePropertyUseCase:
        return SetSitePropertyUseCase(self.site_configuration)

    def get_user_configuration_use_case(self) -> GetUserConfigurationUseCase:
        return GetUserConfigurationUseCase(self.user_configuration)

    def set_user_configuration_use_case(self) -> SetUserConfigurationUseCase:
        return SetUserConfigurationUseCase(self.user_configuration)

    # ---------- Lifecycle ----------
    def log_session_info(self, settings: dict) -> None:
        """Write the active settings to the audit file, when auditing is on."""
        if self.container.has("audit_logger"):
            self.container.get("audit_logger").log_kv("SETTINGS", settings)
        logger.debug("Active settings: {}", settings)

    def _close_audit_logger(self) -> None:
        audit_logger = self.container.instances().get("audit_logger")
        if audit_logger is not None:
            audit_logger.close()

    def cleanup(self) -> None:
        """Execute cleanup through the cleanup service."""
        self.cleanup_service.cleanup()
        self.exception_handler.uninstall()
