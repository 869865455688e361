"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ingredient_lists.adapters.backend_gateway import (
    BackendGateway,
    HttpxBackendGateway,
)
from ingredient_lists.adapters.in_memory_backend import InMemoryBackendGateway
from ingredient_lists.config import Settings
from ingredient_lists.services.cache import InMemoryCache
from ingredient_lists.services.catalog import CatalogService
from ingredient_lists.services.sessions import ListSessionRegistry
from ingredient_lists.services.users import UserService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gateway: BackendGateway
    user_service: UserService
    catalog_service: CatalogService
    list_sessions: ListSessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_gateway(settings: Settings) -> HttpxBackendGateway | InMemoryBackendGateway:
    """Pick the remote backend when configured, else the in-memory one."""
    if not settings.backend_configured:
        _logger.info("Backend not configured; using in-memory backend")
        return InMemoryBackendGateway.seeded()
    return HttpxBackendGateway.create(
        base_url=settings.backend_url,
        create_user_endpoint=settings.create_user_endpoint,
        all_ingredients_endpoint=settings.all_ingredients_endpoint,
        measurements_endpoint=settings.measurements_endpoint,
        lists_endpoint=settings.lists_endpoint,
        timeout=settings.request_timeout_seconds,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    gateway = build_gateway(resolved_settings)
    user_service = UserService(gateway)
    catalog_service = CatalogService(
        gateway=gateway,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.catalog_ttl_seconds,
    )
    list_sessions = ListSessionRegistry(
        gateway=gateway,
        compensation_attempts=resolved_settings.move_compensation_attempts,
        ttl_seconds=resolved_settings.session_ttl_seconds,
    )

    async def close_resources() -> None:
        await gateway.close()

    return AppContainer(
        settings=resolved_settings,
        gateway=gateway,
        user_service=user_service,
        catalog_service=catalog_service,
        list_sessions=list_sessions,
        close_resources=close_resources,
    )
