"""Catalog and measurement unit lookups with caching."""

import logging
from dataclasses import dataclass

from ingredient_lists.adapters.backend_gateway import BackendGateway
from ingredient_lists.domain.ingredients import CatalogEntry
from ingredient_lists.domain.models import UserCredential
from ingredient_lists.services.cache import Cache

_logger = logging.getLogger(__name__)

_CATALOG_KEY = "catalog:all"
_UNITS_KEY = "catalog:units"


@dataclass
class CatalogService:
    """Service for the global ingredient catalog."""

    gateway: BackendGateway
    cache: Cache
    ttl_seconds: int = 3600

    async def catalog(self, credential: UserCredential) -> list[CatalogEntry] | None:
        """Return every catalog entry, or ``None`` if the backend failed."""
        cached = self.cache.get(_CATALOG_KEY)
        if isinstance(cached, list):
            return list(cached)
        entries = await self.gateway.fetch_catalog(credential)
        if entries is None:
            _logger.warning("Failed to fetch all ingredients")
            return None
        self.cache.set(_CATALOG_KEY, list(entries), ttl_seconds=self.ttl_seconds)
        return list(entries)

    async def units(self, credential: UserCredential) -> list[str] | None:
        """Return the allowed measurement units."""
        cached = self.cache.get(_UNITS_KEY)
        if isinstance(cached, list):
            return list(cached)
        units = await self.gateway.fetch_measurement_units(credential)
        if units is None:
            _logger.warning("Failed to fetch measurement units")
            return None
        self.cache.set(_UNITS_KEY, list(units), ttl_seconds=self.ttl_seconds)
        return list(units)

    async def search(
        self, credential: UserCredential, query: str | None, limit: int = 20
    ) -> list[CatalogEntry] | None:
        """Search catalog names, falling back to the first entries."""
        entries = await self.catalog(credential)
        if entries is None:
            return None
        if not query or not query.strip():
            return entries[:limit]
        needle = query.strip().lower()
        return [entry for entry in entries if needle in entry.name.lower()][:limit]

    async def find(self, credential: UserCredential, name: str) -> CatalogEntry | None:
        """Return the catalog entry with the exact name."""
        entries = await self.catalog(credential) or []
        return next((entry for entry in entries if entry.name == name), None)

    def invalidate(self) -> None:
        """Forget cached catalog data."""
        self.cache.delete(_CATALOG_KEY)
        self.cache.delete(_UNITS_KEY)
