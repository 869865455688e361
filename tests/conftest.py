"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from ingredient_lists.adapters.in_memory_backend import InMemoryBackendGateway
from ingredient_lists.config import Settings
from ingredient_lists.containers import AppContainer
from ingredient_lists.domain.ingredients import CatalogEntry, Ingredient
from ingredient_lists.domain.lists import ListCollection
from ingredient_lists.domain.models import UserCredential
from ingredient_lists.services.cache import InMemoryCache
from ingredient_lists.services.catalog import CatalogService
from ingredient_lists.services.sessions import ListSessionRegistry
from ingredient_lists.services.users import UserService


@dataclass
class FlakyBackendGateway(InMemoryBackendGateway):
    """In-memory backend whose calls can be told to fail.

    ``failures`` maps ``(action, list_name)`` to the number of calls that
    should fail; ``-1`` fails every call.
    """

    failures: dict[tuple[str, str], int] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    fail_fetches: bool = False
    fail_create_user: bool = False
    fetch_count: int = 0
    fetch_gate: asyncio.Event | None = None

    def fail(self, action: str, list_name: str, times: int = -1) -> None:
        self.failures[(action, list_name)] = times

    def _fails(self, action: str, list_name: str) -> bool:
        self.calls.append((action, list_name))
        remaining = self.failures.get((action, list_name), 0)
        if remaining == 0:
            return False
        if remaining > 0:
            self.failures[(action, list_name)] = remaining - 1
        return True

    async def fetch_catalog(self, credential: UserCredential):
        self.fetch_count += 1
        if self.fail_fetches:
            return None
        return await super().fetch_catalog(credential)

    async def fetch_measurement_units(self, credential: UserCredential):
        self.fetch_count += 1
        if self.fail_fetches:
            return None
        return await super().fetch_measurement_units(credential)

    async def fetch_lists(self, credential: UserCredential) -> ListCollection | None:
        self.fetch_count += 1
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fail_fetches:
            return None
        return await super().fetch_lists(credential)

    async def create_list(self, credential: UserCredential, name: str) -> bool:
        if self._fails("create", name):
            return False
        return await super().create_list(credential, name)

    async def delete_list(self, credential: UserCredential, name: str) -> bool:
        if self._fails("delete", name):
            return False
        return await super().delete_list(credential, name)

    async def rename_list(
        self, credential: UserCredential, old_name: str, new_name: str
    ) -> bool:
        if self._fails("rename", old_name):
            return False
        return await super().rename_list(credential, old_name, new_name)

    async def add_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        if self._fails("add", list_name):
            return False
        return await super().add_ingredient(credential, list_name, ingredient)

    async def remove_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        if self._fails("remove", list_name):
            return False
        return await super().remove_ingredient(credential, list_name, ingredient)

    async def edit_ingredient(
        self,
        credential: UserCredential,
        list_name: str,
        old: Ingredient,
        new: Ingredient,
    ) -> bool:
        if self._fails("edit", list_name):
            return False
        return await super().edit_ingredient(credential, list_name, old, new)

    async def create_user(self, credential: UserCredential) -> bool:
        if self.fail_create_user:
            return False
        return await super().create_user(credential)


def milk() -> Ingredient:
    return Ingredient(name="Milk", category="Dairy", quantity=250, unit="ml")


def apple(quantity: float = 1) -> Ingredient:
    return Ingredient(name="Apple", category="Fruit", quantity=quantity, unit="count")


def backend_entries(
    gateway: InMemoryBackendGateway, list_name: str, access_token: str = "token-1"
) -> list[Ingredient]:
    found = gateway.lists_for(access_token).find_by_name(list_name)
    assert found is not None
    return list(found.entries)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def credential() -> UserCredential:
    return UserCredential(access_token="token-1", username="Test User")


@pytest.fixture
def gateway() -> FlakyBackendGateway:
    return FlakyBackendGateway.seeded()


@pytest.fixture
def catalog_entries() -> list[CatalogEntry]:
    return [
        CatalogEntry("Apple", "Fruit"),
        CatalogEntry("Milk", "Dairy"),
        CatalogEntry("Pineapple", "Fruit"),
    ]


@pytest.fixture
def container(settings: Settings, gateway: FlakyBackendGateway) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        gateway=gateway,
        user_service=UserService(gateway),
        catalog_service=CatalogService(gateway=gateway, cache=InMemoryCache()),
        list_sessions=ListSessionRegistry(gateway=gateway),
        close_resources=close_resources,
    )
