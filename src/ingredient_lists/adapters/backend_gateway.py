"""Remote lists backend gateway."""

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

from ingredient_lists.domain.ingredients import CatalogEntry, Ingredient
from ingredient_lists.domain.lists import IngredientList, ListCollection
from ingredient_lists.domain.models import UserCredential

_USER_CREATED_MARKERS = ("Item created successfully", "Item already exists.")

_logger = logging.getLogger(__name__)


class BackendGateway(Protocol):
    """Interface for the backend that owns catalog and list data.

    Every call is fallible. Failures are reported as ``False`` or, for
    fetches, ``None``; gateways never raise for upstream problems.
    """

    async def fetch_catalog(
        self, credential: UserCredential
    ) -> list[CatalogEntry] | None:
        """Return the ingredient catalog."""

    async def fetch_measurement_units(
        self, credential: UserCredential
    ) -> list[str] | None:
        """Return the allowed measurement units."""

    async def fetch_lists(self, credential: UserCredential) -> ListCollection | None:
        """Return every list owned by the user."""

    async def create_list(self, credential: UserCredential, name: str) -> bool:
        """Create an empty list."""

    async def delete_list(self, credential: UserCredential, name: str) -> bool:
        """Delete a list."""

    async def rename_list(
        self, credential: UserCredential, old_name: str, new_name: str
    ) -> bool:
        """Rename a list."""

    async def add_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        """Add or merge an ingredient into a list."""

    async def remove_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        """Remove an ingredient from a list."""

    async def edit_ingredient(
        self,
        credential: UserCredential,
        list_name: str,
        old: Ingredient,
        new: Ingredient,
    ) -> bool:
        """Replace an ingredient in a list."""

    async def create_user(self, credential: UserCredential) -> bool:
        """Create the user; an existing user counts as success."""


@dataclass
class HttpxBackendGateway(BackendGateway):
    """HTTPX-backed gateway to the remote lists API."""

    base_url: str
    create_user_endpoint: str
    all_ingredients_endpoint: str
    measurements_endpoint: str
    lists_endpoint: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        base_url: str,
        create_user_endpoint: str,
        all_ingredients_endpoint: str,
        measurements_endpoint: str,
        lists_endpoint: str,
        timeout: float = 15,
    ) -> "HttpxBackendGateway":
        """Create a gateway with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            create_user_endpoint=create_user_endpoint,
            all_ingredients_endpoint=all_ingredients_endpoint,
            measurements_endpoint=measurements_endpoint,
            lists_endpoint=lists_endpoint,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def fetch_catalog(
        self, credential: UserCredential
    ) -> list[CatalogEntry] | None:
        """Fetch every known ingredient definition."""
        payload = await self._get_result(credential, self.all_ingredients_endpoint)
        if payload is None:
            return None
        entries: list[CatalogEntry] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            category = item.get("type")
            if name is None or category is None:
                continue
            entries.append(
                CatalogEntry(
                    name=str(name),
                    category=str(category),
                    is_custom=bool(item.get("custom", False)),
                )
            )
        return entries

    async def fetch_measurement_units(
        self, credential: UserCredential
    ) -> list[str] | None:
        """Fetch the allowed measurement units."""
        payload = await self._get_result(credential, self.measurements_endpoint)
        if payload is None:
            return None
        return [str(unit) for unit in payload]

    async def fetch_lists(self, credential: UserCredential) -> ListCollection | None:
        """Fetch the user's lists with their ingredients."""
        payload = await self._get_result(credential, self.lists_endpoint)
        if payload is None:
            return None
        try:
            lists = [
                IngredientList(
                    str(row.get("name", "")),
                    [_parse_ingredient(item) for item in row.get("ingredients", [])],
                )
                for row in payload
            ]
        except (AttributeError, KeyError, TypeError, ValueError):
            _logger.warning("Malformed lists payload from backend")
            return None
        return ListCollection(lists)

    async def create_list(self, credential: UserCredential, name: str) -> bool:
        """Create a list."""
        return await self._send(
            credential, "POST", self.lists_endpoint, json={"name": name}
        )

    async def delete_list(self, credential: UserCredential, name: str) -> bool:
        """Delete a list."""
        return await self._send(credential, "DELETE", self._list_path(name))

    async def rename_list(
        self, credential: UserCredential, old_name: str, new_name: str
    ) -> bool:
        """Rename a list."""
        return await self._send(
            credential, "PATCH", self._list_path(old_name), json={"name": new_name}
        )

    async def add_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        """Add an ingredient to a list."""
        return await self._send(
            credential,
            "POST",
            self._ingredients_path(list_name),
            json=_serialize_ingredient(ingredient),
        )

    async def remove_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        """Remove an ingredient from a list."""
        return await self._send(
            credential,
            "DELETE",
            self._ingredients_path(list_name),
            json=_serialize_ingredient(ingredient),
        )

    async def edit_ingredient(
        self,
        credential: UserCredential,
        list_name: str,
        old: Ingredient,
        new: Ingredient,
    ) -> bool:
        """Replace an ingredient in a list."""
        return await self._send(
            credential,
            "PUT",
            self._ingredients_path(list_name),
            json={"old": _serialize_ingredient(old), "new": _serialize_ingredient(new)},
        )

    async def create_user(self, credential: UserCredential) -> bool:
        """Create the user in the backend if it does not exist yet."""
        try:
            response = await self.http_client.post(
                self._url(self.create_user_endpoint),
                headers=_auth_headers(credential),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            _logger.warning("Backend create_user failed: %s", exc)
            return False
        if not response.is_success:
            _logger.warning("Backend create_user returned %s", response.status_code)
            return False
        return any(marker in response.text for marker in _USER_CREATED_MARKERS)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _list_path(self, name: str) -> str:
        return f"{self.lists_endpoint.rstrip('/')}/{quote(name, safe='')}"

    def _ingredients_path(self, name: str) -> str:
        return f"{self._list_path(name)}/ingredients"

    async def _get_result(self, credential: UserCredential, path: str) -> list | None:
        try:
            response = await self.http_client.get(
                self._url(path),
                headers=_auth_headers(credential),
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Backend GET %s failed: %s", path, exc)
            return None
        result = body.get("result") if isinstance(body, dict) else None
        if not isinstance(result, list):
            _logger.warning("Backend GET %s returned no result list", path)
            return None
        return result

    async def _send(
        self,
        credential: UserCredential,
        method: str,
        path: str,
        json: dict[str, object] | None = None,
    ) -> bool:
        try:
            response = await self.http_client.request(
                method,
                self._url(path),
                headers=_auth_headers(credential),
                json=json,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            _logger.warning("Backend %s %s failed: %s", method, path, exc)
            return False
        return True


def _auth_headers(credential: UserCredential) -> dict[str, str]:
    return {"Authorization": f"Bearer {credential.access_token}"}


def _serialize_ingredient(ingredient: Ingredient) -> dict[str, object]:
    return {
        "name": ingredient.name,
        "type": ingredient.category,
        "amount": ingredient.quantity,
        "unit": ingredient.unit,
        "custom": ingredient.is_custom,
    }


def _parse_ingredient(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row into a domain model."""
    return Ingredient(
        name=str(row["name"]),
        category=str(row.get("type", "")),
        quantity=float(row.get("amount", 0.0)),
        unit=str(row.get("unit", "")),
        is_custom=bool(row.get("custom", False)),
    )
