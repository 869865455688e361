"""List management service for one signed-in user."""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from ingredient_lists.adapters.backend_gateway import BackendGateway
from ingredient_lists.domain.errors import ErrorKind, OperationResult
from ingredient_lists.domain.ingredients import Ingredient
from ingredient_lists.domain.lists import IngredientList, ListCollection
from ingredient_lists.domain.models import UserCredential
from ingredient_lists.domain.moves import MoveOutcome, MoveResult
from ingredient_lists.services.moves import MoveOperation

_logger = logging.getLogger(__name__)


def validate_ingredient(ingredient: Ingredient) -> str | None:
    """Return a validation message for caller-supplied ingredient data."""
    if ingredient is None:
        raise TypeError("ingredient is required")
    if not ingredient.name or not ingredient.name.strip():
        return "Ingredient name cannot be empty."
    if not ingredient.category or not ingredient.category.strip():
        return "Ingredient category cannot be empty."
    if not ingredient.unit or not ingredient.unit.strip():
        return "Please select a valid unit."
    if ingredient.quantity <= 0:
        return "Please enter a valid amount greater than 0."
    return None


def _blank(name: str | None) -> bool:
    return name is None or not name.strip()


@dataclass
class ListService:
    """Application service over a user's lists.

    The backend is the source of truth. The service keeps a mirror of the
    user's lists, loaded with :meth:`load`, and applies every change the
    backend accepted to it with the same merge and insert rules.
    """

    gateway: BackendGateway
    credential: UserCredential
    compensation_attempts: int = 3
    collection: ListCollection = field(default_factory=ListCollection)
    _locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = field(
        default_factory=weakref.WeakValueDictionary, repr=False
    )

    async def load(self) -> OperationResult:
        """Fetch every list from the backend and replace the mirror."""
        fetched = await self.gateway.fetch_lists(self.credential)
        if fetched is None:
            return OperationResult.failure(
                ErrorKind.UPSTREAM_FAILURE, "Failed to fetch lists."
            )
        self.collection = fetched
        return OperationResult.success()

    def get_lists(self) -> list[IngredientList]:
        """Return copies of every list."""
        return self.collection.get_all()

    def find_list(self, name: str) -> IngredientList | None:
        """Return a copy of the named list, if present."""
        found = self.collection.find_by_name(name)
        return found.copy() if found is not None else None

    def search_list(self, name: str, text: str) -> list[Ingredient] | None:
        """Return entries of the named list whose name contains ``text``."""
        found = self.collection.find_by_name(name)
        if found is None:
            return None
        return found.search(text)

    async def create_list(self, name: str) -> OperationResult:
        """Create an empty list."""
        if _blank(name):
            return OperationResult.failure(
                ErrorKind.INVALID_INPUT, "List name cannot be empty."
            )
        async with self._locked(name):
            if name in self.collection:
                return OperationResult.failure(
                    ErrorKind.ALREADY_EXISTS, f"List {name!r} already exists."
                )
            if not await self.gateway.create_list(self.credential, name):
                return _upstream("create list")
            self.collection.create(name)
        return OperationResult.success()

    async def delete_list(self, name: str) -> OperationResult:
        """Delete a list and its entries."""
        async with self._locked(name):
            if name not in self.collection:
                return _not_found(name)
            if not await self.gateway.delete_list(self.credential, name):
                return _upstream("delete list")
            self.collection.delete(name)
        return OperationResult.success()

    async def rename_list(self, old_name: str, new_name: str) -> OperationResult:
        """Rename a list."""
        if _blank(new_name):
            return OperationResult.failure(
                ErrorKind.INVALID_INPUT, "List name cannot be empty."
            )
        async with self._locked(old_name, new_name):
            if old_name not in self.collection:
                return _not_found(old_name)
            if old_name != new_name and new_name in self.collection:
                return OperationResult.failure(
                    ErrorKind.ALREADY_EXISTS, f"List {new_name!r} already exists."
                )
            if not await self.gateway.rename_list(
                self.credential, old_name, new_name
            ):
                return _upstream("rename list")
            self.collection.rename(old_name, new_name)
        return OperationResult.success()

    async def add_ingredient(
        self, list_name: str, ingredient: Ingredient
    ) -> OperationResult:
        """Add an ingredient, merging it into a matching entry."""
        message = validate_ingredient(ingredient)
        if message:
            return OperationResult.failure(ErrorKind.INVALID_INPUT, message)
        async with self._locked(list_name):
            target = self.collection.find_by_name(list_name)
            if target is None:
                return _not_found(list_name)
            if not await self.gateway.add_ingredient(
                self.credential, list_name, ingredient.copy()
            ):
                return _upstream("add ingredient")
            target.add(ingredient.copy())
        return OperationResult.success()

    async def remove_ingredient(
        self, list_name: str, ingredient: Ingredient
    ) -> OperationResult:
        """Remove an ingredient from a list."""
        if ingredient is None:
            raise TypeError("ingredient is required")
        async with self._locked(list_name):
            target = self.collection.find_by_name(list_name)
            if target is None:
                return _not_found(list_name)
            if not target.contains(ingredient):
                return _not_found(ingredient.name)
            if not await self.gateway.remove_ingredient(
                self.credential, list_name, ingredient.copy()
            ):
                return _upstream("remove ingredient")
            target.remove(ingredient)
        return OperationResult.success()

    async def edit_ingredient(
        self, list_name: str, old: Ingredient, new: Ingredient
    ) -> OperationResult:
        """Replace an entry, merging when the new value matches another."""
        if old is None:
            raise TypeError("ingredient is required")
        message = validate_ingredient(new)
        if message:
            return OperationResult.failure(ErrorKind.INVALID_INPUT, message)
        async with self._locked(list_name):
            target = self.collection.find_by_name(list_name)
            if target is None:
                return _not_found(list_name)
            if not target.contains(old):
                return _not_found(old.name)
            if not await self.gateway.edit_ingredient(
                self.credential, list_name, old.copy(), new.copy()
            ):
                return _upstream("edit ingredient")
            target.edit(old, new)
        return OperationResult.success()

    async def move_ingredient(
        self, source: str, destination: str, ingredient: Ingredient
    ) -> MoveResult | OperationResult:
        """Move an entry between lists.

        Returns an :class:`OperationResult` when the request is rejected
        before any backend call, otherwise the :class:`MoveResult`.
        """
        if ingredient is None:
            raise TypeError("ingredient is required")
        if _blank(ingredient.name):
            return OperationResult.failure(
                ErrorKind.INVALID_INPUT, "Ingredient name cannot be empty."
            )
        if _blank(ingredient.category):
            return OperationResult.failure(
                ErrorKind.INVALID_INPUT, "Ingredient category cannot be empty."
            )
        if source == destination:
            return OperationResult.failure(
                ErrorKind.INVALID_INPUT, "Source and destination must differ."
            )
        async with self._locked(source, destination):
            source_list = self.collection.find_by_name(source)
            if source_list is None:
                return _not_found(source)
            if destination not in self.collection:
                return _not_found(destination)
            entry = source_list.find(ingredient)
            if entry is None:
                return _not_found(ingredient.name)

            moving = entry.copy()
            operation = MoveOperation(
                gateway=self.gateway,
                credential=self.credential,
                compensation_attempts=self.compensation_attempts,
            )
            result = await operation.execute(source, destination, moving)
            self._replay(result, moving)
        if result.outcome is MoveOutcome.PARTIALLY_RECONCILED:
            _logger.error(
                "Lists %s and %s may be out of sync for %s",
                source,
                destination,
                moving.name,
            )
        return result

    async def cascade_delete_custom(self, template: Ingredient) -> int:
        """Purge a deleted custom ingredient from every list.

        Each matching entry is removed through the backend; entries the
        backend refuses stay in the mirror. Returns how many were removed.
        """
        if template is None:
            raise TypeError("ingredient is required")
        removed = 0
        for list_name in self.collection.names():
            async with self._locked(list_name):
                target = self.collection.find_by_name(list_name)
                if target is None:
                    continue
                for entry in [e for e in target if e.matches_definition(template)]:
                    if not await self.gateway.remove_ingredient(
                        self.credential, list_name, entry.copy()
                    ):
                        _logger.warning(
                            "Backend kept %s in %s", entry.name, list_name
                        )
                        continue
                    target.remove(entry)
                    removed += 1
        if removed:
            _logger.info(
                "Removed %s entries of custom ingredient %s", removed, template.name
            )
        return removed

    def _replay(self, result: MoveResult, ingredient: Ingredient) -> None:
        """Apply the backend calls that succeeded during a move to the mirror."""
        for step in result.steps:
            if not step.succeeded:
                continue
            target = self.collection.find_by_name(step.list_name)
            if target is None:
                continue
            if step.action == "add":
                target.add(ingredient.copy())
            else:
                target.remove(ingredient)

    @asynccontextmanager
    async def _locked(self, *names: str) -> AsyncIterator[None]:
        """Hold the per-list locks for ``names`` in a stable order.

        Locks are held weakly, so a name stops taking memory once nothing
        waits on it.
        """
        locks = [
            self._locks.setdefault(name, asyncio.Lock())
            for name in sorted(set(names))
        ]
        for lock in locks:
            await lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


def _not_found(name: str) -> OperationResult:
    return OperationResult.failure(ErrorKind.NOT_FOUND, f"{name!r} was not found.")


def _upstream(action: str) -> OperationResult:
    _logger.warning("Backend rejected %s", action)
    return OperationResult.failure(
        ErrorKind.UPSTREAM_FAILURE, f"Failed to {action}. Please try again."
    )
