"""Domain models for named ingredient lists."""

from collections.abc import Iterable, Iterator

from ingredient_lists.domain.ingredients import Ingredient

DEFAULT_LIST_NAME = "No Name"


def _require(value: object, what: str) -> None:
    if value is None:
        raise TypeError(f"{what} is required")


class IngredientList:
    """Ordered ingredient entries under a list name.

    New entries are inserted in case-insensitive name order. Adding an entry
    that matches an existing line item sums the quantities instead, so no two
    entries ever share an identity. Quantities are summed as-is; units are
    not converted.
    """

    def __init__(
        self, name: str | None, entries: Iterable[Ingredient] | None = None
    ) -> None:
        self.name = name or DEFAULT_LIST_NAME
        self._entries: list[Ingredient] = []
        for entry in entries or []:
            self.add(entry)

    @property
    def entries(self) -> tuple[Ingredient, ...]:
        """Return the entries in list order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Ingredient]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"IngredientList(name={self.name!r}, entries={self._entries!r})"

    def find(self, ingredient: Ingredient) -> Ingredient | None:
        """Return the entry for the same line item, if present."""
        _require(ingredient, "ingredient")
        for entry in self._entries:
            if entry.is_same_item(ingredient):
                return entry
        return None

    def contains(self, ingredient: Ingredient) -> bool:
        """Return whether the line item is in the list."""
        return self.find(ingredient) is not None

    def add(self, ingredient: Ingredient) -> None:
        """Merge the ingredient into the list or insert it in name order."""
        existing = self.find(ingredient)
        if existing is not None:
            existing.quantity += ingredient.quantity
            return

        key = ingredient.name.casefold()
        for index, entry in enumerate(self._entries):
            if entry.name.casefold() > key:
                self._entries.insert(index, ingredient)
                return
        self._entries.append(ingredient)

    def remove(self, ingredient: Ingredient) -> bool:
        """Remove the first entry for the line item."""
        _require(ingredient, "ingredient")
        for index, entry in enumerate(self._entries):
            if entry.is_same_item(ingredient):
                del self._entries[index]
                return True
        return False

    def edit(self, old: Ingredient, new: Ingredient) -> bool:
        """Replace an entry, re-running the merge rule for the new value."""
        _require(new, "ingredient")
        if not self.remove(old):
            return False
        self.add(new.copy())
        return True

    def cascade_delete(self, template: Ingredient) -> int:
        """Remove every entry created from a definition that was deleted."""
        _require(template, "ingredient")
        kept = [
            entry for entry in self._entries if not entry.matches_definition(template)
        ]
        removed = len(self._entries) - len(kept)
        self._entries = kept
        return removed

    def search(self, text: str) -> list[Ingredient]:
        """Return copies of entries whose name contains the text."""
        needle = (text or "").lower()
        return [entry.copy() for entry in self._entries if needle in entry.name.lower()]

    def copy(self) -> "IngredientList":
        """Return a deep copy of the list."""
        clone = IngredientList(self.name)
        clone._entries = [entry.copy() for entry in self._entries]
        return clone


class ListCollection:
    """The set of uniquely named ingredient lists owned by one user."""

    def __init__(self, lists: Iterable[IngredientList] | None = None) -> None:
        self._lists: list[IngredientList] = []
        for ingredient_list in lists or []:
            if self.find_by_name(ingredient_list.name) is None:
                self._lists.append(ingredient_list)

    def __len__(self) -> int:
        return len(self._lists)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find_by_name(name) is not None

    def names(self) -> list[str]:
        """Return the list names in creation order."""
        return [ingredient_list.name for ingredient_list in self._lists]

    def get_all(self, copy: bool = True) -> list[IngredientList]:
        """Return every list, deep-copied unless told otherwise."""
        if copy:
            return [ingredient_list.copy() for ingredient_list in self._lists]
        return list(self._lists)

    def find_by_name(self, name: str) -> IngredientList | None:
        """Return the list with the exact name, if present."""
        _require(name, "list name")
        for ingredient_list in self._lists:
            if ingredient_list.name == name:
                return ingredient_list
        return None

    def create(self, name: str) -> bool:
        """Create an empty list unless the name is already taken."""
        _require(name, "list name")
        if self.find_by_name(name or DEFAULT_LIST_NAME) is not None:
            return False
        self._lists.append(IngredientList(name))
        return True

    def delete(self, name: str) -> bool:
        """Delete the first list with the name."""
        _require(name, "list name")
        for index, ingredient_list in enumerate(self._lists):
            if ingredient_list.name == name:
                del self._lists[index]
                return True
        return False

    def rename(self, old_name: str, new_name: str) -> bool:
        """Rename a list unless the new name belongs to another list."""
        _require(new_name, "list name")
        target = self.find_by_name(old_name)
        if target is None:
            return False
        if old_name == new_name:
            return True
        if self.find_by_name(new_name) is not None:
            return False
        target.name = new_name or DEFAULT_LIST_NAME
        return True

    def cascade_delete(self, template: Ingredient) -> int:
        """Purge a deleted definition from every list."""
        return sum(
            ingredient_list.cascade_delete(template) for ingredient_list in self._lists
        )

    def copy(self) -> "ListCollection":
        """Return a deep copy of the collection."""
        return ListCollection(self.get_all(copy=True))
