"""In-memory backend used when no remote backend is configured."""

from dataclasses import dataclass, field

from ingredient_lists.adapters.backend_gateway import BackendGateway
from ingredient_lists.domain.ingredients import CatalogEntry, Ingredient
from ingredient_lists.domain.lists import IngredientList, ListCollection
from ingredient_lists.domain.models import UserCredential

DEFAULT_CATALOG = (
    ("Apple", "Fruit"),
    ("Milk", "Dairy"),
    ("Rice", "Grain"),
    ("Eggs", "Protein"),
    ("Bread", "Grain"),
    ("Beans", "Pantry"),
    ("Owl", "Poultry"),
    ("Chicken", "Poultry"),
    ("Oats", "Pantry"),
    ("Oranges", "Produce"),
    ("Carrot", "Produce"),
    ("Wheat", "Grain"),
    ("Lentils", "Grain"),
    ("Cookies", "Snacks"),
    ("Chips", "Snacks"),
)

DEFAULT_UNITS = ("count", "g", "kg", "lb", "oz", "mL", "L", "gal")

DEFAULT_LISTS = {
    "Grocery": (
        ("Chicken", "Poultry", 2000, "g"),
        ("Beef", "Meat", 250, "g"),
        ("Rabbit", "Meat", 1, "count"),
        ("Chicken", "Poultry", 8, "count"),
    ),
    "Pantry": (
        ("Cheese", "Dairy", 100, "g"),
        ("Milk", "Dairy", 250, "ml"),
        ("Cereal", "Pantry", 500, "g"),
        ("Carrot", "Produce", 4, "count"),
    ),
}


@dataclass
class InMemoryBackendGateway(BackendGateway):
    """Backend that keeps catalog and lists in process memory.

    Each access token gets its own lists, started from a copy of ``lists``.
    Stored ingredients are always copies of what callers pass in, and
    fetches hand out deep copies, so callers never alias backend state.
    """

    catalog: list[CatalogEntry] = field(default_factory=list)
    units: list[str] = field(default_factory=list)
    lists: ListCollection = field(default_factory=ListCollection)
    users: set[str] = field(default_factory=set)
    user_lists: dict[str, ListCollection] = field(default_factory=dict, repr=False)

    @classmethod
    def seeded(cls) -> "InMemoryBackendGateway":
        """Create a backend populated with demo catalog and lists."""
        lists = ListCollection(
            IngredientList(
                name,
                [
                    Ingredient(
                        name=item, category=category, quantity=float(qty), unit=unit
                    )
                    for item, category, qty, unit in rows
                ],
            )
            for name, rows in DEFAULT_LISTS.items()
        )
        return cls(
            catalog=[CatalogEntry(*row) for row in DEFAULT_CATALOG],
            units=list(DEFAULT_UNITS),
            lists=lists,
        )

    def lists_for(self, access_token: str) -> ListCollection:
        """Return the live lists of one user, seeding them on first use."""
        if access_token not in self.user_lists:
            self.user_lists[access_token] = self.lists.copy()
        return self.user_lists[access_token]

    async def fetch_catalog(
        self, credential: UserCredential
    ) -> list[CatalogEntry] | None:
        return list(self.catalog)

    async def fetch_measurement_units(
        self, credential: UserCredential
    ) -> list[str] | None:
        return list(self.units)

    async def fetch_lists(self, credential: UserCredential) -> ListCollection | None:
        return self.lists_for(credential.access_token).copy()

    async def create_list(self, credential: UserCredential, name: str) -> bool:
        return self.lists_for(credential.access_token).create(name)

    async def delete_list(self, credential: UserCredential, name: str) -> bool:
        return self.lists_for(credential.access_token).delete(name)

    async def rename_list(
        self, credential: UserCredential, old_name: str, new_name: str
    ) -> bool:
        collection = self.lists_for(credential.access_token)
        return collection.rename(old_name, new_name)

    async def add_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        target = self.lists_for(credential.access_token).find_by_name(list_name)
        if target is None:
            return False
        target.add(ingredient.copy())
        return True

    async def remove_ingredient(
        self, credential: UserCredential, list_name: str, ingredient: Ingredient
    ) -> bool:
        # Succeeds whenever the list exists, even if the ingredient was absent.
        target = self.lists_for(credential.access_token).find_by_name(list_name)
        if target is None:
            return False
        target.remove(ingredient)
        return True

    async def edit_ingredient(
        self,
        credential: UserCredential,
        list_name: str,
        old: Ingredient,
        new: Ingredient,
    ) -> bool:
        target = self.lists_for(credential.access_token).find_by_name(list_name)
        if target is None:
            return False
        return target.edit(old, new)

    async def create_user(self, credential: UserCredential) -> bool:
        self.users.add(credential.access_token)
        return True

    async def close(self) -> None:
        return None
