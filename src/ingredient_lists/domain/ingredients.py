"""Domain models for ingredients and catalog definitions."""

from dataclasses import dataclass, replace


@dataclass
class Ingredient:
    """An ingredient line item with a mutable quantity and unit."""

    name: str
    category: str
    quantity: float = 0.0
    unit: str = ""
    is_custom: bool = False

    @property
    def identity(self) -> tuple[str, str]:
        """Return the (name, category) pair that identifies the line item."""
        return (self.name, self.category)

    def is_same_item(self, other: "Ingredient") -> bool:
        """Return whether both ingredients describe the same line item."""
        if other is None:
            raise TypeError("ingredient is required")
        return self.name == other.name and self.category == other.category

    def matches_definition(self, template: "Ingredient") -> bool:
        """Return whether the entry was created from the given definition."""
        if template is None:
            raise TypeError("ingredient is required")
        return (
            self.name == template.name
            and self.category == template.category
            and self.is_custom == template.is_custom
        )

    def copy(self) -> "Ingredient":
        """Return an independent copy of the ingredient."""
        return replace(self)


@dataclass(frozen=True)
class CatalogEntry:
    """A known ingredient definition from the catalog."""

    name: str
    category: str
    is_custom: bool = False

    def to_ingredient(self, quantity: float, unit: str) -> Ingredient:
        """Build a list entry for this definition."""
        return Ingredient(
            name=self.name,
            category=self.category,
            quantity=quantity,
            unit=unit,
            is_custom=self.is_custom,
        )
