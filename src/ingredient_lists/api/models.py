"""Pydantic models for the lists API."""

from pydantic import BaseModel, Field

from ingredient_lists.domain.ingredients import CatalogEntry, Ingredient
from ingredient_lists.domain.lists import IngredientList


class IngredientPayload(BaseModel):
    """Ingredient supplied by a caller."""

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)
    is_custom: bool = False

    def to_domain(self) -> Ingredient:
        return Ingredient(
            name=self.name,
            category=self.category,
            quantity=self.quantity,
            unit=self.unit,
            is_custom=self.is_custom,
        )


class IngredientRef(BaseModel):
    """Identifies a list entry; quantity and unit are ignored for matching."""

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    quantity: float = 0.0
    unit: str = ""
    is_custom: bool = False

    def to_domain(self) -> Ingredient:
        return Ingredient(
            name=self.name,
            category=self.category,
            quantity=self.quantity,
            unit=self.unit,
            is_custom=self.is_custom,
        )


class CreateListRequest(BaseModel):
    name: str


class RenameListRequest(BaseModel):
    name: str


class EditIngredientRequest(BaseModel):
    old: IngredientRef
    new: IngredientPayload


class MoveIngredientRequest(BaseModel):
    source: str
    destination: str
    ingredient: IngredientRef


def ingredient_to_dict(ingredient: Ingredient) -> dict[str, object]:
    """Serialize an ingredient for responses."""
    return {
        "name": ingredient.name,
        "category": ingredient.category,
        "quantity": ingredient.quantity,
        "unit": ingredient.unit,
        "is_custom": ingredient.is_custom,
    }


def list_to_dict(ingredient_list: IngredientList) -> dict[str, object]:
    """Serialize a list with its entries."""
    return {
        "name": ingredient_list.name,
        "ingredients": [ingredient_to_dict(entry) for entry in ingredient_list],
    }


def catalog_entry_to_dict(entry: CatalogEntry) -> dict[str, object]:
    return {
        "name": entry.name,
        "category": entry.category,
        "is_custom": entry.is_custom,
    }
