"""
Equilibrium - equilibrium/crafting.py
Recipe registration and crafting against a counted inventory.
=============================================================
Version:     1.0
Stack:       Python 3.11+ | Pydantic v2 (RecipeDef)
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from equilibrium.data_loader import RecipeDef, get_recipes


class RecipeBook:
    """Registered recipes, keyed by result item id."""

    def __init__(self) -> None:
        self._recipes: Dict[str, RecipeDef] = {}

    @classmethod
    def from_data(cls) -> "RecipeBook":
        book = cls()
        for recipe in get_recipes():
            book.register(recipe)
        return book

    def register(self, recipe: RecipeDef) -> None:
        self._recipes[recipe.result] = recipe

    def get(self, result: str) -> Optional[RecipeDef]:
        return self._recipes.get(result)

    def results(self) -> List[str]:
        return sorted(self._recipes)

    def can_craft(self, result: str, inventory: Dict[str, int], stations: Iterable[str] = ()) -> bool:
        recipe = self._recipes.get(result)
        if recipe is None:
            return False
        nearby = set(stations)
        if any(station not in nearby for station in recipe.stations):
            return False
        return all(inventory.get(i.item, 0) >= i.amount for i in recipe.ingredients)

    def craft(self, result: str, inventory: Dict[str, int], stations: Iterable[str] = ()) -> Optional[str]:
        """
        Consumes ingredients from inventory in place and adds the result.
        Returns the result id, or None when the recipe cannot be made.
        """
        if not self.can_craft(result, inventory, stations):
            return None

        recipe = self._recipes[result]
        for ingredient in recipe.ingredients:
            inventory[ingredient.item] -= ingredient.amount
            if inventory[ingredient.item] == 0:
                del inventory[ingredient.item]
        inventory[recipe.result] = inventory.get(recipe.result, 0) + recipe.result_amount
        return recipe.result
