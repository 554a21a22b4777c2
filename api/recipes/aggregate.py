"""
Fold joined recipe/ingredient rows into Recipe objects.

The queries fan a recipe out over one row per ingredient. Rows for the same
recipe may arrive interleaved with other recipes, so grouping is by id
lookup. Output order is the order in which each recipe id first appears.
"""

from __future__ import annotations

from typing import Any, Iterable

from .schemas import Difficulty, Ingredient, Recipe


def _ingredient_from_row(row: dict[str, Any]) -> Ingredient:
    return Ingredient(
        ingredient_name=str(row["ingredient_name"]),
        quantity=float(row["quantity"]),
        unit=str(row.get("unit") or ""),
    )


def _recipe_from_row(row: dict[str, Any]) -> Recipe:
    return Recipe(
        id=int(row["recipe_id"]),
        title=str(row["title"]),
        instructions=str(row.get("instructions") or ""),
        preparation_time=int(row["preparation_time"]),
        cooking_time=int(row["cooking_time"]),
        difficulty=Difficulty(row["difficulty"]),
        cuisine_name=str(row["cuisine_name"]),
        image_link=row.get("image_link"),
    )


def group_rows(rows: Iterable[dict[str, Any]]) -> list[Recipe]:
    # dict preserves insertion order, which is the first-seen order.
    recipes: dict[int, Recipe] = {}
    for row in rows:
        recipe_id = int(row["recipe_id"])
        recipe = recipes.get(recipe_id)
        if recipe is None:
            recipe = _recipe_from_row(row)
            recipes[recipe_id] = recipe
        recipe.ingredients.append(_ingredient_from_row(row))
    return list(recipes.values())
