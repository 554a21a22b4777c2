"""
Recipe business logic.

Scope:
- field validation (before any storage call)
- listing: filters -> one page of recipes + pagination metadata
- ingredient coverage search
- single-recipe CRUD with not-found signalling
"""

from __future__ import annotations

import logging

from core.errors import NotFoundError, UsageError
from core.validator import Validator, unique

from . import aggregate, repository
from .filters import Filters, calculate_metadata, resolve_sort, validate_filters
from .schemas import Difficulty, Ingredient, Metadata, Recipe, RecipeInput

MAX_TITLE_BYTES = 500

logger = logging.getLogger(__name__)


def validate_recipe(v: Validator, recipe: RecipeInput) -> None:
    v.check(recipe.title != "", "title", "must be provided")
    v.check(len(recipe.title.encode("utf-8")) <= MAX_TITLE_BYTES, "title", "must not be more than 500 bytes long")
    v.check(recipe.instructions != "", "instructions", "must be provided")
    v.check(recipe.preparation_time != 0, "preparation_time", "must be provided")
    v.check(recipe.preparation_time > 0, "preparation_time", "must be a positive integer")
    v.check(recipe.cooking_time != 0, "cooking_time", "must be provided")
    v.check(recipe.cooking_time > 0, "cooking_time", "must be a positive integer")
    v.check(recipe.cuisine_name.strip() != "", "cuisine_name", "must be provided")
    v.check(recipe.difficulty != "", "difficulty", "must be provided")
    v.check(
        _difficulty(recipe.difficulty) is not None,
        "difficulty",
        "must be one of " + ", ".join(d.value for d in Difficulty),
    )

    if recipe.ingredients is None:
        return
    names = [item.ingredient_name.strip().lower() for item in recipe.ingredients]
    v.check(all(names), "ingredients", "every ingredient must have a name")
    v.check(all(item.quantity >= 0 for item in recipe.ingredients), "ingredients", "quantities must not be negative")
    v.check(unique(names), "ingredients", "must not contain duplicate names")


def _difficulty(value: str) -> Difficulty | None:
    try:
        return Difficulty(value)
    except ValueError:
        return None


def _write_args(recipe: RecipeInput) -> dict:
    ingredients = None
    if recipe.ingredients is not None:
        ingredients = [
            {
                "ingredient_name": item.ingredient_name.strip(),
                "quantity": item.quantity,
                "unit": item.unit.strip(),
            }
            for item in recipe.ingredients
        ]
    return {
        "title": recipe.title,
        "instructions": recipe.instructions,
        "preparation_time": recipe.preparation_time,
        "cooking_time": recipe.cooking_time,
        "difficulty": Difficulty(recipe.difficulty).value,
        "cuisine_name": recipe.cuisine_name.strip(),
        "image_link": recipe.image_link,
        "ingredients": ingredients,
    }


def _recipe_from_input(recipe_id: int, payload: RecipeInput) -> Recipe:
    args = _write_args(payload)
    return Recipe(
        id=recipe_id,
        title=args["title"],
        instructions=args["instructions"],
        preparation_time=args["preparation_time"],
        cooking_time=args["cooking_time"],
        difficulty=Difficulty(args["difficulty"]),
        cuisine_name=args["cuisine_name"],
        image_link=args["image_link"],
        ingredients=[Ingredient(**item) for item in args["ingredients"] or []],
    )


def normalize_ingredient_names(names: list[str]) -> list[str]:
    """
    Lower-case, trim and de-duplicate, keeping first-seen order.
    """
    seen: dict[str, None] = {}
    for name in names:
        key = (name or "").strip().lower()
        if key:
            seen.setdefault(key, None)
    return list(seen)


async def list_recipes(title: str, cuisine_id: int, filters: Filters) -> tuple[list[Recipe], Metadata]:
    v = Validator()
    validate_filters(v, filters)
    v.check(cuisine_id >= 0, "cuisineid", "must not be negative")
    v.raise_if_invalid()

    order_by, _ = resolve_sort(filters)
    rows, total = await repository.fetch_recipe_page(
        title=title,
        cuisine_id=cuisine_id,
        order_by=order_by,
        limit=filters.limit(),
        offset=filters.offset(),
    )
    recipes = aggregate.group_rows(rows)
    return recipes, calculate_metadata(total, filters.page, filters.page_size)


async def search_recipes(ingredient_names: list[str]) -> list[Recipe]:
    names = normalize_ingredient_names(ingredient_names)
    if not names:
        raise UsageError("at least one ingredient must be provided")

    rows = await repository.fetch_rows_covering_ingredients(names)
    recipes = aggregate.group_rows(rows)
    logger.debug("recipe_search ingredients=%s matched=%s", names, len(recipes))
    return recipes


async def get_recipe(recipe_id: int) -> Recipe:
    if recipe_id < 1:
        raise NotFoundError()

    recipes = aggregate.group_rows(await repository.fetch_recipe_rows(recipe_id))
    if not recipes:
        raise NotFoundError()
    return recipes[0]


async def create_recipe(payload: RecipeInput) -> Recipe:
    v = Validator()
    validate_recipe(v, payload)
    v.raise_if_invalid()

    recipe_id = await repository.insert_recipe(**_write_args(payload))
    logger.info("recipe_created recipe_id=%s title=%r", recipe_id, payload.title)
    return _recipe_from_input(recipe_id, payload)


async def update_recipe(recipe_id: int, payload: RecipeInput) -> Recipe:
    v = Validator()
    validate_recipe(v, payload)
    v.raise_if_invalid()

    if recipe_id < 1 or not await repository.update_recipe(recipe_id, **_write_args(payload)):
        raise NotFoundError()
    logger.info("recipe_updated recipe_id=%s", recipe_id)

    # Ingredients may have been kept from before; read back what is stored.
    stored = aggregate.group_rows(await repository.fetch_recipe_rows(recipe_id))
    return stored[0] if stored else _recipe_from_input(recipe_id, payload)


async def delete_recipe(recipe_id: int) -> None:
    if recipe_id < 1 or not await repository.delete_recipe(recipe_id):
        raise NotFoundError()
    logger.info("recipe_deleted recipe_id=%s", recipe_id)


async def list_ingredients() -> list[str]:
    return await repository.list_ingredient_names()
