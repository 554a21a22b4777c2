"""
Recipe persistence (raw SQL).

Read queries return flat rows, one per recipe/ingredient pair; grouping into
Recipe objects happens in `aggregate.py`. All joins to ingredients are inner
joins, so a recipe without ingredient rows is invisible to every read.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import asyncpg

from core import db
from core.errors import ValidationError

RECIPE_ROW_COLUMNS = """
    r.recipe_id,
    r.title,
    r.instructions,
    r.preparation_time,
    r.cooking_time,
    r.difficulty::text AS difficulty,
    c.cuisine_name,
    r.image_link,
    i.name AS ingredient_name,
    ri.quantity,
    ri.unit
"""

# $1 = title substring ('' = any), $2 = cuisine id (0 = any).
LISTING_PREDICATES = """
    ($1::text = '' OR strpos(lower(r.title), lower($1::text)) > 0)
    AND ($2::bigint = 0 OR r.cuisine_id = $2::bigint)
    AND EXISTS (SELECT 1 FROM recipe_ingredients x WHERE x.recipe_id = r.recipe_id)
"""


async def fetch_recipe_rows(recipe_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {RECIPE_ROW_COLUMNS}
        FROM recipes r
        JOIN cuisines c ON c.cuisine_id = r.cuisine_id
        JOIN recipe_ingredients ri ON ri.recipe_id = r.recipe_id
        JOIN ingredients i ON i.ingredient_id = ri.ingredient_id
        WHERE r.recipe_id = $1
        ORDER BY ri.position, ri.ingredient_id
        """,
        recipe_id,
    )


async def fetch_recipe_page(
    *,
    title: str,
    cuisine_id: int,
    order_by: str,
    limit: int,
    offset: int,
) -> tuple[list[dict[str, Any]], int]:
    """
    Fetch one page of recipes (as joined rows) plus the total match count.

    Paging applies to recipes, not rows: the page of recipe ids is chosen
    first, then fanned out to ingredients. Both queries run in one read-only
    snapshot so the count agrees with the page.

    `order_by` must come from `filters.resolve_sort`.
    """
    async with db.transaction(readonly=True, isolation="repeatable_read") as conn:
        rows = await conn.fetch(
            f"""
            WITH page AS (
                SELECT r.recipe_id, row_number() OVER (ORDER BY {order_by}) AS page_position
                FROM recipes r
                JOIN cuisines c ON c.cuisine_id = r.cuisine_id
                WHERE {LISTING_PREDICATES}
                ORDER BY {order_by}
                LIMIT $3
                OFFSET $4
            )
            SELECT {RECIPE_ROW_COLUMNS}
            FROM page p
            JOIN recipes r ON r.recipe_id = p.recipe_id
            JOIN cuisines c ON c.cuisine_id = r.cuisine_id
            JOIN recipe_ingredients ri ON ri.recipe_id = r.recipe_id
            JOIN ingredients i ON i.ingredient_id = ri.ingredient_id
            ORDER BY p.page_position, ri.position, ri.ingredient_id
            """,
            title,
            cuisine_id,
            limit,
            offset,
            timeout=db.query_timeout(),
        )
        total = await conn.fetchval(
            f"""
            SELECT count(*)
            FROM recipes r
            WHERE {LISTING_PREDICATES}
            """,
            title,
            cuisine_id,
            timeout=db.query_timeout(),
        )
    return [dict(row) for row in rows], int(total or 0)


async def fetch_rows_covering_ingredients(names: list[str]) -> list[dict[str, Any]]:
    """
    Rows for every recipe whose ingredients include all of `names`.

    `names` must already be lower-cased and de-duplicated; a recipe qualifies
    when the number of distinct matching names equals len(names). Extra
    ingredients on the recipe do not disqualify it.

    With names ["flour", "egg"]: a recipe with Flour, EGG and Milk matches
    (2 distinct hits), a recipe with only Flour does not (1 hit).
    """
    return await db.fetch_all(
        f"""
        SELECT {RECIPE_ROW_COLUMNS}
        FROM recipes r
        JOIN cuisines c ON c.cuisine_id = r.cuisine_id
        JOIN recipe_ingredients ri ON ri.recipe_id = r.recipe_id
        JOIN ingredients i ON i.ingredient_id = ri.ingredient_id
        WHERE r.recipe_id IN (
            SELECT mri.recipe_id
            FROM recipe_ingredients mri
            JOIN ingredients mi ON mi.ingredient_id = mri.ingredient_id
            WHERE lower(mi.name) = ANY($1::text[])
            GROUP BY mri.recipe_id
            HAVING count(DISTINCT lower(mi.name)) = $2
        )
        ORDER BY r.recipe_id, ri.position, ri.ingredient_id
        """,
        names,
        len(names),
    )


async def list_ingredient_names() -> list[str]:
    rows = await db.fetch_all(
        """
        SELECT DISTINCT name
        FROM ingredients
        ORDER BY name
        """
    )
    return [str(row["name"]) for row in rows]


async def _cuisine_id(conn: asyncpg.Connection, cuisine_name: str) -> int:
    cuisine_id = await conn.fetchval(
        """
        SELECT cuisine_id
        FROM cuisines
        WHERE lower(cuisine_name) = lower($1)
        """,
        cuisine_name,
        timeout=db.query_timeout(),
    )
    if cuisine_id is None:
        raise ValidationError({"cuisine_name": "must be a known cuisine"})
    return int(cuisine_id)


async def _replace_ingredients(
    conn: asyncpg.Connection,
    recipe_id: int,
    ingredients: list[dict[str, Any]],
) -> None:
    await conn.execute(
        "DELETE FROM recipe_ingredients WHERE recipe_id = $1",
        recipe_id,
        timeout=db.query_timeout(),
    )
    if not ingredients:
        return

    records = []
    for position, item in enumerate(ingredients):
        ingredient_id = await conn.fetchval(
            """
            INSERT INTO ingredients (name)
            VALUES ($1)
            ON CONFLICT ((lower(name))) DO UPDATE
            SET name = ingredients.name
            RETURNING ingredient_id
            """,
            item["ingredient_name"],
            timeout=db.query_timeout(),
        )
        records.append(
            (recipe_id, int(ingredient_id), position, Decimal(str(item["quantity"])), item["unit"])
        )

    await conn.executemany(
        """
        INSERT INTO recipe_ingredients (recipe_id, ingredient_id, position, quantity, unit)
        VALUES ($1, $2, $3, $4, $5)
        """,
        records,
        timeout=db.query_timeout(),
    )


async def insert_recipe(
    *,
    title: str,
    instructions: str,
    preparation_time: int,
    cooking_time: int,
    difficulty: str,
    cuisine_name: str,
    image_link: str | None = None,
    ingredients: list[dict[str, Any]] | None = None,
) -> int:
    """
    Insert a recipe (and its ingredients) in a single transaction.

    Returns the generated recipe id.
    """
    async with db.transaction() as conn:
        cuisine_id = await _cuisine_id(conn, cuisine_name)
        recipe_id = await conn.fetchval(
            """
            INSERT INTO recipes (title, instructions, preparation_time, cooking_time, difficulty, cuisine_id, image_link)
            VALUES ($1, $2, $3, $4, $5::difficulty_level, $6, $7)
            RETURNING recipe_id
            """,
            title,
            instructions,
            preparation_time,
            cooking_time,
            difficulty,
            cuisine_id,
            image_link,
            timeout=db.query_timeout(),
        )
        if recipe_id is None:
            raise RuntimeError("Failed to insert recipe.")

        if ingredients:
            await _replace_ingredients(conn, int(recipe_id), ingredients)

    return int(recipe_id)


async def update_recipe(
    recipe_id: int,
    *,
    title: str,
    instructions: str,
    preparation_time: int,
    cooking_time: int,
    difficulty: str,
    cuisine_name: str,
    image_link: str | None = None,
    ingredients: list[dict[str, Any]] | None = None,
) -> bool:
    """
    Replace a recipe's fields. `ingredients=None` leaves ingredients untouched.

    Returns False when no recipe has this id.
    """
    async with db.transaction() as conn:
        cuisine_id = await _cuisine_id(conn, cuisine_name)
        status = await conn.execute(
            """
            UPDATE recipes
            SET title = $1,
                instructions = $2,
                preparation_time = $3,
                cooking_time = $4,
                difficulty = $5::difficulty_level,
                cuisine_id = $6,
                image_link = $7
            WHERE recipe_id = $8
            """,
            title,
            instructions,
            preparation_time,
            cooking_time,
            difficulty,
            cuisine_id,
            image_link,
            recipe_id,
            timeout=db.query_timeout(),
        )
        if db.rows_affected(status) == 0:
            return False

        if ingredients is not None:
            await _replace_ingredients(conn, recipe_id, ingredients)

    return True


async def delete_recipe(recipe_id: int) -> bool:
    """
    Delete a recipe; ingredient links go with it (ON DELETE CASCADE).

    Returns False when no recipe has this id.
    """
    status = await db.execute("DELETE FROM recipes WHERE recipe_id = $1", recipe_id)
    return db.rows_affected(status) > 0
