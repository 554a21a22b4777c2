"""
Recipe API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from . import service
from .filters import Filters
from .schemas import RecipeInput

router = APIRouter(prefix="/v1")


@router.get("/recipes")
async def list_recipes(
    title: str = Query(default="", max_length=500),
    cuisineid: int = 0,
    page: int = 1,
    pagesize: int = 50,
    sort: str = "id",
) -> dict:
    filters = Filters(page=page, page_size=pagesize, sort=sort)
    recipes, metadata = await service.list_recipes(title, cuisineid, filters)
    return {
        "recipes": [recipe.model_dump(mode="json") for recipe in recipes],
        "metadata": metadata.model_dump(),
    }


@router.post("/recipes", status_code=status.HTTP_201_CREATED)
async def create_recipe(payload: RecipeInput, response: Response) -> dict:
    recipe = await service.create_recipe(payload)
    response.headers["Location"] = f"/v1/recipes/{recipe.id}"
    return {"recipe": recipe.model_dump(mode="json")}


@router.get("/recipes/{recipe_id}")
async def show_recipe(recipe_id: int) -> dict:
    recipe = await service.get_recipe(recipe_id)
    return {"recipe": recipe.model_dump(mode="json")}


@router.put("/recipes/{recipe_id}")
async def update_recipe(recipe_id: int, payload: RecipeInput) -> dict:
    recipe = await service.update_recipe(recipe_id, payload)
    return {"recipe": recipe.model_dump(mode="json")}


@router.delete("/recipes/{recipe_id}")
async def delete_recipe(recipe_id: int) -> dict:
    await service.delete_recipe(recipe_id)
    return {"message": "recipe successfully deleted"}


@router.get("/search")
async def search_recipes(
    ingredients: str = Query(default="", max_length=2000),
) -> dict:
    names = ingredients.split(",") if ingredients else []
    recipes = await service.search_recipes(names)
    return {
        "recipes": [recipe.model_dump(mode="json") for recipe in recipes],
        "count": len(recipes),
    }


@router.get("/listingredients")
async def list_ingredients() -> dict:
    names = await service.list_ingredients()
    return {"ingredients": names, "count": len(names)}
