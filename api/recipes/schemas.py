"""
Pydantic schemas for recipe endpoints.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer

# Durations are stored in Postgres `integer` columns.
MIN_INT32 = -(2**31)
MAX_INT32 = 2**31 - 1


class Difficulty(str, Enum):
    # Declaration order is the sort rank; keep it in step with the
    # difficulty_level enum in db/schema.sql.
    EASY = "Easy"
    MEDIUM = "Medium"
    ADVANCED = "Advanced"

    @classmethod
    def _missing_(cls, value: object) -> Difficulty | None:
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        if key == "intermediate":
            return cls.MEDIUM
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


def _parse_mins_value(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("invalid minutes format")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError("invalid minutes format")

    parts = value.split(" ")
    if len(parts) != 2 or parts[1] != "mins":
        raise ValueError("invalid minutes format")
    try:
        return int(parts[0])
    except ValueError as exc:
        raise ValueError("invalid minutes format") from exc


def parse_mins(value: Any) -> Any:
    """
    Accept `15` or `"15 mins"`; anything else is an invalid minutes format.
    """
    minutes = _parse_mins_value(value)
    if not MIN_INT32 <= minutes <= MAX_INT32:
        raise ValueError("invalid minutes format")
    return minutes


def format_mins(value: int) -> str:
    return f"{value} mins"


Mins = Annotated[int, BeforeValidator(parse_mins), PlainSerializer(format_mins, return_type=str)]


class Ingredient(BaseModel):
    ingredient_name: str
    quantity: float
    unit: str = ""


class Recipe(BaseModel):
    id: int
    title: str
    instructions: str
    preparation_time: Mins
    cooking_time: Mins
    difficulty: Difficulty
    cuisine_name: str
    image_link: str | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)


class IngredientInput(BaseModel):
    ingredient_name: str = Field(default="", max_length=200)
    quantity: float = 0
    unit: str = Field(default="", max_length=50)


class RecipeInput(BaseModel):
    """
    Create/replace payload.

    Constraints are checked by `service.validate_recipe` so that every
    broken field is reported at once; only type coercion happens here.
    `ingredients=None` on update keeps the recipe's current ingredients.
    """

    title: str = ""
    instructions: str = ""
    preparation_time: Mins = 0
    cooking_time: Mins = 0
    difficulty: str = ""
    cuisine_name: str = ""
    image_link: str | None = None
    ingredients: list[IngredientInput] | None = None


class Metadata(BaseModel):
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0
