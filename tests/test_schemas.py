import re
from pathlib import Path

import pytest
from pydantic import ValidationError

from recipes.schemas import Difficulty, Recipe, RecipeInput

SCHEMA_SQL = Path(__file__).resolve().parent.parent / "db" / "schema.sql"


@pytest.mark.parametrize("value, expected", [(15, 15), ("15 mins", 15), ("0 mins", 0)])
def test_minutes_accepts_int_or_suffixed_string(value, expected):
    assert RecipeInput(preparation_time=value).preparation_time == expected


@pytest.mark.parametrize(
    "value",
    ["15", "15 minutes", "fifteen mins", "15  mins", True, 1.5, "99999999999 mins", "2147483648 mins", 2**31, -(2**31) - 1],
)
def test_minutes_rejects_other_shapes(value):
    with pytest.raises(ValidationError, match="invalid minutes format"):
        RecipeInput(cooking_time=value)


def test_minutes_serialize_with_suffix():
    recipe = Recipe(
        id=1,
        title="Pancakes",
        instructions="Mix, fry.",
        preparation_time=10,
        cooking_time=15,
        difficulty=Difficulty.EASY,
        cuisine_name="American",
    )
    body = recipe.model_dump(mode="json")
    assert body["preparation_time"] == "10 mins"
    assert body["cooking_time"] == "15 mins"
    assert body["difficulty"] == "Easy"
    assert body["ingredients"] == []


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Easy", Difficulty.EASY),
        ("medium", Difficulty.MEDIUM),
        ("Intermediate", Difficulty.MEDIUM),
        ("ADVANCED", Difficulty.ADVANCED),
    ],
)
def test_difficulty_lookup(value, expected):
    assert Difficulty(value) is expected


def test_unknown_difficulty_raises():
    with pytest.raises(ValueError):
        Difficulty("Impossible")


def test_difficulty_order_matches_database_enum():
    sql = SCHEMA_SQL.read_text()
    match = re.search(r"CREATE TYPE difficulty_level AS ENUM \(([^)]*)\)", sql)
    assert match is not None
    labels = [label.strip().strip("'") for label in match.group(1).split(",")]
    assert labels == [d.value for d in Difficulty]


@pytest.mark.parametrize("value", ["2147483647 mins", 2**31 - 1])
def test_minutes_accept_largest_integer_column_value(value):
    assert RecipeInput(preparation_time=value).preparation_time == 2**31 - 1
