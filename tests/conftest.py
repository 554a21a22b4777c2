import pytest


@pytest.fixture
def recipe_row():
    """
    Build one joined recipe/ingredient row as the read queries return it.
    """

    def _make(recipe_id: int, ingredient_name: str, **overrides) -> dict:
        row = {
            "recipe_id": recipe_id,
            "title": f"Recipe {recipe_id}",
            "instructions": "Mix and cook.",
            "preparation_time": 10,
            "cooking_time": 15,
            "difficulty": "Easy",
            "cuisine_name": "American",
            "image_link": None,
            "ingredient_name": ingredient_name,
            "quantity": 1,
            "unit": "cup",
        }
        row.update(overrides)
        return row

    return _make
