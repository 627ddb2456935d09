# flake8: noqa
from datetime import datetime, timedelta

import pytest

from conftest import CURRY, PASTA
from whatsfordinner import crud, models, schemas
from whatsfordinner.exceptions import FormValidationError, RecordNotFoundError
from whatsfordinner.forms import IngredientForm


def _custom(db, title="Lasagna", **kwargs):
    fields = dict(
        title=title,
        instructions="Layer and bake.",
        cuisine_type="Italian",
        diet_type="None",
        ingredients=[IngredientForm(name="pasta sheets", amount=12, unit="piece"),
                     IngredientForm(name="ricotta", amount=2, unit="cup")],
    )
    fields.update(kwargs)
    return crud.create_custom_recipe(db, **fields)


def test_upsert_same_id_does_not_duplicate(db):
    payload = schemas.RecipePayload.model_validate(PASTA)
    first, created = crud.upsert_recipe(db, payload)
    db.commit()
    assert created is True

    renamed = schemas.RecipePayload.model_validate(dict(PASTA, title="Changed upstream"))
    second, created = crud.upsert_recipe(db, renamed)
    db.commit()

    assert created is False
    assert second is first
    assert db.query(models.Recipe).count() == 1
    # existing record left unchanged
    assert crud.get_recipe(db, PASTA["id"]).title == PASTA["title"]


def test_upsert_repeated_id_in_one_batch(db):
    payload = schemas.RecipePayload.model_validate(PASTA)
    crud.upsert_recipe(db, payload)
    _, created = crud.upsert_recipe(db, payload)
    db.commit()
    assert created is False
    assert db.query(models.Recipe).count() == 1


def test_toggle_recipe_favorite_twice_restores(db):
    crud.upsert_recipe(db, schemas.RecipePayload.model_validate(PASTA))
    db.commit()

    assert crud.toggle_recipe_favorite(db, PASTA["id"]).is_favorite is True
    assert crud.toggle_recipe_favorite(db, PASTA["id"]).is_favorite is False


def test_toggle_custom_favorite_twice_restores(db):
    recipe = _custom(db, is_favorite=True)
    assert crud.toggle_custom_recipe_favorite(db, recipe.id).is_favorite is False
    assert crud.toggle_custom_recipe_favorite(db, recipe.id).is_favorite is True


def test_favorite_unknown_recipe_raises(db):
    with pytest.raises(RecordNotFoundError):
        crud.toggle_recipe_favorite(db, 1)
    with pytest.raises(RecordNotFoundError):
        crud.toggle_custom_recipe_favorite(db, "missing")


def test_delete_custom_recipe_removes_ingredients(db):
    recipe = _custom(db)
    other = _custom(db, title="Keep me")
    assert db.query(models.CustomIngredient).count() == 4

    assert crud.delete_custom_recipe(db, recipe.id) is True

    remaining = db.query(models.CustomIngredient).all()
    assert len(remaining) == 2
    assert all(i.recipe_id == other.id for i in remaining)
    assert crud.delete_custom_recipe(db, recipe.id) is False


def test_update_replaces_ingredients(db):
    recipe = _custom(db)
    crud.update_custom_recipe(
        db,
        recipe.id,
        title="Veggie Lasagna",
        instructions="Layer, bake, rest.",
        cuisine_type="Italian",
        diet_type="Vegetarian",
        ingredients=[IngredientForm(name="zucchini", amount=2, unit="piece")],
        servings=6,
        ready_in_minutes=90,
        is_favorite=False,
    )
    fresh = crud.get_custom_recipe(db, recipe.id)
    assert fresh.title == "Veggie Lasagna"
    assert [i.name for i in fresh.ingredients] == ["zucchini"]
    assert db.query(models.CustomIngredient).count() == 1


def test_add_and_remove_ingredient(db):
    recipe = _custom(db)
    ing = crud.add_custom_ingredient(db, recipe.id, " garlic ", 3, "clove")
    assert ing.name == "garlic"
    assert [i.name for i in crud.get_custom_recipe(db, recipe.id).ingredients][-1] == "garlic"

    assert crud.remove_custom_ingredient(db, recipe.id, ing.id) is True
    assert crud.remove_custom_ingredient(db, recipe.id, ing.id) is False
    assert len(crud.get_custom_recipe(db, recipe.id).ingredients) == 2


def test_favorites_only_favorites_newest_first(db):
    base = datetime(2025, 4, 25, 12, 0, 0)
    for offset, (payload, fav) in enumerate([(PASTA, True), (CURRY, False)]):
        record, _ = crud.upsert_recipe(db, schemas.RecipePayload.model_validate(payload))
        record.is_favorite = fav
        record.created_at = base + timedelta(hours=offset)
    db.commit()
    older = _custom(db, title="Old favorite", is_favorite=True)
    newer = _custom(db, title="New favorite", is_favorite=True)
    _custom(db, title="Not a favorite")
    older.created_at = base - timedelta(days=1)
    newer.created_at = base + timedelta(days=1)
    db.commit()

    result = crud.get_favorites(db)

    assert [r.title for r in result] == ["New favorite", PASTA["title"], "Old favorite"]
    assert all(r.is_favorite for r in result)
    assert [r.id for r in crud.get_favorite_recipes(db)] == [PASTA["id"]]
    assert [r.title for r in crud.get_favorite_custom_recipes(db)] == ["New favorite", "Old favorite"]


def test_custom_recipes_newest_first(db):
    first = _custom(db, title="First")
    second = _custom(db, title="Second")
    first.created_at = datetime(2025, 1, 1)
    second.created_at = datetime(2025, 2, 1)
    db.commit()
    assert [r.title for r in crud.get_custom_recipes(db)] == ["Second", "First"]


def test_reset_all(db):
    crud.upsert_recipe(db, schemas.RecipePayload.model_validate(PASTA))
    db.commit()
    _custom(db)

    crud.reset_all(db)

    assert db.query(models.Recipe).count() == 0
    assert db.query(models.CustomRecipe).count() == 0
    assert db.query(models.CustomIngredient).count() == 0


def test_last_ingredient_cannot_be_removed(db):
    recipe = _custom(db)
    first, second = recipe.ingredients

    assert crud.remove_custom_ingredient(db, recipe.id, first.id) is True
    with pytest.raises(FormValidationError) as exc:
        crud.remove_custom_ingredient(db, recipe.id, second.id)
    assert exc.value.missing == ["ingredients"]
    assert [i.name for i in crud.get_custom_recipe(db, recipe.id).ingredients] == ["ricotta"]


def test_set_and_clear_image(db):
    recipe = _custom(db)
    recipe = crud.set_custom_recipe_image(db, recipe.id, b"png-bytes", "image/png")
    assert recipe.has_image
    assert recipe.image_content_type == "image/png"

    recipe = crud.clear_custom_recipe_image(db, recipe.id)
    assert recipe.image is None
    assert recipe.image_content_type is None
