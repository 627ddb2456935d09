from typing import Iterable, List, Optional, Tuple, Union

from loguru import logger
from sqlalchemy.orm import Session

from . import models, schemas
from .exceptions import FormValidationError, RecordNotFoundError


# Remote recipes

def get_recipe(db: Session, recipe_id: int) -> Optional[models.Recipe]:
    return db.get(models.Recipe, recipe_id)


def get_recipes(
    db: Session, skip: int = 0, limit: Optional[int] = 100, favorites_only: bool = False
):
    q = db.query(models.Recipe)
    if favorites_only:
        q = q.filter(models.Recipe.is_favorite.is_(True))
    q = q.order_by(models.Recipe.created_at.desc(), models.Recipe.id.desc())
    q = q.offset(skip)
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def upsert_recipe(db: Session, payload: schemas.RecipePayload) -> Tuple[models.Recipe, bool]:
    """Insert the recipe unless one with the same id is already stored.

    Returns the stored record and whether it was created. An existing record
    is left untouched. The caller commits.
    """
    existing = get_recipe(db, payload.id)
    if existing is not None:
        return existing, False
    db_recipe = models.Recipe(**payload.model_dump(by_alias=False))
    db.add(db_recipe)
    # flush so a repeated id later in the same batch is found by get_recipe
    db.flush()
    return db_recipe, True


def require_recipe(db: Session, recipe_id: int) -> models.Recipe:
    db_recipe = get_recipe(db, recipe_id)
    if db_recipe is None:
        raise RecordNotFoundError(f"Recipe {recipe_id} not found")
    return db_recipe


def set_recipe_favorite(db: Session, recipe_id: int, favorite: bool) -> models.Recipe:
    db_recipe = require_recipe(db, recipe_id)
    db_recipe.is_favorite = favorite
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def toggle_recipe_favorite(db: Session, recipe_id: int) -> models.Recipe:
    db_recipe = require_recipe(db, recipe_id)
    return set_recipe_favorite(db, recipe_id, not db_recipe.is_favorite)


def get_favorite_recipes(db: Session) -> List[models.Recipe]:
    return get_recipes(db, limit=None, favorites_only=True)


# Custom recipes

def get_custom_recipe(db: Session, recipe_id: str) -> Optional[models.CustomRecipe]:
    return db.get(models.CustomRecipe, recipe_id)


def require_custom_recipe(db: Session, recipe_id: str) -> models.CustomRecipe:
    db_recipe = get_custom_recipe(db, recipe_id)
    if db_recipe is None:
        raise RecordNotFoundError(f"Custom recipe {recipe_id} not found")
    return db_recipe


def get_custom_recipes(db: Session, favorites_only: bool = False) -> List[models.CustomRecipe]:
    q = db.query(models.CustomRecipe)
    if favorites_only:
        q = q.filter(models.CustomRecipe.is_favorite.is_(True))
    return q.order_by(models.CustomRecipe.created_at.desc()).all()


def _build_ingredients(ingredients: Iterable) -> List[models.CustomIngredient]:
    return [
        models.CustomIngredient(name=ing.name.strip(), amount=ing.amount, unit=ing.unit, position=idx)
        for idx, ing in enumerate(ingredients)
    ]


def create_custom_recipe(
    db: Session,
    *,
    title: str,
    instructions: str,
    cuisine_type: str,
    diet_type: str,
    ingredients: Iterable,
    servings: int = 4,
    ready_in_minutes: int = 30,
    is_favorite: bool = False,
    image: Optional[bytes] = None,
    image_content_type: Optional[str] = None,
) -> models.CustomRecipe:
    db_recipe = models.CustomRecipe(
        title=title,
        instructions=instructions,
        cuisine_type=cuisine_type,
        diet_type=diet_type,
        servings=servings,
        ready_in_minutes=ready_in_minutes,
        is_favorite=is_favorite,
        image=image,
        image_content_type=image_content_type if image is not None else None,
    )
    db_recipe.ingredients = _build_ingredients(ingredients)
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    logger.info("Created custom recipe {} ({})", db_recipe.id, db_recipe.title)
    return db_recipe


def update_custom_recipe(
    db: Session,
    recipe_id: str,
    *,
    title: str,
    instructions: str,
    cuisine_type: str,
    diet_type: str,
    ingredients: Iterable,
    servings: int,
    ready_in_minutes: int,
    is_favorite: bool,
    image: Optional[bytes] = None,
    image_content_type: Optional[str] = None,
) -> models.CustomRecipe:
    """Replace every editable field in one commit. The photo is kept unless a new one is given."""
    db_recipe = require_custom_recipe(db, recipe_id)
    db_recipe.title = title
    db_recipe.instructions = instructions
    db_recipe.cuisine_type = cuisine_type
    db_recipe.diet_type = diet_type
    db_recipe.servings = servings
    db_recipe.ready_in_minutes = ready_in_minutes
    db_recipe.is_favorite = is_favorite
    # delete-orphan removes the old rows
    db_recipe.ingredients = _build_ingredients(ingredients)
    if image is not None:
        db_recipe.image = image
        db_recipe.image_content_type = image_content_type
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def delete_custom_recipe(db: Session, recipe_id: str) -> bool:
    db_recipe = get_custom_recipe(db, recipe_id)
    if not db_recipe:
        return False
    db.delete(db_recipe)
    db.commit()
    logger.info("Deleted custom recipe {}", recipe_id)
    return True


def set_custom_recipe_favorite(db: Session, recipe_id: str, favorite: bool) -> models.CustomRecipe:
    db_recipe = require_custom_recipe(db, recipe_id)
    db_recipe.is_favorite = favorite
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def toggle_custom_recipe_favorite(db: Session, recipe_id: str) -> models.CustomRecipe:
    db_recipe = require_custom_recipe(db, recipe_id)
    return set_custom_recipe_favorite(db, recipe_id, not db_recipe.is_favorite)


def get_favorite_custom_recipes(db: Session) -> List[models.CustomRecipe]:
    return get_custom_recipes(db, favorites_only=True)


def add_custom_ingredient(db: Session, recipe_id: str, name: str, amount: float, unit: str):
    db_recipe = require_custom_recipe(db, recipe_id)
    position = max((i.position for i in db_recipe.ingredients), default=-1) + 1
    ingredient = models.CustomIngredient(name=name.strip(), amount=amount, unit=unit, position=position)
    db_recipe.ingredients.append(ingredient)
    db.commit()
    db.refresh(ingredient)
    return ingredient


def remove_custom_ingredient(db: Session, recipe_id: str, ingredient_id: str) -> bool:
    """Remove one ingredient. A stored recipe keeps at least one."""
    ingredient = (
        db.query(models.CustomIngredient)
        .filter(
            models.CustomIngredient.id == ingredient_id,
            models.CustomIngredient.recipe_id == recipe_id,
        )
        .first()
    )
    if not ingredient:
        return False
    remaining = (
        db.query(models.CustomIngredient)
        .filter(models.CustomIngredient.recipe_id == recipe_id)
        .count()
    )
    if remaining <= 1:
        raise FormValidationError(["ingredients"])
    db.delete(ingredient)
    db.commit()
    return True


def set_custom_recipe_image(
    db: Session, recipe_id: str, image: Optional[bytes], content_type: Optional[str] = None
) -> models.CustomRecipe:
    db_recipe = require_custom_recipe(db, recipe_id)
    db_recipe.image = image
    db_recipe.image_content_type = content_type if image is not None else None
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def clear_custom_recipe_image(db: Session, recipe_id: str) -> models.CustomRecipe:
    return set_custom_recipe_image(db, recipe_id, None)


# Favorites and reset

def get_favorites(db: Session) -> List[Union[models.Recipe, models.CustomRecipe]]:
    """Favorite remote and custom recipes together, newest first."""
    remote = get_favorite_recipes(db)
    custom = get_favorite_custom_recipes(db)
    return sorted([*remote, *custom], key=lambda r: r.created_at, reverse=True)


def reset_all(db: Session) -> None:
    """Delete every stored recipe, custom recipe and ingredient."""
    db.query(models.CustomIngredient).delete()
    db.query(models.CustomRecipe).delete()
    db.query(models.Recipe).delete()
    db.commit()
    logger.info("All stored recipes deleted")
