import json
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .exceptions import NoResultsError
from .spoonacular import SpoonacularClient


def _store(db: Session, payloads: Iterable[schemas.RecipePayload]) -> List[models.Recipe]:
    stored = []
    added = 0
    for payload in payloads:
        record, created = crud.upsert_recipe(db, payload)
        if created:
            added += 1
            logger.info("Added new recipe {} ({})", record.id, record.title)
        else:
            logger.info("Found existing recipe {} in database", record.id)
        stored.append(record)
    db.commit()
    for record in stored:
        db.refresh(record)
    logger.debug("Stored {} recipe(s), {} new", len(stored), added)
    return stored


def fetch_random_recipe(
    db: Session, client: SpoonacularClient, filters: Optional[schemas.RecipeFilters] = None
) -> models.Recipe:
    """Fetch one random recipe matching the filters and store it.

    If the recipe is already stored, the stored record is returned unchanged.
    Raises a RecipeAPIError subclass before touching the database when the
    request fails.
    """
    filters = filters or schemas.RecipeFilters()
    response = client.random_recipes(tags=filters.random_tags(), number=1)
    if not response.recipes:
        raise NoResultsError("No recipes match those filters. Try removing some.")
    return _store(db, response.recipes[:1])[0]


def search_recipes(
    db: Session,
    client: SpoonacularClient,
    query: str,
    filters: Optional[schemas.RecipeFilters] = None,
) -> List[models.Recipe]:
    """Run a complex search and store every result not already present."""
    filters = filters or schemas.RecipeFilters()
    response = client.complex_search(
        query=query.strip(),
        cuisine=filters.cuisine.strip() or None,
        diet=filters.diet(),
        max_ready_time=filters.max_ready_time,
    )
    if not response.results:
        logger.info("Search for {!r} returned no results", query)
        return []
    return _store(db, response.results)


def get_recipe_information(client: SpoonacularClient, recipe_id: int) -> schemas.RecipeDetail:
    return client.recipe_information(recipe_id)


def load_recipes(path):
    """Load raw recipe payloads from a JSON dump.

    The file may hold a plain list, or a Spoonacular response object with a
    ``recipes`` or ``results`` list.

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        list: list of recipe dictionaries.
    """
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("recipes") or data.get("results") or []
    return data


def import_recipes(db: Session, raw_recipes: Iterable[dict]) -> int:
    """Upsert raw API payloads, skipping entries that do not decode. Returns new count."""
    payloads = []
    for raw in raw_recipes:
        try:
            payloads.append(schemas.RecipePayload.model_validate(raw))
        except ValidationError as e:
            rid = raw.get("id") if isinstance(raw, dict) else None
            logger.warning("Skipping undecodable recipe {}: {}", rid, e.error_count())
    before = db.query(models.Recipe).count()
    _store(db, payloads)
    return db.query(models.Recipe).count() - before
