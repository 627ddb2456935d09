from contextlib import asynccontextmanager
from typing import List, Optional, Union

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from loguru import logger
from sqlalchemy.orm import Session

from . import crud, models, recipes, schemas, units
from .config import settings
from .db import get_db, init_db
from .exceptions import (
    FormValidationError,
    ImageTooLargeError,
    NoResultsError,
    RecipeAPIError,
    RecordNotFoundError,
    RequestBuildError,
)
from .forms import CustomRecipeForm, IngredientForm, parse_ingredient_lines
from .logging_setup import setup_logging
from .spoonacular import SpoonacularClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    logger.info("What's For Dinner started")
    yield


app = FastAPI(title="What's For Dinner", version="1.0.0", lifespan=lifespan)


def get_client():
    client = SpoonacularClient()
    try:
        yield client
    finally:
        client.close()


# Errors are turned into a short message for the user; nothing is retried.

@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(RecipeAPIError)
async def recipe_api_handler(request: Request, exc: RecipeAPIError):
    if isinstance(exc, NoResultsError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, RequestBuildError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY
    logger.warning("{} on {}: {}", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.exception_handler(FormValidationError)
async def form_validation_handler(request: Request, exc: FormValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "missing": exc.missing},
    )


@app.exception_handler(ImageTooLargeError)
async def image_too_large_handler(request: Request, exc: ImageTooLargeError):
    return JSONResponse(status_code=413, content={"detail": str(exc)})


def _to_schema(record: Union[models.Recipe, models.CustomRecipe]):
    if isinstance(record, models.CustomRecipe):
        return schemas.CustomRecipe.model_validate(record)
    return schemas.Recipe.model_validate(record)


def _read_image(upload: Optional[UploadFile]):
    """Return (bytes, content_type), or (None, None) when no file was chosen."""
    if upload is None:
        return None, None
    data = upload.file.read(settings.max_image_bytes + 1)
    if not data:
        return None, None
    if len(data) > settings.max_image_bytes:
        raise ImageTooLargeError(
            f"Photo is larger than {settings.max_image_bytes // (1024 * 1024)} MB"
        )
    return data, upload.content_type or "application/octet-stream"


@app.get("/api/options")
def get_options():
    return units.options()


# Remote recipes

@app.get("/api/recipes", response_model=List[schemas.Recipe])
def list_recipes(
    favorites: bool = False, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)
):
    return crud.get_recipes(db, skip=skip, limit=limit, favorites_only=favorites)


@app.post("/api/recipes/random", response_model=schemas.Recipe)
def random_recipe(
    filters: Optional[schemas.RecipeFilters] = None,
    db: Session = Depends(get_db),
    client: SpoonacularClient = Depends(get_client),
):
    return recipes.fetch_random_recipe(db, client, filters)


@app.post("/api/recipes/search", response_model=List[schemas.Recipe])
def search(
    body: schemas.SearchRequest,
    db: Session = Depends(get_db),
    client: SpoonacularClient = Depends(get_client),
):
    return recipes.search_recipes(db, client, body.query, body.filters)


@app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def get_recipe(recipe_id: int, db: Session = Depends(get_db)):
    return crud.require_recipe(db, recipe_id)


@app.get(
    "/api/recipes/{recipe_id}/information",
    response_model=schemas.RecipeDetail,
    response_model_by_alias=False,
)
def recipe_information(recipe_id: int, client: SpoonacularClient = Depends(get_client)):
    return recipes.get_recipe_information(client, recipe_id)


@app.post("/api/recipes/{recipe_id}/favorite", response_model=schemas.Recipe)
def toggle_favorite(recipe_id: int, db: Session = Depends(get_db)):
    return crud.toggle_recipe_favorite(db, recipe_id)


@app.put("/api/recipes/{recipe_id}/favorite", response_model=schemas.Recipe)
def add_favorite(recipe_id: int, db: Session = Depends(get_db)):
    return crud.set_recipe_favorite(db, recipe_id, True)


@app.delete("/api/recipes/{recipe_id}/favorite", response_model=schemas.Recipe)
def remove_favorite(recipe_id: int, db: Session = Depends(get_db)):
    return crud.set_recipe_favorite(db, recipe_id, False)


@app.get("/api/favorites", response_model=List[Union[schemas.Recipe, schemas.CustomRecipe]])
def favorites(custom: bool = False, db: Session = Depends(get_db)):
    # custom=true is the "My Recipes" tab: every custom recipe, favorite or not
    records = crud.get_custom_recipes(db) if custom else crud.get_favorites(db)
    return [_to_schema(r) for r in records]


# Custom recipes, JSON

@app.get("/api/custom-recipes", response_model=List[schemas.CustomRecipe])
def list_custom_recipes(favorites: bool = False, db: Session = Depends(get_db)):
    return crud.get_custom_recipes(db, favorites_only=favorites)


@app.post("/api/custom-recipes", response_model=schemas.CustomRecipe, status_code=201)
def create_custom_recipe(form: CustomRecipeForm, db: Session = Depends(get_db)):
    return form.submit(db)


@app.get("/api/custom-recipes/{recipe_id}", response_model=schemas.CustomRecipe)
def get_custom_recipe(recipe_id: str, db: Session = Depends(get_db)):
    return crud.require_custom_recipe(db, recipe_id)


@app.get("/api/custom-recipes/{recipe_id}/form", response_model=CustomRecipeForm)
def edit_form(recipe_id: str, db: Session = Depends(get_db)):
    return CustomRecipeForm.from_recipe(crud.require_custom_recipe(db, recipe_id))


@app.put("/api/custom-recipes/{recipe_id}", response_model=schemas.CustomRecipe)
def update_custom_recipe(recipe_id: str, form: CustomRecipeForm, db: Session = Depends(get_db)):
    crud.require_custom_recipe(db, recipe_id)
    return form.submit(db, recipe_id=recipe_id)


@app.delete("/api/custom-recipes/{recipe_id}")
def delete_custom_recipe(recipe_id: str, db: Session = Depends(get_db)):
    if not crud.delete_custom_recipe(db, recipe_id):
        raise HTTPException(status_code=404, detail="Custom recipe not found")
    return {"deleted": True}


@app.post("/api/custom-recipes/{recipe_id}/favorite", response_model=schemas.CustomRecipe)
def toggle_custom_favorite(recipe_id: str, db: Session = Depends(get_db)):
    return crud.toggle_custom_recipe_favorite(db, recipe_id)


@app.post(
    "/api/custom-recipes/{recipe_id}/ingredients",
    response_model=schemas.CustomIngredient,
    status_code=201,
)
def add_ingredient(recipe_id: str, form: IngredientForm, db: Session = Depends(get_db)):
    return form.add_to(db, recipe_id)


@app.delete("/api/custom-recipes/{recipe_id}/ingredients/{ingredient_id}")
def remove_ingredient(recipe_id: str, ingredient_id: str, db: Session = Depends(get_db)):
    if not crud.remove_custom_ingredient(db, recipe_id, ingredient_id):
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return {"deleted": True}


@app.put("/api/custom-recipes/{recipe_id}/image", response_model=schemas.CustomRecipe)
def upload_image(recipe_id: str, image: UploadFile = File(...), db: Session = Depends(get_db)):
    data, content_type = _read_image(image)
    if data is None:
        raise HTTPException(status_code=400, detail="Empty image upload")
    return crud.set_custom_recipe_image(db, recipe_id, data, content_type)


@app.get("/api/custom-recipes/{recipe_id}/image")
def get_image(recipe_id: str, db: Session = Depends(get_db)):
    db_recipe = crud.require_custom_recipe(db, recipe_id)
    if db_recipe.image is None:
        raise HTTPException(status_code=404, detail="Recipe has no photo")
    return Response(content=db_recipe.image, media_type=db_recipe.image_content_type)


@app.delete("/api/custom-recipes/{recipe_id}/image", response_model=schemas.CustomRecipe)
def delete_image(recipe_id: str, db: Session = Depends(get_db)):
    return crud.clear_custom_recipe_image(db, recipe_id)


@app.delete("/api/data")
def reset_data(db: Session = Depends(get_db)):
    crud.reset_all(db)
    return {"deleted": True}


# Custom recipes, HTML form posts

def _form_from_fields(
    title: str,
    instructions: str,
    cuisine_type: str,
    diet_type: str,
    ingredients: str,
    servings: int,
    ready_in_minutes: int,
    is_favorite: bool,
) -> CustomRecipeForm:
    return CustomRecipeForm(
        title=title,
        instructions=instructions,
        cuisine_type=cuisine_type,
        diet_type=diet_type,
        ingredients=parse_ingredient_lines(ingredients),
        servings=servings,
        ready_in_minutes=ready_in_minutes,
        is_favorite=is_favorite,
    )


@app.post("/custom-recipes")
def create_custom_recipe_form(
    title: str = Form(""),
    instructions: str = Form(""),
    cuisine_type: str = Form(""),
    diet_type: str = Form(""),
    ingredients: str = Form(""),
    servings: int = Form(4, ge=1, le=20),
    ready_in_minutes: int = Form(30, ge=5, le=240),
    is_favorite: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    form = _form_from_fields(
        title, instructions, cuisine_type, diet_type, ingredients, servings, ready_in_minutes, is_favorite
    )
    data, content_type = _read_image(image)
    db_recipe = form.submit(db, image=data, image_content_type=content_type)
    return RedirectResponse(url=f"/api/custom-recipes/{db_recipe.id}", status_code=303)


@app.post("/custom-recipes/{recipe_id}/edit")
def edit_custom_recipe_form(
    recipe_id: str,
    title: str = Form(""),
    instructions: str = Form(""),
    cuisine_type: str = Form(""),
    diet_type: str = Form(""),
    ingredients: str = Form(""),
    servings: int = Form(4, ge=1, le=20),
    ready_in_minutes: int = Form(30, ge=5, le=240),
    is_favorite: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    crud.require_custom_recipe(db, recipe_id)
    form = _form_from_fields(
        title, instructions, cuisine_type, diet_type, ingredients, servings, ready_in_minutes, is_favorite
    )
    data, content_type = _read_image(image)
    form.submit(db, recipe_id=recipe_id, image=data, image_content_type=content_type)
    return RedirectResponse(url=f"/api/custom-recipes/{recipe_id}", status_code=303)


@app.post("/custom-recipes/{recipe_id}/delete")
def delete_custom_recipe_form(recipe_id: str, db: Session = Depends(get_db)):
    if not crud.delete_custom_recipe(db, recipe_id):
        raise HTTPException(status_code=404, detail="Custom recipe not found")
    return RedirectResponse(url="/api/favorites?custom=true", status_code=303)
