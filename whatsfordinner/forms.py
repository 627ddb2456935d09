"""Recipe and ingredient authoring forms.

A form holds whatever the user has typed so far. Nothing is stored until
``submit`` is called, and ``submit`` refuses while any required field is
empty.
"""

import math
from fractions import Fraction
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .exceptions import FormValidationError
from .normalize import clean_text, is_blank
from .units import DEFAULT_AMOUNT, DEFAULT_UNIT, get_unit, is_valid_unit

FALLBACK_UNIT = "piece"


class IngredientForm(BaseModel):
    name: str = Field("", json_schema_extra={"example": "Tomatoes"})
    amount: float = Field(DEFAULT_AMOUNT, allow_inf_nan=False)
    unit: str = DEFAULT_UNIT

    def missing_fields(self) -> List[str]:
        missing = []
        if is_blank(self.name):
            missing.append("name")
        if self.amount is None or not math.isfinite(self.amount) or self.amount <= 0:
            missing.append("amount")
        if not is_valid_unit(self.unit):
            missing.append("unit")
        return missing

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields()

    def to_schema(self) -> schemas.CustomIngredientCreate:
        return schemas.CustomIngredientCreate(name=clean_text(self.name), amount=self.amount, unit=self.unit)

    def add_to(self, db: Session, recipe_id: str) -> models.CustomIngredient:
        missing = self.missing_fields()
        if missing:
            raise FormValidationError(missing)
        ingredient = self.to_schema()
        return crud.add_custom_ingredient(db, recipe_id, ingredient.name, ingredient.amount, ingredient.unit)


class CustomRecipeForm(BaseModel):
    title: str = Field("", json_schema_extra={"example": "Grandma's Lasagna"})
    servings: int = Field(4, ge=1, le=20)
    ready_in_minutes: int = Field(30, ge=5, le=240)
    instructions: str = ""
    ingredients: List[IngredientForm] = Field(default_factory=list)
    cuisine_type: str = Field("", json_schema_extra={"example": "Italian"})
    diet_type: str = Field("", json_schema_extra={"example": "None"})
    is_favorite: bool = False

    @classmethod
    def from_recipe(cls, recipe: models.CustomRecipe) -> "CustomRecipeForm":
        """Pre-fill an edit form from a stored recipe."""
        return cls(
            title=recipe.title,
            servings=recipe.servings,
            ready_in_minutes=recipe.ready_in_minutes,
            instructions=recipe.instructions,
            ingredients=[
                IngredientForm(name=i.name, amount=i.amount, unit=i.unit) for i in recipe.ingredients
            ],
            cuisine_type=recipe.cuisine_type,
            diet_type=recipe.diet_type,
            is_favorite=recipe.is_favorite,
        )

    def missing_fields(self) -> List[str]:
        missing = []
        if is_blank(self.title):
            missing.append("title")
        if is_blank(self.instructions):
            missing.append("instructions")
        if not self.ingredients:
            missing.append("ingredients")
        for idx, ingredient in enumerate(self.ingredients):
            missing.extend(f"ingredients[{idx}].{p}" for p in ingredient.missing_fields())
        if is_blank(self.cuisine_type):
            missing.append("cuisine_type")
        if is_blank(self.diet_type):
            missing.append("diet_type")
        return missing

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields()

    def add_ingredient(self, ingredient: IngredientForm) -> None:
        missing = ingredient.missing_fields()
        if missing:
            raise FormValidationError(missing)
        self.ingredients.append(ingredient)

    def remove_ingredient(self, index: int) -> None:
        del self.ingredients[index]

    def submit(
        self,
        db: Session,
        recipe_id: Optional[str] = None,
        image: Optional[bytes] = None,
        image_content_type: Optional[str] = None,
    ) -> models.CustomRecipe:
        """Create a new recipe, or replace the fields of ``recipe_id``."""
        missing = self.missing_fields()
        if missing:
            raise FormValidationError(missing)

        fields = dict(
            title=clean_text(self.title),
            instructions=self.instructions.strip(),
            cuisine_type=clean_text(self.cuisine_type),
            diet_type=clean_text(self.diet_type),
            ingredients=[i.to_schema() for i in self.ingredients],
            servings=self.servings,
            ready_in_minutes=self.ready_in_minutes,
            is_favorite=self.is_favorite,
        )
        if recipe_id is None:
            return crud.create_custom_recipe(
                db, image=image, image_content_type=image_content_type, **fields
            )
        return crud.update_custom_recipe(
            db, recipe_id, image=image, image_content_type=image_content_type, **fields
        )


def _parse_amount(token: str) -> Optional[float]:
    try:
        value = float(Fraction(token))
    except (ValueError, ZeroDivisionError, OverflowError):
        return None
    return value if math.isfinite(value) and value > 0 else None


def parse_ingredient_lines(text: str) -> List[IngredientForm]:
    """Parse "<amount> <unit> <name>" lines from a textarea. Blank lines are ignored.

    "2 cups flour" -> 2.0 cup flour; "3 eggs" -> 3.0 piece eggs;
    "salt" -> 1.0 piece salt.
    """
    forms = []
    for line in (text or "").splitlines():
        tokens = line.split()
        if not tokens:
            continue
        amount = _parse_amount(tokens[0])
        if amount is None:
            forms.append(IngredientForm(name=" ".join(tokens), amount=DEFAULT_AMOUNT, unit=FALLBACK_UNIT))
            continue
        rest = tokens[1:]
        unit = get_unit(rest[0]) if rest else None
        if unit is not None and len(rest) > 1:
            forms.append(IngredientForm(name=" ".join(rest[1:]), amount=amount, unit=unit.code))
        else:
            forms.append(IngredientForm(name=" ".join(rest), amount=amount, unit=FALLBACK_UNIT))
    return forms
