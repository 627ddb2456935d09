from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .normalize import clean_text, join_values, normalize_tag


class SpoonacularModel(BaseModel):
    """Base for payloads decoded from the Spoonacular API (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RecipePayload(SpoonacularModel):
    id: int
    title: str
    image: Optional[str] = None
    image_type: Optional[str] = Field(None, alias="imageType")
    servings: Optional[int] = None
    ready_in_minutes: Optional[int] = Field(None, alias="readyInMinutes")
    source_name: Optional[str] = Field(None, alias="sourceName")
    source_url: Optional[str] = Field(None, alias="sourceUrl")
    spoonacular_source_url: Optional[str] = Field(None, alias="spoonacularSourceUrl")
    health_score: Optional[float] = Field(None, alias="healthScore")
    spoonacular_score: Optional[float] = Field(None, alias="spoonacularScore")
    price_per_serving: Optional[float] = Field(None, alias="pricePerServing")
    cheap: Optional[bool] = None
    credits_text: Optional[str] = Field(None, alias="creditsText")
    cuisines: Optional[List[str]] = None
    dairy_free: Optional[bool] = Field(None, alias="dairyFree")
    gluten_free: Optional[bool] = Field(None, alias="glutenFree")
    instructions: Optional[str] = None
    summary: Optional[str] = None
    vegetarian: Optional[bool] = None
    vegan: Optional[bool] = None
    dish_types: Optional[List[str]] = Field(None, alias="dishTypes")


class RandomRecipeResponse(SpoonacularModel):
    recipes: List[RecipePayload]


class RecipeSearchResponse(SpoonacularModel):
    results: List[RecipePayload]
    offset: int = 0
    number: int = 0
    total_results: int = Field(0, alias="totalResults")


class ExtendedIngredient(SpoonacularModel):
    id: Optional[int] = None
    aisle: Optional[str] = None
    image: Optional[str] = None
    consistency: Optional[str] = None
    name: str
    original: str = ""
    original_name: Optional[str] = Field(None, alias="originalName")
    amount: float = 0.0
    unit: str = ""
    meta: List[str] = Field(default_factory=list)


class StepItem(SpoonacularModel):
    id: int
    name: str
    localized_name: Optional[str] = Field(None, alias="localizedName")
    image: Optional[str] = None


class Length(SpoonacularModel):
    number: int
    unit: str


class Step(SpoonacularModel):
    number: int
    step: str
    ingredients: List[StepItem] = Field(default_factory=list)
    equipment: List[StepItem] = Field(default_factory=list)
    length: Optional[Length] = None


class AnalyzedInstruction(SpoonacularModel):
    name: str = ""
    steps: List[Step] = Field(default_factory=list)


class RecipeDetail(RecipePayload):
    """Full recipe information, shown on the detail screen but never stored."""

    aggregate_likes: Optional[int] = Field(None, alias="aggregateLikes")
    extended_ingredients: List[ExtendedIngredient] = Field(
        default_factory=list, alias="extendedIngredients"
    )
    analyzed_instructions: List[AnalyzedInstruction] = Field(
        default_factory=list, alias="analyzedInstructions"
    )


class RecipeFilters(BaseModel):
    main_ingredient: str = Field("", json_schema_extra={"example": "chicken"})
    cuisine: str = Field("", json_schema_extra={"example": "italian"})
    max_ready_time: Optional[int] = Field(None, gt=0)
    dietary_restrictions: List[str] = Field(
        default_factory=list, json_schema_extra={"example": ["gluten free"]}
    )

    def random_tags(self) -> List[str]:
        """Tags for the random endpoint: ingredient, cuisine, then restrictions."""
        tags = [clean_text(self.main_ingredient), clean_text(self.cuisine)]
        tags.extend(normalize_tag(r) for r in self.dietary_restrictions)
        return [t for t in tags if t]

    def diet(self) -> Optional[str]:
        return join_values(self.dietary_restrictions) or None


class SearchRequest(BaseModel):
    query: str = Field("", json_schema_extra={"example": "pasta"})
    filters: RecipeFilters = Field(default_factory=RecipeFilters)


class Recipe(BaseModel):
    kind: Literal["remote"] = "remote"
    id: int
    title: str
    image: Optional[str] = None
    image_type: Optional[str] = None
    servings: Optional[int] = None
    ready_in_minutes: Optional[int] = None
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    spoonacular_source_url: Optional[str] = None
    health_score: Optional[float] = None
    spoonacular_score: Optional[float] = None
    price_per_serving: Optional[float] = None
    cheap: Optional[bool] = None
    credits_text: Optional[str] = None
    cuisines: Optional[List[str]] = None
    dairy_free: Optional[bool] = None
    gluten_free: Optional[bool] = None
    vegetarian: Optional[bool] = None
    vegan: Optional[bool] = None
    dish_types: Optional[List[str]] = None
    instructions: Optional[str] = None
    summary: Optional[str] = None
    is_favorite: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomIngredientBase(BaseModel):
    name: str
    amount: float
    unit: str


class CustomIngredientCreate(CustomIngredientBase):
    pass


class CustomIngredient(CustomIngredientBase):
    id: str

    model_config = ConfigDict(from_attributes=True)


class CustomRecipe(BaseModel):
    kind: Literal["custom"] = "custom"
    id: str
    title: str
    has_image: bool = False
    servings: int
    ready_in_minutes: int
    instructions: str
    cuisine_type: str
    diet_type: str
    is_favorite: bool = False
    created_at: datetime
    ingredients: List[CustomIngredient] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
