import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # SQLite drops tzinfo on the way back, so keep everything naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Recipe(Base):
    """A recipe fetched from Spoonacular, keyed by its Spoonacular id."""

    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(300), nullable=False)
    image = Column(String(500), nullable=True)
    image_type = Column(String(20), nullable=True)
    servings = Column(Integer, nullable=True)
    ready_in_minutes = Column(Integer, nullable=True)
    source_name = Column(String(200), nullable=True)
    source_url = Column(String(500), nullable=True)
    spoonacular_source_url = Column(String(500), nullable=True)
    health_score = Column(Float, nullable=True)
    spoonacular_score = Column(Float, nullable=True)
    price_per_serving = Column(Float, nullable=True)
    cheap = Column(Boolean, nullable=True)
    credits_text = Column(String(300), nullable=True)
    cuisines = Column(JSON, nullable=True)
    dairy_free = Column(Boolean, nullable=True)
    gluten_free = Column(Boolean, nullable=True)
    vegetarian = Column(Boolean, nullable=True)
    vegan = Column(Boolean, nullable=True)
    dish_types = Column(JSON, nullable=True)
    instructions = Column(Text, nullable=True)
    summary = Column(Text, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)


class CustomRecipe(Base):
    """A recipe written by the user."""

    __tablename__ = "custom_recipes"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(300), nullable=False)
    image = Column(LargeBinary, nullable=True)
    image_content_type = Column(String(100), nullable=True)
    servings = Column(Integer, nullable=False, default=4)
    ready_in_minutes = Column(Integer, nullable=False, default=30)
    instructions = Column(Text, nullable=False)
    cuisine_type = Column(String(80), nullable=False)
    diet_type = Column(String(80), nullable=False)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    ingredients = relationship(
        "CustomIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CustomIngredient.position",
    )

    @property
    def has_image(self) -> bool:
        return self.image is not None


class CustomIngredient(Base):
    __tablename__ = "custom_ingredients"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    recipe_id = Column(
        String(36), ForeignKey("custom_recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    amount = Column(Float, nullable=False, default=1.0)
    unit = Column(String(20), nullable=False, default="cup")
    position = Column(Integer, nullable=False, default=0)

    recipe = relationship("CustomRecipe", back_populates="ingredients")
