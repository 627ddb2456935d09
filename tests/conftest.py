# flake8: noqa
import os
import sys
from pathlib import Path

# Ensure project root is on sys.path so `whatsfordinner` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

# Must be set before whatsfordinner.config is imported
os.environ["WFD_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["WFD_SPOONACULAR_API_KEY"] = "test-key"
os.environ["WFD_LOG_LEVEL"] = "ERROR"

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from whatsfordinner.db import Base, init_db
from whatsfordinner.spoonacular import SpoonacularClient


# Use StaticPool so the same in-memory database is shared across connections
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_URL = "https://api.spoonacular.test"

PASTA = {
    "id": 715538,
    "title": "Bruschetta Style Pork & Pasta",
    "image": "https://img.spoonacular.com/recipes/715538-556x370.jpg",
    "imageType": "jpg",
    "servings": 5,
    "readyInMinutes": 35,
    "sourceName": "Foodista",
    "sourceUrl": "https://www.foodista.com/recipe/bruschetta-pork-pasta",
    "healthScore": 20.0,
    "spoonacularScore": 87.5,
    "pricePerServing": 164.12,
    "cheap": False,
    "cuisines": ["Mediterranean", "Italian"],
    "dairyFree": True,
    "glutenFree": False,
    "vegetarian": False,
    "vegan": False,
    "dishTypes": ["lunch", "main course"],
    "instructions": "Cook the pasta. Brown the pork. Toss with the tomatoes.",
    "summary": "A <b>quick</b> weeknight pasta.",
}

CURRY = {
    "id": 716426,
    "title": "Cauliflower, Brown Rice, and Vegetable Fried Rice",
    "servings": 8,
    "readyInMinutes": 30,
    "cuisines": ["Asian"],
    "vegetarian": True,
    "vegan": True,
    "glutenFree": True,
    "dairyFree": True,
}


class FakeSpoonacular:
    """httpx MockTransport handler answering by URL path."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get(request.url.path)
        if answer is None:
            return httpx.Response(404, json={"status": "failure", "message": "not found"})
        if isinstance(answer, Exception):
            raise answer
        return answer

    @property
    def last_params(self):
        return dict(self.requests[-1].url.params)

    def make_client(self, **kwargs) -> SpoonacularClient:
        kwargs.setdefault("api_key", "test-key")
        kwargs.setdefault("base_url", BASE_URL)
        return SpoonacularClient(http_client=httpx.Client(transport=httpx.MockTransport(self)), **kwargs)


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    init_db(bind=engine)
    yield


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_api():
    return FakeSpoonacular()
