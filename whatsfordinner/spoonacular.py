"""Thin client for the Spoonacular recipe API.

Every call is a single GET. Failures are raised as ``RecipeAPIError``
subclasses carrying a message that can be shown to the user; nothing is
retried.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from .config import settings
from .exceptions import DecodeError, RequestBuildError, TransportError
from .normalize import join_values
from .schemas import RandomRecipeResponse, RecipeDetail, RecipeSearchResponse

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class SpoonacularClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Create a client.

        Args:
            api_key: Spoonacular API key, defaults to ``WFD_SPOONACULAR_API_KEY``.
            base_url: API root, defaults to ``https://api.spoonacular.com``.
            timeout: Request timeout in seconds.
            http_client: Pre-built ``httpx.Client`` (tests pass one with a
                mock transport).
        """
        self.api_key = api_key if api_key is not None else settings.spoonacular_api_key
        self.base_url = (base_url or settings.spoonacular_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._http = http_client or httpx.Client(timeout=self.timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SpoonacularClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # endpoints
    def random_recipes(self, tags: Optional[List[str]] = None, number: int = 1) -> RandomRecipeResponse:
        params: Dict[str, Any] = {"number": number}
        joined = join_values(tags)
        if joined:
            params["tags"] = joined
        return self._get("/recipes/random", params, RandomRecipeResponse)

    def complex_search(
        self,
        query: str,
        cuisine: Optional[str] = None,
        diet: Optional[str] = None,
        max_ready_time: Optional[int] = None,
        number: Optional[int] = None,
    ) -> RecipeSearchResponse:
        params: Dict[str, Any] = {
            "query": query,
            "addRecipeInformation": "true",
            "number": number or settings.search_page_size,
        }
        if cuisine:
            params["cuisine"] = cuisine
        if diet:
            params["diet"] = diet
        if max_ready_time is not None:
            params["maxReadyTime"] = max_ready_time
        return self._get("/recipes/complexSearch", params, RecipeSearchResponse)

    def recipe_information(self, recipe_id: int) -> RecipeDetail:
        return self._get(f"/recipes/{recipe_id}/information", {}, RecipeDetail)

    # helpers
    def _build_url(self, path: str) -> httpx.URL:
        if not self.api_key:
            raise RequestBuildError(
                "No Spoonacular API key configured. Set WFD_SPOONACULAR_API_KEY."
            )
        try:
            url = httpx.URL(self.base_url + path)
        except (httpx.InvalidURL, TypeError) as e:
            raise RequestBuildError(f"Could not create URL for {path}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise RequestBuildError(f"Could not create URL from {self.base_url!r}")
        return url

    def _get(self, path: str, params: Dict[str, Any], model: Type[ResponseT]) -> ResponseT:
        url = self._build_url(path)
        query = {"apiKey": self.api_key, **params}
        logger.debug("GET {} params={}", url, params)

        try:
            response = self._http.get(url, params=query)
        except httpx.HTTPError as e:
            logger.warning("Recipe API request to {} failed: {}", path, e)
            raise TransportError("Could not reach the recipe service. Please try again.") from e

        if response.status_code == 402:
            raise TransportError("The daily recipe quota has been used up. Try again tomorrow.")
        if response.is_error:
            logger.warning("Recipe API {} returned HTTP {}", path, response.status_code)
            raise TransportError(
                f"The recipe service returned an error (HTTP {response.status_code})."
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Recipe API {} returned a non-JSON body", path)
            raise DecodeError("Could not read the recipe data that was returned.") from e
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning("Recipe API {} returned an unexpected shape: {}", path, e.error_count())
            raise DecodeError("Could not read the recipe data that was returned.") from e


__all__ = ["SpoonacularClient"]
