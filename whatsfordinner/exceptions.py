"""Domain-specific exceptions for What's For Dinner."""

from typing import Iterable, List


class WhatsForDinnerError(Exception):
    """Base exception for all application errors."""


class RecipeAPIError(WhatsForDinnerError):
    """Error talking to the recipe API. The message is safe to show to users."""


class RequestBuildError(RecipeAPIError):
    """The request URL could not be built (missing key, bad base URL)."""


class TransportError(RecipeAPIError):
    """Network failure or non-success status from the recipe API."""


class DecodeError(RecipeAPIError):
    """The recipe API returned a body we could not decode."""


class NoResultsError(RecipeAPIError):
    """The recipe API returned nothing for the selected filters."""


class RecordNotFoundError(WhatsForDinnerError):
    """A stored recipe or ingredient does not exist."""


class ImageTooLargeError(WhatsForDinnerError):
    """An uploaded recipe photo exceeds the configured size limit."""


class FormValidationError(WhatsForDinnerError):
    """A recipe or ingredient form is missing required fields."""

    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = list(missing)
        super().__init__("Missing required fields: " + ", ".join(self.missing))
