"""Error taxonomy for recipe extraction.

Callers surface ``str(exc)`` to the user unchanged; ``error_code`` is the
machine-readable counterpart used by the HTTP layer.
"""


class RecipeExportError(Exception):
    error_code = "recipe_export_error"


class InvalidInputError(RecipeExportError, ValueError):
    """The URL is malformed or does not belong to the supported site."""

    error_code = "invalid_url"


class FetchError(RecipeExportError):
    """Transport or rendering failure while loading the page."""

    error_code = "fetch_failed"


class FetchTimeoutError(FetchError):
    error_code = "fetch_timeout"


class NoRecipeDataError(RecipeExportError):
    """The page loaded but no name, ingredients or instructions were found."""

    error_code = "no_recipe_data"


class MalformedInputError(RecipeExportError):
    error_code = "malformed_input"
