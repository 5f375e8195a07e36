"""Recipe extractors for the structured-data and DOM-fallback passes."""

from recipe_export.app.services.extraction.extractors.dom_fallback import (
    DEFAULT_SELECTORS,
    FallbackSelectors,
    extract_fallback_recipe,
)
from recipe_export.app.services.extraction.extractors.schema_org import (
    extract_structured_recipe,
    find_recipe_block,
    recipe_from_schema_org,
)

__all__ = [
    "DEFAULT_SELECTORS",
    "FallbackSelectors",
    "extract_fallback_recipe",
    "extract_structured_recipe",
    "find_recipe_block",
    "recipe_from_schema_org",
]
