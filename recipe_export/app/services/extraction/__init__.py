"""Recipe extraction package.

Structured JSON-LD data is read first; positional DOM queries fill any field
it leaves empty. The merged record is rendered to sanitized HTML.
"""

from recipe_export.app.services.extraction.merge import merge_recipes
from recipe_export.app.services.extraction.models import (
    ExtractedRecipe,
    Nutrition,
    Recipe,
    Step,
)
from recipe_export.app.services.extraction.page_fetcher import (
    BrowserPool,
    HttpPageFetcher,
    PageFetcher,
    PlaywrightPageFetcher,
    create_page_fetcher,
    validate_source_url,
)
from recipe_export.app.services.extraction.parsing_utils import (
    clean_text,
    normalize_instructions,
    split_narrative_text,
    to_duration,
)
from recipe_export.app.services.extraction.renderer import render_recipe_html, sanitize_html

__all__ = [
    # Models
    "ExtractedRecipe",
    "Nutrition",
    "Recipe",
    "Step",
    # Fetching
    "BrowserPool",
    "HttpPageFetcher",
    "PageFetcher",
    "PlaywrightPageFetcher",
    "create_page_fetcher",
    "validate_source_url",
    # Merging and rendering
    "merge_recipes",
    "render_recipe_html",
    "sanitize_html",
    # Parsing utilities
    "clean_text",
    "normalize_instructions",
    "split_narrative_text",
    "to_duration",
]
