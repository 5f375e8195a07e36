import logging
from typing import Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from recipe_export.app.core.config import Settings, get_settings
from recipe_export.app.core.errors import MalformedInputError, NoRecipeDataError
from recipe_export.app.services.extraction.extractors import (
    DEFAULT_SELECTORS,
    FallbackSelectors,
    extract_fallback_recipe,
    extract_structured_recipe,
)
from recipe_export.app.services.extraction.merge import merge_recipes
from recipe_export.app.services.extraction.models import ExtractedRecipe, Recipe
from recipe_export.app.services.extraction.page_fetcher import (
    PageFetcher,
    create_page_fetcher,
    validate_source_url,
)
from recipe_export.app.services.extraction.renderer import render_recipe_html, sanitize_html

logger = logging.getLogger(__name__)


def _parse_markup(markup: str) -> BeautifulSoup:
    if not isinstance(markup, str) or not markup.strip():
        raise MalformedInputError("Page content is empty or not text")
    try:
        soup = BeautifulSoup(markup, "lxml")
    except ParserRejectedMarkup as exc:
        raise MalformedInputError(f"Page content could not be parsed as HTML: {exc}") from exc
    if soup.find(lambda tag: tag.name not in {"html", "body"}) is None:
        raise MalformedInputError("Page content contains no HTML elements")
    return soup


def normalize_markup(
    markup: str,
    selectors: FallbackSelectors = DEFAULT_SELECTORS,
    split_narrative: Optional[bool] = None,
) -> Recipe:
    """Build the canonical recipe for a rendered page.

    Raises NoRecipeDataError when neither pass finds a name, ingredients or
    instructions.
    """
    if split_narrative is None:
        split_narrative = get_settings().split_narrative_instructions
    soup = _parse_markup(markup)

    structured = extract_structured_recipe(soup, split_narrative=split_narrative)
    fallback = extract_fallback_recipe(soup, selectors)
    recipe = merge_recipes(structured, fallback)

    if not recipe.name and not recipe.ingredients and not recipe.instructions:
        raise NoRecipeDataError("No recipe data found on this page")

    logger.info(
        "Normalized recipe: name=%s, ingredients=%d, instruction blocks=%d, structured=%s",
        recipe.name[:50] or "None",
        len(recipe.ingredients),
        len(recipe.instructions),
        bool(structured.name or structured.ingredients or structured.instructions),
    )
    return recipe


def render_extracted(
    markup: str,
    selectors: FallbackSelectors = DEFAULT_SELECTORS,
    split_narrative: Optional[bool] = None,
) -> ExtractedRecipe:
    recipe = normalize_markup(markup, selectors=selectors, split_narrative=split_narrative)
    return ExtractedRecipe(html=sanitize_html(render_recipe_html(recipe)), name=recipe.name)


async def extract_recipe(
    url: str,
    fetcher: Optional[PageFetcher] = None,
    settings: Optional[Settings] = None,
) -> ExtractedRecipe:
    """Fetch a supported recipe page and return its sanitized HTML and name.

    The URL is validated before any network activity. Fetch errors propagate
    unchanged; there is a single attempt.
    """
    settings = settings or get_settings()
    url = validate_source_url(url, settings)
    fetcher = fetcher or create_page_fetcher(settings)

    markup = await fetcher.fetch_rendered_markup(url, settings.fetch_timeout_ms)
    return render_extracted(markup, split_narrative=settings.split_narrative_instructions)
