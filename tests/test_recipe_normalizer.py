import pytest
from bs4 import BeautifulSoup

from recipe_export.app.core.errors import (
    FetchTimeoutError,
    InvalidInputError,
    MalformedInputError,
    NoRecipeDataError,
)
from recipe_export.app.services import recipe_normalizer
from recipe_export.app.services.extraction.extractors import extract_fallback_recipe
from recipe_export.app.services.extraction.models import Step

SOURCE_URL = "https://www.mindfulchef.com/healthy-recipes/sweet-sour-salmon-traybake"


def test_salmon_structured_data_scenario(salmon_page):
    recipe = recipe_normalizer.normalize_markup(salmon_page)
    assert recipe.name == "Salmon Traybake"
    assert recipe.ingredients == ["200g salmon", "1 lemon"]
    assert recipe.instructions == [Step(title="", items=["Step one. Step two."])]


def test_structured_data_wins_over_dom_fallback(json_ld_page, dom_only_page):
    body = dom_only_page.split("<body>", 1)[1].rsplit("</body>", 1)[0]
    page = json_ld_page(
        {
            "@type": "Recipe",
            "name": "Salmon Traybake",
            "recipeIngredient": ["200g salmon", "1 lemon"],
            "recipeInstructions": ["Roast.", "Serve."],
            "nutrition": {"calories": "510"},
        },
        body,
    )
    recipe = recipe_normalizer.normalize_markup(page)
    assert recipe.name == "Salmon Traybake"
    assert recipe.ingredients == ["200g salmon", "1 lemon"]
    assert recipe.instructions == [Step(items=["Roast.", "Serve."])]
    assert recipe.nutrition.calories == "510"
    # Fields the structured data leaves empty come from the page.
    assert recipe.description == "A zingy traybake with crisp peppers."
    assert recipe.serving_size == "2 people"
    assert recipe.nutrition.carbohydrate == "40g"


def test_without_structured_data_matches_dom_fallback(dom_only_page):
    recipe = recipe_normalizer.normalize_markup(dom_only_page)
    assert recipe == extract_fallback_recipe(BeautifulSoup(dom_only_page, "lxml"))


def test_unparseable_block_falls_back_to_dom(json_ld_page):
    page = json_ld_page('{"@type": "Recipe", "name": ', "<h1>Fallback curry</h1>")
    recipe = recipe_normalizer.normalize_markup(page)
    assert recipe.name == "Fallback curry"


def test_nutrition_dom_fallback_scenario():
    page = """
    <html><body>
      <h1>Veggie chilli</h1>
      <span data-testid="recipe-details-info-name">Calories</span>
      <span data-testid="recipe-details-info-value">450</span>
    </body></html>
    """
    recipe = recipe_normalizer.normalize_markup(page)
    assert recipe.nutrition.calories == "450"
    assert recipe.nutrition.protein == ""
    assert recipe.nutrition.carbohydrate == ""
    assert recipe.nutrition.fat == ""


def test_rendering_is_idempotent(dom_only_page):
    first = recipe_normalizer.render_extracted(dom_only_page)
    second = recipe_normalizer.render_extracted(dom_only_page)
    assert first.html == second.html
    assert first.name == "Sweet & sour salmon traybake"


def test_nothing_extractable_raises():
    with pytest.raises(NoRecipeDataError):
        recipe_normalizer.normalize_markup("<html><body><div>Nothing to see</div></body></html>")


def test_empty_markup_is_malformed():
    with pytest.raises(MalformedInputError):
        recipe_normalizer.normalize_markup("")
    with pytest.raises(MalformedInputError):
        recipe_normalizer.normalize_markup("   \n ")


def test_markup_without_elements_is_malformed():
    with pytest.raises(MalformedInputError):
        recipe_normalizer.normalize_markup("<html><body></body></html>")


@pytest.mark.asyncio
async def test_extract_recipe_returns_sanitized_html(make_fetcher, salmon_page):
    fetcher = make_fetcher(salmon_page)
    result = await recipe_normalizer.extract_recipe(SOURCE_URL, fetcher=fetcher)
    assert result.name == "Salmon Traybake"
    assert result.html == (
        "<h1>Salmon Traybake</h1>"
        "<h2>Ingredients</h2><ul><li>200g salmon</li><li>1 lemon</li></ul>"
        "<h2>Cooking Instructions</h2><ol><li>Step one. Step two.</li></ol>"
    )
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_extract_recipe_rejects_other_sites_before_fetching(make_fetcher):
    fetcher = make_fetcher("<h1>Should not be fetched</h1>")
    with pytest.raises(InvalidInputError):
        await recipe_normalizer.extract_recipe("https://not-the-source.example.com/x", fetcher=fetcher)
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_extract_recipe_propagates_fetch_errors(make_fetcher):
    fetcher = make_fetcher(error=FetchTimeoutError("Timed out loading page"))
    with pytest.raises(FetchTimeoutError):
        await recipe_normalizer.extract_recipe(SOURCE_URL, fetcher=fetcher)
