import json

import pytest
from fastapi.testclient import TestClient

from recipe_export.app.api.deps import get_page_fetcher, get_page_store, get_static_writer
from recipe_export.app.main import create_app
from recipe_export.app.services.storage.local import LocalStaticPageWriter
from recipe_export.app.services.storage.memory import InMemoryRecipePageStore

SALMON_JSON_LD = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Salmon Traybake",
    "recipeIngredient": ["200g salmon", "1 lemon"],
    "recipeInstructions": "Step one. Step two.",
}

DOM_ONLY_PAGE = """
<html>
  <head><title>Sweet and sour salmon | Mindful Chef</title></head>
  <body>
    <h1>Sweet &amp; sour salmon traybake</h1>
    <p>A zingy traybake with crisp peppers.</p>
    <img alt="Salmon traybake" src="https://cdn.example.com/salmon.jpg">
    <div class="portions">
      <label><input type="radio" name="portions" value="2" checked><span data-testid="portion-2-label">2 people</span></label>
      <label><input type="radio" name="portions" value="4"><span data-testid="portion-4-label">4 people</span></label>
    </div>
    <div class="info">
      <span data-testid="recipe-details-info-name">Prep:</span><span data-testid="recipe-details-info-value">15 mins</span>
      <span data-testid="recipe-details-info-name">Calories:</span><span data-testid="recipe-details-info-value">450</span>
      <span data-testid="recipe-details-info-name">Carbs:</span><span data-testid="recipe-details-info-value">40g</span>
    </div>
    <section class="ingredients">
      <ul>
        <li>200g salmon</li>
        <li>1 red pepper</li>
        <li>1 lemon</li>
      </ul>
    </section>
    <h2>Cooking instructions</h2>
    <h3>Roast the veg</h3>
    <ol>
      <li>Heat the oven to 200C.</li>
      <li>Roast the peppers for 10 mins.</li>
    </ol>
    <h3>Cook the salmon</h3>
    <p>Add the salmon and roast for 12 mins.</p>
    <h2>You may also like</h2>
    <p>Something unrelated.</p>
  </body>
</html>
"""


def page_with_json_ld(data, body: str = "") -> str:
    payload = data if isinstance(data, str) else json.dumps(data)
    return (
        "<html><head>"
        f'<script type="application/ld+json">{payload}</script>'
        f"</head><body>{body}</body></html>"
    )


class FakePageFetcher:
    def __init__(self, markup: str = "", error: Exception | None = None):
        self.markup = markup
        self.error = error
        self.calls = []

    async def fetch_rendered_markup(self, url: str, timeout_ms: int) -> str:
        self.calls.append((url, timeout_ms))
        if self.error is not None:
            raise self.error
        return self.markup


@pytest.fixture
def json_ld_page():
    return page_with_json_ld


@pytest.fixture
def make_fetcher():
    return FakePageFetcher


@pytest.fixture
def salmon_page():
    return page_with_json_ld(SALMON_JSON_LD)


@pytest.fixture
def dom_only_page():
    return DOM_ONLY_PAGE


@pytest.fixture
def fake_fetcher(salmon_page):
    return FakePageFetcher(salmon_page)


@pytest.fixture
def page_store():
    return InMemoryRecipePageStore()


@pytest.fixture
def app(fake_fetcher, page_store, tmp_path):
    app = create_app()
    app.dependency_overrides[get_page_fetcher] = lambda: fake_fetcher
    app.dependency_overrides[get_page_store] = lambda: page_store
    app.dependency_overrides[get_static_writer] = lambda: LocalStaticPageWriter(tmp_path)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
