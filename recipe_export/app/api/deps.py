from fastapi import Request

from recipe_export.app.core.config import get_settings
from recipe_export.app.services.extraction.page_fetcher import PageFetcher, create_page_fetcher
from recipe_export.app.services.storage.base import RecipePageStore, StaticPageWriter
from recipe_export.app.services.storage.local import LocalStaticPageWriter
from recipe_export.app.services.storage.memory import InMemoryRecipePageStore

# Shared by every request in this process; see InMemoryRecipePageStore on expiry.
_page_store = InMemoryRecipePageStore()


def get_page_fetcher(request: Request) -> PageFetcher:
    pool = getattr(request.app.state, "browser_pool", None)
    return create_page_fetcher(get_settings(), pool=pool)


def get_page_store() -> RecipePageStore:
    return _page_store


def get_static_writer() -> StaticPageWriter:
    settings = get_settings()
    return LocalStaticPageWriter(settings.static_output_dir)
