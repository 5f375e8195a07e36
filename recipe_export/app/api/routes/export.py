import logging

from fastapi import APIRouter, Depends

from recipe_export.app.api.deps import get_page_fetcher, get_page_store, get_static_writer
from recipe_export.app.schemas.export import (
    ConvertResponse,
    GenerateRecipeResponse,
    GenerateStaticResponse,
    RecipeUrlRequest,
    TriggerBuildResponse,
)
from recipe_export.app.services import page_builder, recipe_normalizer
from recipe_export.app.services.extraction.page_fetcher import PageFetcher
from recipe_export.app.services.storage.base import RecipePageStore, StaticPageWriter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["export"])


@router.post("/convert", response_model=ConvertResponse)
async def convert_recipe(
    payload: RecipeUrlRequest,
    fetcher: PageFetcher = Depends(get_page_fetcher),
):
    result = await recipe_normalizer.extract_recipe(payload.url, fetcher=fetcher)
    return ConvertResponse(html=result.html)


@router.post("/generate-recipe", response_model=GenerateRecipeResponse)
async def generate_recipe_page(
    payload: RecipeUrlRequest,
    fetcher: PageFetcher = Depends(get_page_fetcher),
    store: RecipePageStore = Depends(get_page_store),
):
    result = await recipe_normalizer.extract_recipe(payload.url, fetcher=fetcher)
    slug = page_builder.generate_slug(result.name)
    store.insert(slug, page_builder.build_recipe_document(result.name, result.html))
    logger.info("Stored recipe page %s", slug)
    return GenerateRecipeResponse(url=f"/recipe/{slug}", name=result.name)


@router.post("/generate-static", response_model=GenerateStaticResponse)
async def generate_static_page(
    payload: RecipeUrlRequest,
    fetcher: PageFetcher = Depends(get_page_fetcher),
    writer: StaticPageWriter = Depends(get_static_writer),
):
    result = await recipe_normalizer.extract_recipe(payload.url, fetcher=fetcher)
    filename = writer.write(result.name, result.html)
    return GenerateStaticResponse(
        url=f"/recipes/{filename}",
        message=f"Recipe saved as {filename}",
    )


@router.post("/trigger-build", response_model=TriggerBuildResponse)
def trigger_build(
    store: RecipePageStore = Depends(get_page_store),
    writer: StaticPageWriter = Depends(get_static_writer),
):
    count = page_builder.publish_store(store, writer)
    return TriggerBuildResponse(message="Build triggered successfully", recipes_generated=count)
