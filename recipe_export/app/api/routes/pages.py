from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette import status

from recipe_export.app.api.deps import get_page_store
from recipe_export.app.services.page_builder import NOT_FOUND_HTML
from recipe_export.app.services.storage.base import RecipePageStore

router = APIRouter(tags=["pages"])


@router.get("/recipe/{slug}", response_class=HTMLResponse)
def show_recipe_page(slug: str, store: RecipePageStore = Depends(get_page_store)):
    page = store.lookup(slug)
    if page is None:
        return HTMLResponse(NOT_FOUND_HTML, status_code=status.HTTP_404_NOT_FOUND)
    return HTMLResponse(page.html)
