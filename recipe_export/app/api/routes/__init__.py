from fastapi import APIRouter

from recipe_export.app.api.routes import export, pages

api_router = APIRouter()
api_router.include_router(export.router)
api_router.include_router(pages.router)
