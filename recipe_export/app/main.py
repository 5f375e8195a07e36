import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from recipe_export.app.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from recipe_export.app.api.routes import api_router
from recipe_export.app.core.config import get_settings
from recipe_export.app.core.errors import (
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
    MalformedInputError,
    NoRecipeDataError,
    RecipeExportError,
)
from recipe_export.app.services.extraction.page_fetcher import BrowserPool

logger = logging.getLogger(__name__)

# Checked in order; subclasses come before their parents.
ERROR_STATUS = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (NoRecipeDataError, 422),
    (MalformedInputError, 422),
    (FetchTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (FetchError, status.HTTP_502_BAD_GATEWAY),
)


async def recipe_export_error_handler(request: Request, exc: RecipeExportError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logger.exception("Recipe export failed for %s", request.url.path, exc_info=exc)
    else:
        logger.warning("Recipe export rejected for %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"error_code": exc.error_code, "error": str(exc)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    pool = None
    if settings.fetch_backend == "playwright" and settings.browser_pool_size > 0:
        pool = BrowserPool(settings.browser_pool_size, settings)
        await pool.start()
    app.state.browser_pool = pool
    try:
        yield
    finally:
        if pool is not None:
            await pool.close()
            logger.info("Browser pool closed")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Recipe Export", version="0.1.0", lifespan=lifespan)
    app.add_exception_handler(RecipeExportError, recipe_export_error_handler)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
